from job_tracker.services.auth import (
    hash_password,
    verify_password,
    create_access_token,
    decode_access_token,
    AuthError,
    AuthResult,
)
from job_tracker.services.applications import ApplicationNotFound, ApplicationPage, ResumeUpload
from job_tracker.services.email import send_password_reset_email
from job_tracker.services.oauth import GoogleProfile, OAuthError
from job_tracker.services.storage import InvalidUpload, LocalResumeStorage

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
    "AuthError",
    "AuthResult",
    "ApplicationNotFound",
    "ApplicationPage",
    "ResumeUpload",
    "send_password_reset_email",
    "GoogleProfile",
    "OAuthError",
    "InvalidUpload",
    "LocalResumeStorage",
]
