from job_tracker.schemas.user import CamelModel, UserBase, UserCreate, UserResponse
from job_tracker.schemas.auth import (
    LoginRequest,
    AuthResponse,
    CurrentUserResponse,
    MessageResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
)
from job_tracker.schemas.application import (
    ApplicationBase,
    ApplicationCreate,
    ApplicationUpdate,
    ApplicationResponse,
    ApplicationListResponse,
)

__all__ = [
    "CamelModel",
    "UserBase",
    "UserCreate",
    "UserResponse",
    "LoginRequest",
    "AuthResponse",
    "CurrentUserResponse",
    "MessageResponse",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "ApplicationBase",
    "ApplicationCreate",
    "ApplicationUpdate",
    "ApplicationResponse",
    "ApplicationListResponse",
]
