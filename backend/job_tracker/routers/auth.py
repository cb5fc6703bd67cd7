import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, status, Response, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from job_tracker.config import get_settings
from job_tracker.dependencies import COOKIE_NAME, get_current_user, get_user_store
from job_tracker.schemas import (
    AuthResponse,
    CurrentUserResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    UserCreate,
    UserResponse,
)
from job_tracker.services import auth as auth_service
from job_tracker.services.auth import AuthError, AuthResult
from job_tracker.services.email import send_password_reset_email
from job_tracker.services.oauth import (
    OAuthError,
    build_authorization_url,
    fetch_google_profile,
    generate_state,
)
from job_tracker.store import UserRecord, UserStore

logger = logging.getLogger(__name__)
router = APIRouter()
settings = get_settings()

OAUTH_STATE_COOKIE = "oauth_state"
OAUTH_STATE_MAX_AGE = 10 * 60
FORGOT_PASSWORD_MESSAGE = "If an account exists with this email, a password reset link has been sent."


def _set_auth_cookie(response: Response, token: str) -> None:
    # Secure only in production (HTTPS)
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        max_age=60 * 60 * settings.jwt_expire_hours,
    )


def _auth_response(message: str, result: AuthResult) -> AuthResponse:
    return AuthResponse(
        message=message,
        user=UserResponse.model_validate(result.user),
        token=result.token,
    )


def _http_error(e: AuthError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    response: Response,
    users: UserStore = Depends(get_user_store),
):
    """Register a new user and return a bearer token."""
    try:
        result = auth_service.register(
            users, user_data.display_name, user_data.email, user_data.password
        )
    except AuthError as e:
        raise _http_error(e)
    except SQLAlchemyError:
        logger.exception("Failed to create user account for %s", user_data.email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to create account. Please try again later."
        )

    _set_auth_cookie(response, result.token)
    return _auth_response("User registered successfully", result)


@router.post("/login", response_model=AuthResponse)
def login(
    login_data: LoginRequest,
    response: Response,
    users: UserStore = Depends(get_user_store),
):
    """Login and receive JWT token (also set as httpOnly cookie)."""
    try:
        result = auth_service.login(users, login_data.email, login_data.password)
    except AuthError as e:
        raise _http_error(e)

    _set_auth_cookie(response, result.token)
    return _auth_response("Login successful", result)


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response):
    """Logout by clearing the auth cookie. Bearer tokens simply get discarded client-side."""
    response.delete_cookie(key=COOKIE_NAME)
    return MessageResponse(message="Logged out successfully")


@router.get("/google")
def google_login():
    """Redirect to Google's consent page."""
    if not settings.google_oauth_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google sign-in is not available right now."
        )

    state = generate_state()
    response = RedirectResponse(url=build_authorization_url(state), status_code=302)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        httponly=True,
        secure=settings.environment == "production",
        samesite="lax",
        max_age=OAUTH_STATE_MAX_AGE,
    )
    return response


@router.get("/google/callback")
def google_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    users: UserStore = Depends(get_user_store),
):
    """Finish Google sign-in and hand the token to the client in the redirect URL."""
    if not settings.google_oauth_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google sign-in is not available right now."
        )

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not state or not expected_state or state != expected_state:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid OAuth state"
        )

    if error or not code:
        logger.info("Google sign-in was not completed: %s", error or "missing code")
        return _client_redirect("/login", error="oauth_cancelled")

    try:
        profile = fetch_google_profile(code)
        result = auth_service.login_with_google(users, profile)
    except OAuthError:
        return _client_redirect("/login", error="oauth_failed")
    except SQLAlchemyError:
        logger.exception("Failed to store Google account")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to sign in with Google. Please try again later."
        )

    response = _client_redirect("/auth-redirect", token=result.token)
    response.delete_cookie(key=OAUTH_STATE_COOKIE)
    return response


def _client_redirect(path: str, **params) -> RedirectResponse:
    return RedirectResponse(url=f"{settings.client_url}{path}?{urlencode(params)}", status_code=302)


@router.get("/user", response_model=CurrentUserResponse)
def current_user(user: UserRecord = Depends(get_current_user)):
    """Get the currently authenticated user."""
    return CurrentUserResponse(user=UserResponse.model_validate(user))


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    request_data: ForgotPasswordRequest,
    users: UserStore = Depends(get_user_store),
):
    """Email a password reset link.

    Always answers the same way so the endpoint can't be used to probe
    which emails have accounts.
    """
    try:
        auth_service.request_password_reset(
            users, request_data.email, send_email=send_password_reset_email
        )
    except SQLAlchemyError:
        logger.exception("Failed to store password reset token")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to process your request. Please try again later."
        )

    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password/{token}", response_model=MessageResponse)
def reset_password(
    token: str,
    request_data: ResetPasswordRequest,
    users: UserStore = Depends(get_user_store),
):
    """Set a new password using the token from the reset email."""
    try:
        auth_service.reset_password(users, token, request_data.password)
    except AuthError as e:
        raise _http_error(e)
    except SQLAlchemyError:
        logger.exception("Failed to reset password")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to reset password. Please try again later."
        )

    return MessageResponse(message="Password has been reset successfully")
