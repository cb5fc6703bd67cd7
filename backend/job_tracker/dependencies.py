from fastapi import Request, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from job_tracker.config import get_settings
from job_tracker.database import get_db
from job_tracker.services.auth import AuthError, authenticate_token
from job_tracker.services.storage import LocalResumeStorage
from job_tracker.store import ApplicationStore, UserRecord, UserStore

COOKIE_NAME = "access_token"

bearer_scheme = HTTPBearer(auto_error=False)


def get_user_store(db: Session = Depends(get_db)) -> UserStore:
    return UserStore(db)


def get_application_store(db: Session = Depends(get_db)) -> ApplicationStore:
    return ApplicationStore(db)


def get_resume_storage() -> LocalResumeStorage:
    settings = get_settings()
    return LocalResumeStorage(
        upload_dir=settings.upload_dir,
        public_base_url=f"{settings.app_url}/uploads",
        max_bytes=settings.max_upload_bytes,
    )


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    users: UserStore = Depends(get_user_store),
) -> UserRecord:
    """Get the current authenticated user. Raises 401 if not authenticated.

    The token comes from ``Authorization: Bearer`` and falls back to the
    httpOnly cookie set at login. Use this as a dependency for protected routes.
    """
    token = credentials.credentials if credentials else request.cookies.get(COOKIE_NAME)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return authenticate_token(users, token)
    except AuthError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
