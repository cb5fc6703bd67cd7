import hashlib
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from passlib.context import CryptContext
from jose import jwt, JWTError
from sqlalchemy.exc import IntegrityError

from job_tracker.config import get_settings
from job_tracker.services.oauth import GoogleProfile
from job_tracker.store import UserRecord, UserStore

settings = get_settings()
logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthError(Exception):
    """Base class for authentication failures that map onto an HTTP response."""

    status_code = 400
    message = "Authentication failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class EmailAlreadyRegistered(AuthError):
    status_code = 409
    message = "Email already registered"


class InvalidCredentials(AuthError):
    status_code = 401
    message = "Invalid email or password"


class InvalidToken(AuthError):
    status_code = 401
    message = "Invalid or expired token"


class InvalidOrExpiredToken(AuthError):
    status_code = 400
    message = "Invalid or expired token"


@dataclass(frozen=True)
class AuthResult:
    user: UserRecord
    token: str


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(hours=settings.jwt_expire_hours)
    to_encode.update({"iat": now, "exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT access token. Returns None if invalid."""
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.jwt_algorithm]
        )
        return payload
    except JWTError:
        return None


def generate_reset_token() -> str:
    """Generate a random password reset token (sent to the user, never stored)."""
    return secrets.token_hex(20)


def hash_reset_token(token: str) -> str:
    """One-way digest of a reset token; only the digest is persisted."""
    return hashlib.sha256(token.encode()).hexdigest()


def _utcnow() -> datetime:
    # Stored timestamps are naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def issue_token(user: UserRecord) -> str:
    return create_access_token(data={"sub": str(user.id)})


def register(store: UserStore, display_name: str, email: str, password: str) -> AuthResult:
    """Create a password account and return it with a fresh token."""
    email = email.lower()
    if store.find_by_email(email):
        raise EmailAlreadyRegistered()

    try:
        user = store.insert(
            display_name=display_name,
            email=email,
            password_hash=hash_password(password),
        )
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        raise EmailAlreadyRegistered()

    logger.info("Registered user %d (%s)", user.id, user.email)
    return AuthResult(user=user, token=issue_token(user))


def login(store: UserStore, email: str, password: str) -> AuthResult:
    user = store.find_by_email(email)
    if not user or not user.has_password or not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return AuthResult(user=user, token=issue_token(user))


def login_with_google(store: UserStore, profile: GoogleProfile) -> AuthResult:
    """Resolve a Google profile to a local account, creating one if needed.

    An account already linked to this Google id wins, even if the Google
    email has changed since. Otherwise email is the join key: a Google login
    for an email that already has a password account attaches the Google
    identity to that account.
    """
    user = store.find_by_google_id(profile.google_id)
    if user is not None:
        return AuthResult(user=user, token=issue_token(user))

    email = profile.email.lower()
    user = store.find_by_email(email)

    if user is None:
        user = store.insert(
            google_id=profile.google_id,
            display_name=profile.display_name or email,
            email=email,
            photo=profile.photo,
        )
        logger.info("Created user %d from Google login", user.id)
    elif user.google_id is None:
        updates = {"google_id": profile.google_id}
        if not user.photo and profile.photo:
            updates["photo"] = profile.photo
        user = store.update_fields(user.id, **updates)
        logger.info("Linked Google identity to user %d", user.id)

    return AuthResult(user=user, token=issue_token(user))


def authenticate_token(store: UserStore, token: str) -> UserRecord:
    """Return the user a bearer token belongs to, or raise InvalidToken."""
    payload = decode_access_token(token)
    if not payload:
        raise InvalidToken()

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise InvalidToken("Invalid token payload")

    user = store.find_by_id(user_id)
    if not user:
        raise InvalidToken("User not found")
    return user


def request_password_reset(
    store: UserStore,
    email: str,
    send_email: Callable[[str, str], bool],
) -> None:
    """Store a hashed reset token for the account and email the raw token.

    Unknown emails are a silent no-op so callers can answer identically
    either way.
    """
    user = store.find_by_email(email)
    if not user:
        logger.info("Password reset requested for unknown email")
        return

    token = generate_reset_token()
    store.update_fields(
        user.id,
        reset_password_token=hash_reset_token(token),
        reset_password_expires=_utcnow() + timedelta(minutes=settings.password_reset_expire_minutes),
    )

    if not send_email(user.email, token):
        logger.warning("Failed to send password reset email for user %d", user.id)


def reset_password(store: UserStore, token: str, new_password: str) -> UserRecord:
    """Redeem a reset token. Tokens are single use and expire."""
    user = store.find_by_reset_token(hash_reset_token(token), now=_utcnow())
    if not user:
        raise InvalidOrExpiredToken()

    user = store.update_fields(
        user.id,
        password_hash=hash_password(new_password),
        reset_password_token=None,
        reset_password_expires=None,
    )
    logger.info("Password reset for user %d", user.id)
    return user
