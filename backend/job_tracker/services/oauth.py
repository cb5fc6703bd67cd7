"""Google OAuth 2.0 authorization-code handoff."""

import logging
import secrets
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from job_tracker.config import get_settings

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GOOGLE_SCOPES = "openid email profile"


class OAuthError(Exception):
    """The provider rejected the exchange or returned an unusable profile."""


@dataclass(frozen=True)
class GoogleProfile:
    google_id: str
    display_name: str
    email: str
    photo: str | None = None


def generate_state() -> str:
    return secrets.token_urlsafe(24)


def build_authorization_url(state: str) -> str:
    """URL of Google's consent page for this app."""
    settings = get_settings()
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_callback_url,
        "response_type": "code",
        "scope": GOOGLE_SCOPES,
        "state": state,
        "prompt": "select_account",
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def fetch_google_profile(code: str, client: httpx.Client | None = None) -> GoogleProfile:
    """Exchange an authorization code for the user's Google profile."""
    settings = get_settings()
    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=10.0)

    try:
        token_response = client.post(
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": settings.google_client_id,
                "client_secret": settings.google_client_secret,
                "redirect_uri": settings.google_callback_url,
                "grant_type": "authorization_code",
            },
        )
        token_response.raise_for_status()
        access_token = token_response.json().get("access_token")
        if not access_token:
            raise OAuthError("Google token response did not include an access token")

        userinfo_response = client.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        userinfo_response.raise_for_status()
        userinfo = userinfo_response.json()
    except httpx.HTTPError as e:
        logger.error(f"Google OAuth exchange failed: {e}")
        raise OAuthError("Google sign-in failed") from e
    finally:
        if owns_client:
            client.close()

    if not userinfo.get("sub") or not userinfo.get("email"):
        raise OAuthError("Google profile is missing an id or email")

    return GoogleProfile(
        google_id=userinfo["sub"],
        display_name=userinfo.get("name") or userinfo["email"],
        email=userinfo["email"],
        photo=userinfo.get("picture"),
    )
