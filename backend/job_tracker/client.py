"""HTTP client for the Job Tracker API.

Mirrors what the web frontend does: it keeps the bearer token (in memory and,
optionally, in a JSON file so it survives restarts) and a cached list of the
applications loaded so far, page by page.
"""

import json
import logging
import mimetypes
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class JobTrackerClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        http_client: httpx.Client | None = None,
        token_path: str | Path | None = None,
    ):
        self.http = http_client or httpx.Client(base_url=base_url, timeout=30.0)
        self.token_path = Path(token_path) if token_path else None
        self.token: str | None = None
        self.user: dict | None = None
        self.applications: list[dict] = []
        self.has_next_page = True
        self._load_token()

    # Token persistence

    def _load_token(self) -> None:
        if not self.token_path or not self.token_path.exists():
            return
        try:
            data = json.loads(self.token_path.read_text())
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token file {self.token_path}: {e}")
            return
        self.token = data.get("token")

    def _store_token(self, token: str | None) -> None:
        self.token = token
        if not self.token_path:
            return
        if token is None:
            self.token_path.unlink(missing_ok=True)
            return
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(json.dumps({"token": token}))

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    # Plumbing

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, path: str, **kwargs) -> dict:
        response = self.http.request(method, path, headers=self._headers(), **kwargs)
        if response.is_error:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            if response.status_code == 401 and self.token:
                # Expired or revoked: forget it like the frontend does
                self._store_token(None)
            raise ApiError(response.status_code, message)
        return response.json()

    def _accept_auth(self, data: dict) -> dict:
        self._store_token(data["token"])
        self.user = data["user"]
        return self.user

    # Auth

    def register(self, display_name: str, email: str, password: str) -> dict:
        data = self._request(
            "POST",
            "/auth/register",
            json={"displayName": display_name, "email": email, "password": password},
        )
        return self._accept_auth(data)

    def login(self, email: str, password: str) -> dict:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self._accept_auth(data)

    def accept_oauth_token(self, token: str) -> None:
        """Store the token handed back in the Google sign-in redirect."""
        self._store_token(token)

    def logout(self) -> None:
        self._request("POST", "/auth/logout")
        self._store_token(None)
        self.user = None
        self.applications = []
        self.has_next_page = True

    def current_user(self) -> dict:
        self.user = self._request("GET", "/auth/user")["user"]
        return self.user

    def forgot_password(self, email: str) -> str:
        return self._request("POST", "/auth/forgot-password", json={"email": email})["message"]

    def reset_password(self, token: str, password: str) -> str:
        return self._request(
            "POST", f"/auth/reset-password/{token}", json={"password": password}
        )["message"]

    # Applications

    def load_applications(self, page: int = 1, limit: int = 10, **filters) -> list[dict]:
        """Fetch a page. Page 1 replaces the cached list, later pages append to it."""
        params = {"page": page, "limit": limit}
        params.update({k: v for k, v in filters.items() if v is not None})
        data = self._request("GET", "/applications", params=params)

        if page == 1:
            self.applications = list(data["applications"])
        else:
            self.applications.extend(data["applications"])
        self.has_next_page = data["hasNextPage"]
        return data["applications"]

    def get_application(self, application_id: int) -> dict:
        return self._request("GET", f"/applications/{application_id}")

    def create_application(self, fields: dict, resume_path: str | Path | None = None) -> dict:
        application = self._send_application("POST", "/applications", fields, resume_path)
        self.applications.insert(0, application)
        return application

    def update_application(
        self, application_id: int, fields: dict, resume_path: str | Path | None = None
    ) -> dict:
        application = self._send_application(
            "PUT", f"/applications/{application_id}", fields, resume_path
        )
        self.applications = [
            application if a["id"] == application_id else a for a in self.applications
        ]
        return application

    def delete_application(self, application_id: int) -> None:
        self._request("DELETE", f"/applications/{application_id}")
        self.applications = [a for a in self.applications if a["id"] != application_id]

    def _send_application(
        self, method: str, path: str, fields: dict, resume_path: str | Path | None
    ) -> dict:
        if resume_path is None:
            return self._request(method, path, data=fields)

        resume_path = Path(resume_path)
        content_type = mimetypes.guess_type(resume_path.name)[0] or "application/octet-stream"
        with resume_path.open("rb") as f:
            files = {"resume": (resume_path.name, f, content_type)}
            return self._request(method, path, data=fields, files=files)

    def close(self) -> None:
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
