"""Tests for the /auth endpoints."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from job_tracker.models import User
from job_tracker.services.auth import (
    create_access_token,
    decode_access_token,
    hash_password,
    hash_reset_token,
)


class TestRegistration:
    """Tests for user registration."""

    def test_register_success(self, client, db):
        """Successfully register a new user and get a token back."""
        response = client.post(
            "/auth/register",
            json={"displayName": "Ann", "email": "a@x.com", "password": "secret1"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "User registered successfully"
        assert data["user"]["displayName"] == "Ann"
        assert data["user"]["email"] == "a@x.com"
        assert "password" not in data["user"]
        assert decode_access_token(data["token"])["sub"] == str(data["user"]["id"])

        # Verify user was created in database with a hashed password
        user = db.query(User).filter(User.email == "a@x.com").first()
        assert user is not None
        assert user.password_hash != "secret1"
        assert user.password_hash.startswith("$2")

    def test_register_sets_auth_cookie(self, client):
        response = client.post(
            "/auth/register",
            json={"displayName": "Ann", "email": "a@x.com", "password": "secret1"},
        )
        assert "access_token" in response.cookies

    def test_register_duplicate_email(self, client, db, test_user):
        """Registration should fail with Conflict if email already exists."""
        response = client.post(
            "/auth/register",
            json={"displayName": "Other Ann", "email": "ann@example.com", "password": "newpassword"},
        )
        assert response.status_code == 409
        assert "already registered" in response.json()["message"]
        assert db.query(User).filter(User.email == "ann@example.com").count() == 1

    def test_register_duplicate_email_is_case_insensitive(self, client, db, test_user):
        response = client.post(
            "/auth/register",
            json={"displayName": "Ann", "email": "ANN@Example.com", "password": "newpassword"},
        )
        assert response.status_code == 409
        assert db.query(User).count() == 1

    def test_register_invalid_email(self, client):
        """Registration should fail with invalid email format."""
        response = client.post(
            "/auth/register",
            json={"displayName": "Ann", "email": "not-an-email", "password": "secret1"},
        )
        assert response.status_code == 400
        assert "email" in response.json()["message"]

    def test_register_missing_display_name(self, client):
        response = client.post(
            "/auth/register",
            json={"email": "a@x.com", "password": "secret1"},
        )
        assert response.status_code == 400
        assert "displayName" in response.json()["message"]

    def test_register_password_too_short(self, client):
        response = client.post(
            "/auth/register",
            json={"displayName": "Ann", "email": "a@x.com", "password": "short"},
        )
        assert response.status_code == 400
        assert "6 characters" in response.json()["message"]

    def test_register_password_too_long(self, client):
        response = client.post(
            "/auth/register",
            json={"displayName": "Ann", "email": "a@x.com", "password": "x" * 129},
        )
        assert response.status_code == 400
        assert "128 characters" in response.json()["message"]


class TestLogin:
    """Tests for user login."""

    def test_login_success(self, client, test_user):
        response = client.post(
            "/auth/login",
            json={"email": "ann@example.com", "password": "password123"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Login successful"
        assert data["token_type"] == "bearer"
        assert data["user"]["id"] == test_user.id
        assert decode_access_token(data["token"])["sub"] == str(test_user.id)

        # Check cookie was set
        assert "access_token" in response.cookies

    def test_login_wrong_password(self, client, test_user):
        """Correct email with the wrong password issues no token."""
        response = client.post(
            "/auth/login",
            json={"email": "ann@example.com", "password": "wrongpassword"},
        )
        assert response.status_code == 401
        data = response.json()
        assert data["message"] == "Invalid email or password"
        assert "token" not in data
        assert "access_token" not in response.cookies

    def test_login_nonexistent_user(self, client):
        response = client.post(
            "/auth/login",
            json={"email": "nobody@example.com", "password": "anypassword"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_login_oauth_only_account(self, client, db):
        """Accounts created through Google have no password to log in with."""
        db.add(User(display_name="G", email="g@example.com", google_id="g-1"))
        db.commit()

        response = client.post(
            "/auth/login",
            json={"email": "g@example.com", "password": ""},
        )
        assert response.status_code == 401


class TestCurrentUser:
    """Tests for the bearer-token gate via /auth/user."""

    def test_current_user_with_bearer_token(self, client, test_user, auth_headers):
        response = client.get("/auth/user", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "ann@example.com"

    def test_current_user_with_cookie(self, client, test_user):
        client.post("/auth/login", json={"email": "ann@example.com", "password": "password123"})
        response = client.get("/auth/user")
        assert response.status_code == 200
        assert response.json()["user"]["id"] == test_user.id

    def test_no_token(self, client):
        response = client.get("/auth/user")
        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized: No token provided"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_garbage_token(self, client):
        response = client.get("/auth/user", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_token_signed_with_other_key(self, client, test_user):
        from jose import jwt

        token = jwt.encode({"sub": str(test_user.id)}, "another-secret", algorithm="HS256")
        response = client.get("/auth/user", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_for_deleted_user(self, client, db, test_user, auth_headers):
        db.delete(test_user)
        db.commit()

        response = client.get("/auth/user", headers=auth_headers)
        assert response.status_code == 401
        assert response.json()["message"] == "User not found"

    def test_token_with_non_numeric_subject(self, client):
        token = create_access_token(data={"sub": "abc"})
        response = client.get("/auth/user", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestTokenExpiry:
    """Tokens last seven days."""

    def test_default_expiry_is_seven_days(self, test_user):
        token = create_access_token(data={"sub": str(test_user.id)})
        payload = decode_access_token(token)
        assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())

    def test_token_valid_just_before_expiry(self, client, test_user):
        token = create_access_token(data={"sub": str(test_user.id)}, expires_delta=timedelta(minutes=1))
        response = client.get("/auth/user", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

    def test_expired_token_rejected(self, client, test_user):
        token = create_access_token(data={"sub": str(test_user.id)}, expires_delta=timedelta(seconds=-1))
        response = client.get("/auth/user", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"


class TestLogout:
    def test_logout_clears_cookie(self, client, test_user):
        client.post("/auth/login", json={"email": "ann@example.com", "password": "password123"})
        response = client.post("/auth/logout")
        assert response.status_code == 200
        assert response.json()["message"] == "Logged out successfully"

        assert client.get("/auth/user").status_code == 401


class TestForgotPassword:
    """Tests for requesting a password reset."""

    def test_forgot_password_stores_hashed_token(self, client, db, test_user):
        with patch("job_tracker.routers.auth.send_password_reset_email", return_value=True) as mock_send:
            response = client.post("/auth/forgot-password", json={"email": "ann@example.com"})

        assert response.status_code == 200
        mock_send.assert_called_once()
        to_email, raw_token = mock_send.call_args.args
        assert to_email == "ann@example.com"

        db.refresh(test_user)
        assert test_user.reset_password_token == hash_reset_token(raw_token)
        assert test_user.reset_password_token != raw_token
        assert test_user.reset_password_expires is not None

    def test_forgot_password_unknown_email_looks_the_same(self, client, test_user):
        with patch("job_tracker.routers.auth.send_password_reset_email", return_value=True) as mock_send:
            known = client.post("/auth/forgot-password", json={"email": "ann@example.com"})
            unknown = client.post("/auth/forgot-password", json={"email": "nobody@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert mock_send.call_count == 1

    def test_forgot_password_email_failure_looks_the_same(self, client, test_user):
        with patch("job_tracker.routers.auth.send_password_reset_email", return_value=False):
            response = client.post("/auth/forgot-password", json={"email": "ann@example.com"})
        assert response.status_code == 200

    def test_forgot_password_requires_email(self, client):
        response = client.post("/auth/forgot-password", json={})
        assert response.status_code == 400


class TestResetPassword:
    """Tests for redeeming a password reset token."""

    @pytest.fixture
    def reset_token(self, client, test_user):
        with patch("job_tracker.routers.auth.send_password_reset_email", return_value=True) as mock_send:
            client.post("/auth/forgot-password", json={"email": "ann@example.com"})
        return mock_send.call_args.args[1]

    def test_reset_password_success(self, client, db, test_user, reset_token):
        response = client.post(f"/auth/reset-password/{reset_token}", json={"password": "brandnew1"})
        assert response.status_code == 200
        assert response.json()["message"] == "Password has been reset successfully"

        db.refresh(test_user)
        assert test_user.reset_password_token is None
        assert test_user.reset_password_expires is None

        login = client.post("/auth/login", json={"email": "ann@example.com", "password": "brandnew1"})
        assert login.status_code == 200
        old_login = client.post("/auth/login", json={"email": "ann@example.com", "password": "password123"})
        assert old_login.status_code == 401

    def test_reset_token_is_single_use(self, client, reset_token):
        first = client.post(f"/auth/reset-password/{reset_token}", json={"password": "brandnew1"})
        assert first.status_code == 200

        second = client.post(f"/auth/reset-password/{reset_token}", json={"password": "brandnew2"})
        assert second.status_code == 400
        assert second.json()["message"] == "Invalid or expired token"

    def test_reset_with_expired_token(self, client, db, test_user, reset_token):
        from datetime import datetime

        test_user.reset_password_expires = datetime(2000, 1, 1)
        db.commit()

        response = client.post(f"/auth/reset-password/{reset_token}", json={"password": "brandnew1"})
        assert response.status_code == 400

    def test_reset_with_stored_hash_instead_of_token(self, client, db, test_user, reset_token):
        """Knowing the stored digest is not enough to reset the password."""
        db.refresh(test_user)
        response = client.post(
            f"/auth/reset-password/{test_user.reset_password_token}",
            json={"password": "brandnew1"},
        )
        assert response.status_code == 400

    def test_reset_with_unknown_token(self, client):
        response = client.post("/auth/reset-password/deadbeef", json={"password": "brandnew1"})
        assert response.status_code == 400

    def test_reset_requires_password(self, client, reset_token):
        response = client.post(f"/auth/reset-password/{reset_token}", json={})
        assert response.status_code == 400
