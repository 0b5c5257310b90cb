"""
Tests for authentication: password hashing, JWT handling and the auth endpoints.
"""

import pytest
from fastapi import HTTPException

from shared.security.auth import require_roles, sign_jwt, verify_jwt
from shared.security.password import hash_password, verify_password
from shared.utils.exceptions import AuthenticationError, InsufficientRoleError
from tests.conftest import TEST_PASSWORD, headers_for, make_user


class TestPasswordHashing:
    """Test password hashing utilities."""

    def test_hash_password_returns_bcrypt_hash(self):
        """Hash should return bcrypt format."""
        hashed = hash_password("mypassword")
        assert hashed.startswith("$2b$")

    def test_verify_password_correct(self):
        hashed = hash_password("mypassword")
        assert verify_password("mypassword", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("mypassword")
        assert verify_password("wrongpassword", hashed) is False

    def test_plain_text_passwords_never_verify(self):
        """Stored values that are not bcrypt hashes are rejected outright."""
        assert verify_password("plaintext", "plaintext") is False
        assert verify_password("anything", "") is False


class TestJwt:
    """Test token signing and verification."""

    def test_round_trip_keeps_claims(self):
        token = sign_jwt({"sub": "7", "role": "WAITER", "email": "w@test.com", "name": "W"})
        claims = verify_jwt(token)
        assert claims["sub"] == "7"
        assert claims["role"] == "WAITER"
        assert claims["type"] == "access"

    def test_expired_token_rejected(self):
        token = sign_jwt({"sub": "7", "role": "WAITER"}, ttl_seconds=-10)
        with pytest.raises(HTTPException) as exc:
            verify_jwt(token)
        assert exc.value.status_code == 401
        assert exc.value.detail == "Token has expired"

    def test_unknown_role_rejected(self):
        token = sign_jwt({"sub": "7", "role": "CHEF"})
        with pytest.raises(HTTPException) as exc:
            verify_jwt(token)
        assert exc.value.status_code == 401

    def test_malformed_subject_rejected(self):
        token = sign_jwt({"sub": "not-a-number", "role": "ADMIN"})
        with pytest.raises(HTTPException):
            verify_jwt(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(AuthenticationError) as exc:
            verify_jwt("not.a.token")
        assert exc.value.detail == "Invalid token"

    def test_require_roles(self):
        require_roles({"role": "ADMIN"}, ["ADMIN", "ACCOUNTANT"])
        with pytest.raises(InsufficientRoleError) as exc:
            require_roles({"role": "WAITER"}, ["ADMIN"])
        assert exc.value.status_code == 403
        assert "requires role: ADMIN" in exc.value.detail


class TestAuthEndpoints:
    """Test authentication API endpoints."""

    def test_login_success(self, client, admin_user):
        """Valid credentials should return an access token and the user."""
        response = client.post(
            "/api/auth/login",
            json={"email": "admin@test.com", "password": TEST_PASSWORD},
        )
        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert data["token_type"] == "Bearer"
        assert data["expires_in"] > 0
        assert data["user"]["email"] == "admin@test.com"
        assert data["user"]["role"] == "ADMIN"

    def test_login_token_carries_role(self, client, waiter_user):
        response = client.post(
            "/api/auth/login",
            json={"email": "waiter@test.com", "password": TEST_PASSWORD},
        )
        claims = verify_jwt(response.json()["access_token"])
        assert claims["sub"] == str(waiter_user.id)
        assert claims["role"] == "WAITER"
        assert claims["name"] == "Test Waiter"

    def test_login_email_is_case_insensitive(self, client, admin_user):
        response = client.post(
            "/api/auth/login",
            json={"email": "ADMIN@test.com", "password": TEST_PASSWORD},
        )
        assert response.status_code == 200

    def test_login_invalid_email(self, client, admin_user):
        response = client.post(
            "/api/auth/login",
            json={"email": "nonexistent@test.com", "password": TEST_PASSWORD},
        )
        assert response.status_code == 401
        assert "Invalid email or password" in response.json()["detail"]

    def test_login_invalid_password(self, client, admin_user):
        response = client.post(
            "/api/auth/login",
            json={"email": "admin@test.com", "password": "wrongpassword"},
        )
        assert response.status_code == 401
        assert "Invalid email or password" in response.json()["detail"]
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_login_inactive_user(self, client, db_session):
        make_user(db_session, "Gone", "gone@test.com", "WAITER", is_active=False)
        response = client.post(
            "/api/auth/login",
            json={"email": "gone@test.com", "password": TEST_PASSWORD},
        )
        assert response.status_code == 401

    def test_login_rate_limited(self, client, admin_user):
        """The sixth attempt within a minute is refused."""
        for _ in range(5):
            client.post("/api/auth/login", json={"email": "admin@test.com", "password": "wrong"})
        response = client.post("/api/auth/login", json={"email": "admin@test.com", "password": "wrong"})
        assert response.status_code == 429

    def test_me_authenticated(self, client, auth_headers):
        response = client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "admin@test.com"
        assert data["role"] == "ADMIN"

    def test_me_reflects_role_change(self, client, db_session, waiter_user):
        headers = headers_for(waiter_user)
        waiter_user.role = "BARMAN"
        db_session.commit()
        response = client.get("/api/auth/me", headers=headers)
        assert response.json()["role"] == "BARMAN"

    def test_me_unauthenticated(self, client):
        response = client.get("/api/auth/me")
        assert response.status_code == 401

    def test_me_bad_header_format(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Token abc"})
        assert response.status_code == 401
