# server/tests/test_auth.py
from datetime import timedelta

import pytest

from askbudi.auth import (
    create_jwt,
    decode_jwt,
    extract_bearer,
    hash_password,
    verify_password,
)
from askbudi.errors import AuthError


def test_hash_password_not_plaintext():
    """Hashed password should not equal original."""
    password = "mysecretpassword"
    assert hash_password(password) != password


def test_verify_password_correct():
    hashed = hash_password("mysecretpassword")
    assert verify_password("mysecretpassword", hashed) is True


def test_verify_password_incorrect():
    hashed = hash_password("mysecretpassword")
    assert verify_password("wrongpassword", hashed) is False


def test_decode_jwt_roundtrip():
    """Decoded JWT should contain original user_id."""
    token = create_jwt(user_id="usr_123")
    payload = decode_jwt(token)
    assert payload["user_id"] == "usr_123"
    assert payload["exp"] > payload["iat"]


def test_decode_expired_jwt():
    token = create_jwt(user_id="usr_123", expires_delta=timedelta(seconds=-10))
    with pytest.raises(AuthError) as exc:
        decode_jwt(token)
    assert exc.value.status_code == 401
    assert exc.value.detail == "Token expired"


def test_decode_garbage_jwt():
    with pytest.raises(AuthError) as exc:
        decode_jwt("not-a-token")
    assert exc.value.detail == "Invalid token"


@pytest.mark.parametrize("header,expected", [
    (None, None),
    ("", None),
    ("Basic abc", None),
    ("Bearer ", None),
    ("Bearer abc", "abc"),
])
def test_extract_bearer(header, expected):
    assert extract_bearer(header) == expected


class TestAuthRoutes:
    def test_signup_returns_session(self, client):
        response = client.post("/v1/auth/signup", json={
            "email": "new@example.com",
            "password": "password123",
        })
        assert response.status_code == 200
        data = response.json()
        assert data["user_id"].startswith("usr_")
        assert data["expires_in"] == 86400
        assert decode_jwt(data["token"])["user_id"] == data["user_id"]

    def test_signup_creates_free_profile(self, client):
        token = client.post("/v1/auth/signup", json={
            "email": "new@example.com",
            "password": "password123",
        }).json()["token"]

        response = client.get("/v1/user/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.json()["plan_type"] == "free"
        assert response.json()["monthly_quota"] == 100

    def test_signup_duplicate_email(self, client, user):
        response = client.post("/v1/auth/signup", json={
            "email": user.email,
            "password": "password123",
        })
        assert response.status_code == 400
        assert response.json() == {"error": "Email already registered"}

    def test_signup_invalid_email(self, client):
        response = client.post("/v1/auth/signup", json={
            "email": "not-an-email",
            "password": "password123",
        })
        assert response.status_code == 400
        assert "email" in response.json()["error"]

    def test_login_success(self, client, user):
        response = client.post("/v1/auth/login", json={
            "email": user.email,
            "password": "password123",
        })
        assert response.status_code == 200
        assert decode_jwt(response.json()["token"])["user_id"] == user.id

    def test_login_wrong_password(self, client, user):
        response = client.post("/v1/auth/login", json={
            "email": user.email,
            "password": "wrong-password",
        })
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}

    def test_session_required(self, client):
        response = client.get("/v1/user/profile")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    def test_session_for_deleted_user(self, client):
        token = create_jwt("usr_missing")
        response = client.get("/v1/user/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json() == {"error": "User not found"}
