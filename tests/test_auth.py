"""Tests for authentication."""
import pytest
from app.core.exceptions import ConflictError, UnauthorizedError
from app.schemas.auth import RegisterRequest
from app.services.auth_service import AuthService
from app.utils.security import verify_password, create_access_token, create_refresh_token, decode_token


def test_password_hashing():
    """Test password hashing and verification."""
    password = "testpassword123"
    hashed = AuthService.hash_password(password)

    assert hashed != password
    assert verify_password(password, hashed)
    assert not verify_password("wrongpassword", hashed)


def test_jwt_token_creation():
    """Test JWT token creation and decoding."""
    data = {"sub": "user123", "email": "test@example.com"}
    token = create_access_token(data)

    assert isinstance(token, str)

    decoded = decode_token(token)
    assert decoded["sub"] == "user123"
    assert decoded["email"] == "test@example.com"
    assert decoded["type"] == "access"
    assert decode_token(create_refresh_token({"sub": "user123"}))["type"] == "refresh"


def test_decode_invalid_token():
    with pytest.raises(ValueError):
        decode_token("not-a-token")


@pytest.mark.asyncio
async def test_authenticate_user(db_session, test_user):
    """Login works with either the email or the username."""
    by_email = await AuthService.authenticate_user(db_session, "alice@example.com", "testpassword")
    assert by_email is not None
    assert by_email.id == test_user.id

    by_username = await AuthService.authenticate_user(db_session, "alice", "testpassword")
    assert by_username.id == test_user.id

    assert await AuthService.authenticate_user(db_session, "alice", "wrongpassword") is None
    assert await AuthService.authenticate_user(db_session, "nobody@example.com", "password") is None


@pytest.mark.asyncio
async def test_register_rejects_duplicates(db_session, test_user):
    duplicate_email = RegisterRequest(name="A", username="alice2", email="alice@example.com", password="secret1")
    with pytest.raises(ConflictError):
        await AuthService.register(db_session, duplicate_email)

    duplicate_username = RegisterRequest(name="A", username="alice", email="new@example.com", password="secret1")
    with pytest.raises(ConflictError):
        await AuthService.register(db_session, duplicate_username)


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(db_session, test_user):
    access = create_access_token({"sub": str(test_user.id)})
    with pytest.raises(UnauthorizedError):
        await AuthService.refresh_access_token(db_session, access)


def test_register_and_login_api(client):
    response = client.post(
        "/api/v1/auth/register",
        json={"name": "Dora", "username": "dora", "email": "dora@example.com", "password": "secret123"},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["username"] == "dora"
    assert body["role"] == "USER"
    assert "password_hash" not in body

    again = client.post(
        "/api/v1/auth/register",
        json={"name": "Dora", "username": "dora", "email": "dora@example.com", "password": "secret123"},
    )
    assert again.status_code == 409
    assert again.json()["code"] == "CONFLICT"

    login = client.post("/api/v1/auth/login", data={"username": "dora", "password": "secret123"})
    assert login.status_code == 200
    tokens = login.json()
    assert tokens["token_type"] == "bearer"

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "dora@example.com"

    refreshed = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["access_token"]


def test_login_wrong_password(client, test_user):
    response = client.post("/api/v1/auth/login", data={"username": "alice", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"


def test_me_requires_token(client):
    assert client.get("/api/v1/auth/me").status_code == 401
    bad = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
    assert bad.status_code == 401


def test_refresh_token_cannot_authenticate(client, test_user):
    refresh = create_refresh_token({"sub": str(test_user.id)})
    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {refresh}"})
    assert response.status_code == 401


def test_auth_error_follows_accept_language(client):
    english = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage", "Accept-Language": "en-US"})
    assert english.json()["detail"] == "Not authenticated"
    spanish = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage", "Accept-Language": "es-ES"})
    assert spanish.json()["detail"] == "No autenticado"
