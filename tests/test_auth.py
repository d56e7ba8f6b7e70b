import pytest
from datetime import timedelta
from httpx import AsyncClient

from src.auth.security import create_access_token, decode_access_token
from src.auth.service import AuthService

TEST_PASSWORD = "password123"


@pytest.mark.asyncio
async def test_register_then_login_token_decodes_to_same_user(async_client: AsyncClient, register):
    _, user = await register("ada@example.com")

    response = await async_client.post(
        "/api/auth/login",
        json={"email": "ada@example.com", "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["id"] == user["id"]
    assert decode_access_token(data["token"])["sub"] == user["id"]


@pytest.mark.asyncio
async def test_register_normalizes_email_and_defaults_plan(register):
    _, user = await register("Ada@Example.COM")
    assert user["email"] == "ada@example.com"
    assert user["plan"] == "free"
    assert user["role"] == "USER"


@pytest.mark.asyncio
async def test_duplicate_email_rejected(async_client: AsyncClient, register):
    await register("dup@example.com")
    response = await async_client.post(
        "/api/auth/register",
        json={
            "email": "dup@example.com",
            "password": TEST_PASSWORD,
            "first_name": "Other",
            "last_name": "Person",
        },
    )
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_EXISTS"


@pytest.mark.asyncio
async def test_duplicate_email_caught_by_unique_constraint(async_client: AsyncClient, register, monkeypatch):
    await register("race@example.com")

    # Simulate a registration that passed the lookup before the other one committed
    async def not_found(self, email):
        return None

    monkeypatch.setattr(AuthService, "get_user_by_email", not_found)
    response = await async_client.post(
        "/api/auth/register",
        json={
            "email": "race@example.com",
            "password": TEST_PASSWORD,
            "first_name": "Other",
            "last_name": "Person",
        },
    )
    assert response.status_code == 409
    assert response.json()["code"] == "EMAIL_EXISTS"
    monkeypatch.undo()

    login = await async_client.post("/api/auth/login", json={"email": "race@example.com", "password": TEST_PASSWORD})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_login_failure(async_client: AsyncClient, register):
    await register("ada@example.com")
    response = await async_client.post(
        "/api/auth/login",
        json={"email": "ada@example.com", "password": "wrongpassword"}
    )
    assert response.status_code == 401
    data = response.json()
    assert data["detail"] == "Incorrect email or password"
    assert data["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_login_unknown_email(async_client: AsyncClient):
    response = await async_client.post(
        "/api/auth/login",
        json={"email": "nobody@example.com", "password": TEST_PASSWORD}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_returns_current_user(async_client: AsyncClient, register):
    headers, user = await register("me@example.com", company="Acme")
    response = await async_client.get("/api/auth/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["id"] == user["id"]
    assert response.json()["company"] == "Acme"


@pytest.mark.asyncio
async def test_me_requires_token(async_client: AsyncClient):
    response = await async_client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_me_rejects_garbage_and_expired_tokens(async_client: AsyncClient, register):
    _, user = await register("exp@example.com")
    expired = create_access_token({"sub": user["id"]}, expires_delta=timedelta(minutes=-1))

    for token in ("not-a-jwt", expired):
        response = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_for_unknown_user_rejected(async_client: AsyncClient):
    token = create_access_token({"sub": "00000000-0000-0000-0000-0000000000ff"})
    response = await async_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
