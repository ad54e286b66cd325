"""Tests for authentication endpoints."""

import asyncio
import re
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tests.helpers import PASSWORD, bearer, register
from welltrack.database import enable_sqlite_foreign_keys, get_db
from welltrack.main import app
from welltrack.models import metadata


@pytest.mark.asyncio
async def test_register_returns_user_and_tokens(client: AsyncClient) -> None:
    """Test registering a new user."""
    data = await register(client, "New.User@Example.com", displayName="New")

    assert data["user"]["email"] == "new.user@example.com"
    assert data["user"]["displayName"] == "New"
    assert data["accessToken"]
    assert data["refreshToken"]
    assert "passwordHash" not in data["user"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient) -> None:
    """Test registering with an email that is already taken."""
    await register(client, "dup@example.com")

    response = await client.post(
        "/api/auth/register",
        json={"email": "DUP@example.com", "password": PASSWORD},
    )

    assert response.status_code == 409
    assert response.json() == {"error": "Email already in use"}


@pytest.mark.asyncio
async def test_register_short_password(client: AsyncClient) -> None:
    """Test registering with a password that is too short."""
    response = await client.post(
        "/api/auth/register",
        json={"email": "short@example.com", "password": "abc"},
    )

    assert response.status_code == 422
    assert response.json() == {"error": "Password must be at least 8 characters"}


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient) -> None:
    """Test registering with a malformed email."""
    response = await client.post(
        "/api/auth/register",
        json={"email": "not-an-email", "password": PASSWORD},
    )

    assert response.status_code == 422
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_login(client: AsyncClient) -> None:
    """Test logging in with valid credentials."""
    await register(client, "login@example.com")

    response = await client.post(
        "/api/auth/login",
        json={"email": "login@example.com", "password": PASSWORD},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == "login@example.com"
    assert data["accessToken"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email,password",
    [("login@example.com", "wrong-password"), ("nobody@example.com", PASSWORD)],
)
async def test_login_failures_share_one_message(client: AsyncClient, email: str, password: str) -> None:
    """Test that unknown email and wrong password fail the same way."""
    await register(client, "login@example.com")

    response = await client.post("/api/auth/login", json={"email": email, "password": password})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


@pytest.mark.asyncio
async def test_refresh_rotates_token(client: AsyncClient, auth: dict) -> None:
    """Test refreshing a token pair."""
    response = await client.post("/api/auth/refresh", json={"refreshToken": auth["refreshToken"]})

    assert response.status_code == 200
    pair = response.json()
    assert pair["refreshToken"] != auth["refreshToken"]

    me = await client.get("/api/users/me", headers=bearer(pair))
    assert me.status_code == 200


@pytest.mark.asyncio
async def test_refresh_token_cannot_be_reused(client: AsyncClient, auth: dict) -> None:
    """Test that a rotated refresh token is rejected."""
    first = await client.post("/api/auth/refresh", json={"refreshToken": auth["refreshToken"]})
    assert first.status_code == 200

    second = await client.post("/api/auth/refresh", json={"refreshToken": auth["refreshToken"]})

    assert second.status_code == 401
    assert second.json() == {"error": "Invalid or expired refresh token"}


@pytest_asyncio.fixture
async def file_client(tmp_path) -> AsyncGenerator[AsyncClient, None]:
    """Client over a file database, so each request gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'welltrack.db'}")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    await engine.dispose()


@pytest.mark.asyncio
async def test_concurrent_refresh_with_one_token(file_client: AsyncClient) -> None:
    """Test concurrent refreshes with the same token."""
    auth = await register(file_client)

    responses = await asyncio.gather(
        *(
            file_client.post("/api/auth/refresh", json={"refreshToken": auth["refreshToken"]})
            for _ in range(4)
        )
    )

    assert sorted(response.status_code for response in responses) == [200, 401, 401, 401]


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client: AsyncClient, auth: dict) -> None:
    """Test refreshing with an access token."""
    response = await client.post("/api/auth/refresh", json={"refreshToken": auth["accessToken"]})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_requires_token(client: AsyncClient) -> None:
    """Test refreshing with a blank token."""
    response = await client.post("/api/auth/refresh", json={"refreshToken": "  "})

    assert response.status_code == 422
    assert response.json() == {"error": "refreshToken is required"}


@pytest.mark.asyncio
async def test_logout_revokes_refresh_token(client: AsyncClient, auth: dict) -> None:
    """Test logging out."""
    response = await client.post("/api/auth/logout", json={"refreshToken": auth["refreshToken"]})
    assert response.status_code == 200
    assert response.json() == {"message": "Logged out successfully"}

    refreshed = await client.post("/api/auth/refresh", json={"refreshToken": auth["refreshToken"]})
    assert refreshed.status_code == 401

    # Idempotent
    again = await client.post("/api/auth/logout", json={"refreshToken": auth["refreshToken"]})
    assert again.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Bearer not-a-jwt"}, {"Authorization": "Basic abc"}],
)
async def test_protected_route_requires_valid_access_token(client: AsyncClient, headers: dict) -> None:
    """Test that endpoints require authentication."""
    response = await client.get("/api/users/me", headers=headers)

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid or expired access token"}


@pytest.mark.asyncio
async def test_refresh_token_is_not_an_access_token(client: AsyncClient, auth: dict) -> None:
    """Test using a refresh token as a bearer token."""
    response = await client.get(
        "/api/users/me",
        headers={"Authorization": f"Bearer {auth['refreshToken']}"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_forgot_password_unknown_email_still_succeeds(client: AsyncClient, sender) -> None:
    """Test requesting a reset for an unknown email."""
    response = await client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

    assert response.status_code == 200
    assert response.json() == {"message": "If that email is registered, a reset link has been sent"}
    assert sender.sent == []


@pytest.mark.asyncio
async def test_password_reset_flow(client: AsyncClient, auth: dict, sender) -> None:
    """Test resetting a password with an emailed token."""
    response = await client.post("/api/auth/forgot-password", json={"email": "alex@example.com"})
    assert response.status_code == 200

    assert len(sender.sent) == 1
    to, notification = sender.sent[0]
    assert to == "alex@example.com"
    match = re.search(r"/reset-password\?token=([0-9a-f]+)", notification.text)
    assert match
    token = match.group(1)

    reset = await client.post(
        "/api/auth/reset-password",
        json={"token": token, "password": "brand-new-password"},
    )
    assert reset.status_code == 200
    assert reset.json() == {"message": "Password has been reset successfully"}

    # Existing sessions are revoked
    refreshed = await client.post("/api/auth/refresh", json={"refreshToken": auth["refreshToken"]})
    assert refreshed.status_code == 401

    old = await client.post("/api/auth/login", json={"email": "alex@example.com", "password": PASSWORD})
    assert old.status_code == 401
    new = await client.post(
        "/api/auth/login",
        json={"email": "alex@example.com", "password": "brand-new-password"},
    )
    assert new.status_code == 200

    # Single use
    reused = await client.post(
        "/api/auth/reset-password",
        json={"token": token, "password": "another-password"},
    )
    assert reused.status_code == 400
    assert reused.json() == {"error": "Invalid or expired password reset token"}


@pytest.mark.asyncio
async def test_reset_password_unknown_token(client: AsyncClient) -> None:
    """Test resetting a password with an unknown token."""
    response = await client.post(
        "/api/auth/reset-password",
        json={"token": "deadbeef", "password": "brand-new-password"},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_auth_endpoints_are_rate_limited(client: AsyncClient, rate_limited) -> None:
    """Test rate limiting of authentication endpoints."""
    body = {"email": "nobody@example.com", "password": PASSWORD}
    statuses = [(await client.post("/api/auth/login", json=body)).status_code for _ in range(6)]

    assert statuses[:5] == [401] * 5
    assert statuses[5] == 429

    response = await client.post("/api/auth/refresh", json={"refreshToken": "x"})
    assert response.status_code == 429
    assert response.json() == {"error": "Too many requests, please try again later."}
