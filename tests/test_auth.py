"""Tests for admin authentication endpoints."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token
from app.models.admins import admins
from conftest import ADMIN_PASSWORD, create_user


@pytest.mark.asyncio
async def test_login_sets_session_cookie(
    client: AsyncClient,
    admin_user: dict,
    db_session: AsyncSession,
) -> None:
    """Test logging in as an admin."""
    response = await client.post(
        "/api/v1/admin/auth/login",
        json={"email": "admin@bookmychamber.com", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["user"]["email"] == "admin@bookmychamber.com"
    assert data["user"]["role"] == "ADMIN"
    assert data["user"]["name"] == "Super Admin"

    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("admin-token=")
    assert "HttpOnly" in set_cookie
    assert "Max-Age=86400" in set_cookie

    result = await db_session.execute(
        select(admins.c.last_login_at).where(admins.c.user_id == admin_user["id"])
    )
    assert result.scalar_one() is not None


@pytest.mark.asyncio
async def test_login_email_is_case_insensitive(client: AsyncClient, admin_user: dict) -> None:
    response = await client.post(
        "/api/v1/admin/auth/login",
        json={"email": "Admin@BookMyChamber.com", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, admin_user: dict) -> None:
    """Test login with a wrong password."""
    response = await client.post(
        "/api/v1/admin/auth/login",
        json={"email": "admin@bookmychamber.com", "password": "not-the-password"},
    )
    assert response.status_code == 401
    data = response.json()
    assert data["message"] == "Invalid credentials"
    assert data["error"] == "UnauthorizedException"
    assert data["path"].endswith("/api/v1/admin/auth/login")


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/admin/auth/login",
        json={"email": "nobody@bookmychamber.com", "password": "whatever"},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials or insufficient permissions"


@pytest.mark.asyncio
async def test_login_rejects_non_admin_roles(
    client: AsyncClient,
    db_session: AsyncSession,
) -> None:
    """Test that doctor and pharmacy logins cannot open an admin session."""
    await create_user(db_session, "doc@example.com", "DOCTOR")
    await db_session.commit()

    response = await client.post(
        "/api/v1/admin/auth/login",
        json={"email": "doc@example.com", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials or insufficient permissions"


@pytest.mark.asyncio
async def test_login_rejects_inactive_admin(
    client: AsyncClient,
    db_session: AsyncSession,
) -> None:
    await create_user(db_session, "former@bookmychamber.com", "ADMIN", is_active=False)
    await db_session.commit()

    response = await client.post(
        "/api/v1/admin/auth/login",
        json={"email": "former@bookmychamber.com", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_rate_limited(
    client: AsyncClient,
    admin_user: dict,
    mock_redis: MagicMock,
) -> None:
    """Test that repeated attempts for one email are throttled."""
    mock_redis.get.return_value = "5"

    response = await client.post(
        "/api/v1/admin/auth/login",
        json={"email": "admin@bookmychamber.com", "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 429
    mock_redis.get.assert_called_with("login:admin@bookmychamber.com")


@pytest.mark.asyncio
async def test_login_validation_error(client: AsyncClient) -> None:
    response = await client.post("/api/v1/admin/auth/login", json={"email": "not-an-email"})
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_me_with_cookie(client: AsyncClient, admin_user: dict) -> None:
    """Test resolving the current admin from the session cookie."""
    token = create_access_token(
        data={"sub": str(admin_user["id"]), "email": admin_user["email"], "role": "ADMIN"}
    )
    client.cookies.set("admin-token", token)

    response = await client.get("/api/v1/admin/auth/me")
    assert response.status_code == 200
    user = response.json()["user"]
    assert user["id"] == str(admin_user["id"])
    assert user["admin"]["department"] == "Operations"


@pytest.mark.asyncio
async def test_me_with_bearer(client: AsyncClient, admin_headers: dict) -> None:
    response = await client.get("/api/v1/admin/auth/me", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "ADMIN"


@pytest.mark.asyncio
async def test_me_without_session(client: AsyncClient) -> None:
    response = await client.get("/api/v1/admin/auth/me")
    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized"


@pytest.mark.asyncio
async def test_me_with_expired_token(client: AsyncClient, admin_user: dict) -> None:
    token = create_access_token(
        data={"sub": str(admin_user["id"]), "email": admin_user["email"], "role": "ADMIN"},
        expires_delta=timedelta(seconds=-1),
    )
    response = await client.get(
        "/api/v1/admin/auth/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_patient_token(client: AsyncClient, db_session: AsyncSession) -> None:
    """Test that a valid token for a non-admin account is refused."""
    user = await create_user(db_session, "patient@example.com", "PATIENT")
    await db_session.commit()
    token = create_access_token(
        data={"sub": str(user["id"]), "email": user["email"], "role": "PATIENT"}
    )

    response = await client.get(
        "/api/v1/admin/auth/me", headers={"Authorization": f"Bearer {token}"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_token(
    client: AsyncClient,
    admin_user: dict,
    mock_redis: MagicMock,
) -> None:
    """Test that a token stops working after logout."""
    token = create_access_token(
        data={"sub": str(admin_user["id"]), "email": admin_user["email"], "role": "ADMIN"}
    )
    headers = {"Authorization": f"Bearer {token}"}

    response = await client.post("/api/v1/admin/auth/logout", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Logout successful"
    assert "Max-Age=0" in response.headers["set-cookie"]

    key, ttl, value = mock_redis.setex.call_args.args
    assert key == f"blacklist:{token}"
    assert 0 < ttl <= 24 * 3600
    assert value == "1"

    mock_redis.exists.return_value = 1
    response = await client.get("/api/v1/admin/auth/me", headers=headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_without_session(client: AsyncClient, mock_redis: MagicMock) -> None:
    response = await client.post("/api/v1/admin/auth/logout")
    assert response.status_code == 200
    mock_redis.setex.assert_not_called()


@pytest.mark.asyncio
async def test_office_manager_cannot_manage_users(
    client: AsyncClient,
    manager_headers: dict,
) -> None:
    """Test that account management is reserved for the ADMIN role."""
    response = await client.get("/api/v1/admin/users", headers=manager_headers)
    assert response.status_code == 200

    response = await client.post(
        "/api/v1/admin/users",
        headers=manager_headers,
        json={
            "email": "new.admin@bookmychamber.com",
            "password": "password123",
            "role": "ADMIN",
            "admin": {"name": "New Admin"},
        },
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized"
