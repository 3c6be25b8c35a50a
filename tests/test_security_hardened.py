"""
Session verification tests.

Verifies:
1. Missing / malformed / expired tokens are rejected with 401
2. Account state is re-read on every request (deactivation, deletion)
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from jose import jwt
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import create_access_token
from app.models.user import User


@pytest.mark.asyncio
async def test_missing_token(async_client: AsyncClient):
    resp = await async_client.get("/api/inspections")
    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_garbage_token(async_client: AsyncClient):
    resp = await async_client.get(
        "/api/inspections", headers={"Authorization": "Bearer not.a.jwt"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_expired_token(async_client: AsyncClient, inspector):
    token = create_access_token(inspector.id, inspector.role, expires_delta=timedelta(seconds=-5))
    resp = await async_client.get(
        "/api/inspections", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_signed_with_other_key(async_client: AsyncClient, inspector):
    token = jwt.encode(
        {"sub": str(inspector.id), "role": inspector.role, "type": "access"},
        "some-other-secret",
        algorithm=settings.ALGORITHM,
    )
    resp = await async_client.get(
        "/api/inspections", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_with_non_numeric_subject(async_client: AsyncClient):
    token = create_access_token("abc", "Admin")
    resp = await async_client.get(
        "/api/inspections", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_deactivated_user_token_rejected(
    async_client: AsyncClient, inspector, user_headers, admin_headers
):
    """An unexpired token stops working as soon as the account is deactivated."""
    ok = await async_client.get("/api/inspections", headers=user_headers)
    assert ok.status_code == 200

    resp = await async_client.put(
        f"/api/users/{inspector.id}/status", json={"isActive": False}, headers=admin_headers
    )
    assert resp.status_code == 200

    blocked = await async_client.get("/api/inspections", headers=user_headers)
    assert blocked.status_code == 401
    assert blocked.json()["detail"] == "Account is deactivated"


@pytest.mark.asyncio
async def test_deleted_user_token_rejected(
    async_client: AsyncClient, db_session: AsyncSession, inspector, user_headers
):
    await db_session.execute(delete(User).where(User.id == inspector.id))
    await db_session.commit()

    resp = await async_client.get("/api/inspections", headers=user_headers)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_role_read_from_database_not_token(
    async_client: AsyncClient, inspector, user_headers, admin_headers
):
    """Promoting a user takes effect on the next request with the same token."""
    denied = await async_client.get("/api/users", headers=user_headers)
    assert denied.status_code == 403

    await async_client.put(
        f"/api/users/{inspector.id}/role", json={"role": "Supervisor"}, headers=admin_headers
    )

    allowed = await async_client.get("/api/users", headers=user_headers)
    assert allowed.status_code == 200
