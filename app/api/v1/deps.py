"""
FastAPI dependencies: database session, session verification and role gates.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Annotated, Optional

from fastapi import Depends, Path
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AccountDeactivated, Forbidden, Unauthenticated
from app.core.roles import Role, role_satisfies
from app.core.security import decode_access_token
from app.db.session import async_session_factory
from app.models.user import User
from app.schemas.common import INT32_MAX, INT32_MIN
from app.schemas.token import TokenPayload

# auto_error=False so a missing header maps to our own 401 body
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False)

# Primary keys are SQL INTEGER columns
RowId = Annotated[int, Path(ge=INT32_MIN, le=INT32_MAX)]


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Verify the bearer token and load the user it names.

    Only the identity is taken from the token. Role and active flag are
    always read from the freshly fetched row.
    """
    if not token:
        raise Unauthenticated("No token, authorization denied")

    payload = decode_access_token(token)
    if payload is None:
        raise Unauthenticated("Token is not valid")

    try:
        claims = TokenPayload.model_validate(payload)
        user_id = int(claims.sub or "")
    except (ValidationError, ValueError):
        raise Unauthenticated("Token is not valid")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise Unauthenticated("Token is not valid")
    return user


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Reject deactivated accounts even when their token is still unexpired."""
    if not current_user.is_active:
        raise AccountDeactivated()
    return current_user


def require_role(minimum: Role) -> Callable[..., Awaitable[User]]:
    """Build a dependency that admits *minimum* and every role ranked above it."""

    async def _require_role(
        current_user: User = Depends(get_current_active_user),
    ) -> User:
        if not role_satisfies(current_user.role, minimum):
            raise Forbidden(f"Access denied. {minimum.value} role or higher required.")
        return current_user

    _require_role.__name__ = f"require_{minimum.name.lower()}"
    return _require_role


require_admin = require_role(Role.ADMIN)
require_supervisor = require_role(Role.SUPERVISOR)
