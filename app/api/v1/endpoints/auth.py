"""
Auth endpoints: login, admin-only registration & own profile.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_current_active_user, get_db, require_admin
from app.core.config import settings
from app.core.exceptions import AccountDeactivated, InvalidCredentials
from app.core.security import (burn_password_check, create_access_token,
                               get_password_hash, verify_password)
from app.models.user import User
from app.schemas.token import LoginRequest, LoginResponse
from app.schemas.user import (RegisterResponse, UserCreate, UserRead,
                              UserSummary)

# Rate limiter, keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


async def authenticate(db: AsyncSession, username: str, password: str) -> User:
    """Resolve a username/password pair to an active user.

    Unknown usernames and wrong passwords raise the same error.
    """
    result = await db.execute(select(User).where(User.username == username.strip()))
    user = result.scalar_one_or_none()

    if user is None:
        burn_password_check(password)
        raise InvalidCredentials()
    if not verify_password(password, user.hashed_password):
        raise InvalidCredentials()
    if not user.is_active:
        raise AccountDeactivated()
    return user


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Exchange username/password for a bearer token."""
    try:
        user = await authenticate(db, body.username, body.password)
    except HTTPException as exc:
        logger.warning("Login failed for %r: %s", body.username, exc.detail)
        raise

    token = create_access_token(user.id, user.role)
    logger.info("User %s logged in", user.username)
    return LoginResponse(token=token, user=UserSummary.model_validate(user))


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> RegisterResponse:
    """Create a new user account (admin only)."""
    existing = await db.execute(select(User.id).where(User.username == body.username))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(status_code=400, detail="Username already exists")

    user = User(
        name=body.name,
        username=body.username,
        hashed_password=get_password_hash(body.password),
        role=body.role.value,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s (%s) registered by %s", user.username, user.role, admin.username)
    return RegisterResponse(
        message="User created successfully",
        user=UserSummary.model_validate(user),
    )


@router.get("/profile", response_model=UserRead)
async def read_profile(
    current_user: User = Depends(get_current_active_user),
) -> User:
    """Return profile of the currently authenticated user."""
    return current_user
