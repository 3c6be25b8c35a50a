"""
Shared test fixtures for the Inspection Tracker test suite.

Each test gets its own in-memory aiosqlite database wired into the app
through a ``get_db`` override.
"""

import os
import sys
import tempfile
from typing import AsyncGenerator

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-for-the-inspection-tracker-suite"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="inspection-uploads-")

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.v1.deps import get_db
from app.core.roles import Role
from app.core.security import create_access_token, get_password_hash
from app.db.base import Base
from app.main import app
from app.models.user import User


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh in-memory database with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


# ── Users & tokens ──────────────────────────────────────────────────
@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory that inserts a user and returns the ORM row."""

    async def _make(
        username: str,
        password: str = "secret123",
        role: Role = Role.USER,
        is_active: bool = True,
        name: str | None = None,
    ) -> User:
        user = User(
            name=name or username.title(),
            username=username,
            hashed_password=get_password_hash(password),
            role=role.value,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
async def admin(make_user) -> User:
    return await make_user("admin", role=Role.ADMIN, name="Alice Admin")


@pytest.fixture
async def supervisor(make_user) -> User:
    return await make_user("super", role=Role.SUPERVISOR, name="Sam Supervisor")


@pytest.fixture
async def inspector(make_user) -> User:
    return await make_user("inspector", role=Role.USER, name="Ivan Inspector")


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return bearer(admin)


@pytest.fixture
def supervisor_headers(supervisor) -> dict[str, str]:
    return bearer(supervisor)


@pytest.fixture
def user_headers(inspector) -> dict[str, str]:
    return bearer(inspector)


@pytest.fixture
def headers_for():
    """Build an Authorization header for any user row."""
    return bearer
