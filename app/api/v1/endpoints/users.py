"""
User roster & task assignment endpoints.

- Listing assignable users, reading a user and updating counters need any
  authenticated account.
- Full roster and task (un)assignment need Supervisor or above.
- Role and active-status changes need Admin.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import (RowId, get_current_active_user, get_db,
                             require_admin, require_supervisor)
from app.core.exceptions import NotFound
from app.core.roles import ASSIGNABLE_ROLES
from app.models.user import User
from app.schemas.user import (AssignableUser, RoleUpdate, StatsUpdate,
                              StatusUpdate, TaskAssignment, UserRead)

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFound("User not found")
    return user


async def _apply(db: AsyncSession, user_id: int, **values: Any) -> User:
    """Overwrite columns on one user row and return the refreshed record."""
    user = await _get_user_or_404(db, user_id)
    for field, value in values.items():
        setattr(user, field, value)
    await db.commit()
    await db.refresh(user)
    return user


@router.get("/assign", response_model=list[AssignableUser])
async def list_assignable_users(
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> list[User]:
    """Users and supervisors with their current task."""
    result = await db.execute(
        select(User)
        .where(User.role.in_([r.value for r in ASSIGNABLE_ROLES]))
        .order_by(User.name)
    )
    return list(result.scalars().all())


@router.get("", response_model=list[UserRead])
async def list_users(
    db: AsyncSession = Depends(get_db),
    _supervisor: User = Depends(require_supervisor),
) -> list[User]:
    result = await db.execute(select(User).order_by(User.id))
    return list(result.scalars().all())


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: RowId,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> User:
    return await _get_user_or_404(db, user_id)


@router.put("/{user_id}/role", response_model=UserRead)
async def update_role(
    user_id: RowId,
    body: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> User:
    user = await _apply(db, user_id, role=body.role.value)
    logger.info("Role of %s set to %s by %s", user.username, user.role, admin.username)
    return user


@router.put("/{user_id}/assign-task", response_model=UserRead)
async def assign_task(
    user_id: RowId,
    body: TaskAssignment,
    db: AsyncSession = Depends(get_db),
    supervisor: User = Depends(require_supervisor),
) -> User:
    user = await _apply(db, user_id, assigned_task=body.assigned_task.value)
    logger.info("Task %r assigned to %s by %s", user.assigned_task, user.username, supervisor.username)
    return user


@router.put("/{user_id}/unassign-task", response_model=UserRead)
async def unassign_task(
    user_id: RowId,
    db: AsyncSession = Depends(get_db),
    supervisor: User = Depends(require_supervisor),
) -> User:
    user = await _apply(db, user_id, assigned_task=None)
    logger.info("Task cleared for %s by %s", user.username, supervisor.username)
    return user


@router.put("/{user_id}/status", response_model=UserRead)
async def update_status(
    user_id: RowId,
    body: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
) -> User:
    user = await _apply(db, user_id, is_active=body.is_active)
    logger.info(
        "User %s %s by %s",
        user.username,
        "activated" if user.is_active else "deactivated",
        admin.username,
    )
    return user


@router.put("/{user_id}/stats", response_model=UserRead)
async def update_stats(
    user_id: RowId,
    body: StatsUpdate,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_active_user),
) -> User:
    """Overwrite the completion counters with the submitted values."""
    return await _apply(
        db,
        user_id,
        completed_today=body.completed_today,
        total_assigned=body.total_assigned,
    )
