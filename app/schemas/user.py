"""Pydantic schemas for User CRUD and task assignment."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from app.core.roles import AssignedTask, Role
from app.schemas.common import INT32_MAX, INT32_MIN, CamelModel


class UserCreate(CamelModel):
    name: str = Field(max_length=200)
    username: str = Field(max_length=100)
    password: str = Field(min_length=4)
    role: Role

    @field_validator("name", "username")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Must not be empty")
        return v


class UserSummary(CamelModel):
    """Public-safe projection returned at login and registration."""

    id: int
    name: str
    username: str
    role: Role
    assigned_task: AssignedTask | None = None


class AssignableUser(CamelModel):
    id: int
    name: str
    username: str
    assigned_task: AssignedTask | None


class UserRead(CamelModel):
    id: int
    name: str
    username: str
    role: Role
    is_active: bool
    assigned_task: AssignedTask | None
    completed_today: int
    total_assigned: int
    created_at: datetime | None
    updated_at: datetime | None


class RegisterResponse(CamelModel):
    message: str
    user: UserSummary


class RoleUpdate(CamelModel):
    role: Role


class TaskAssignment(CamelModel):
    assigned_task: AssignedTask


class StatusUpdate(CamelModel):
    is_active: bool


class StatsUpdate(CamelModel):
    completed_today: int = Field(ge=INT32_MIN, le=INT32_MAX)
    total_assigned: int = Field(ge=INT32_MIN, le=INT32_MAX)
