"""Pydantic schemas for login and session tokens."""

from __future__ import annotations

from pydantic import field_validator

from app.schemas.common import CamelModel
from app.schemas.user import UserSummary


class LoginRequest(CamelModel):
    username: str
    password: str

    @field_validator("username", "password")
    @classmethod
    def _required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Field is required")
        return v


class LoginResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user: UserSummary


class TokenPayload(CamelModel):
    sub: str | None = None
    role: str | None = None
    type: str | None = None
