"""
User model: credentials, role-based access control & task assignment.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, true

from app.core.roles import Role
from app.db.base import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    username: str = Column(String(100), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    role: str = Column(  # type: ignore[assignment]
        String(20),
        nullable=False,
        default=Role.USER.value,
        server_default=Role.USER.value,
    )  # Admin | Supervisor | User
    is_active: bool = Column(Boolean, nullable=False, default=True, server_default=true())  # type: ignore[assignment]
    assigned_task: str | None = Column(String(50), nullable=True)  # type: ignore[assignment]
    # Incoming Inspection | Finishing | Quality Control | Delivery
    completed_today: int = Column(Integer, nullable=False, default=0, server_default="0")  # type: ignore[assignment]
    total_assigned: int = Column(Integer, nullable=False, default=0, server_default="0")  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )
