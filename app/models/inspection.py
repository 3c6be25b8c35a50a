"""
Inspection model: one quality-check event for a unit / component.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (JSON, Boolean, Column, DateTime, ForeignKey, Index,
                        Integer, String, Text, false)
from sqlalchemy.orm import relationship

from app.db.base import Base, utcnow


class Inspection(Base):
    __tablename__ = "inspections"
    __table_args__ = (Index("ix_inspections_inspector_created", "inspected_by", "created_at"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    unit_number: int = Column(Integer, nullable=False, index=True)  # type: ignore[assignment]
    component_name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    supplier_details: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    remarks: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    duration: str | None = Column(String(50), nullable=True)  # type: ignore[assignment]
    is_completed: bool = Column(Boolean, nullable=False, default=False, server_default=false())  # type: ignore[assignment]
    # Set once, when is_completed first becomes true
    end_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    image_path: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    timer_events: list[Any] | None = Column(JSON, nullable=True)  # type: ignore[assignment]
    inspected_by: int = Column(Integer, ForeignKey("users.id"), nullable=False)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=utcnow, index=True)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    inspected_by_user = relationship("User", lazy="selectin")
