"""Pydantic schemas for inspections."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from app.schemas.common import INT32_MAX, INT32_MIN, CamelModel


def _parse_timer_events(v: Any) -> Any:
    """Form posts carry the timeline as a JSON string; decode it to a list."""
    if v is None:
        return None
    if isinstance(v, str):
        try:
            v = json.loads(v)
        except ValueError as exc:
            raise ValueError("Timer events must be a JSON array") from exc
    if not isinstance(v, list):
        raise ValueError("Timer events must be a JSON array")
    return v


class InspectionCreate(CamelModel):
    unit_number: int = Field(ge=INT32_MIN, le=INT32_MAX)
    component_name: str = Field(max_length=200)
    supplier_details: str | None = None
    remarks: str | None = None
    duration: str | None = Field(default=None, max_length=50)
    is_completed: bool = False
    timer_events: list[Any] | None = None

    @field_validator("component_name")
    @classmethod
    def _component(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Component name is required")
        return v

    @field_validator("timer_events", mode="before")
    @classmethod
    def _timer_events(cls, v: Any) -> Any:
        return _parse_timer_events(v)


class InspectionUpdate(CamelModel):
    unit_number: int | None = Field(default=None, ge=INT32_MIN, le=INT32_MAX)
    component_name: str | None = Field(default=None, max_length=200)
    supplier_details: str | None = None
    remarks: str | None = None
    duration: str | None = Field(default=None, max_length=50)
    is_completed: bool | None = None
    timer_events: list[Any] | None = None

    @field_validator("component_name")
    @classmethod
    def _component(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Component name cannot be empty")
        return v

    @field_validator("timer_events", mode="before")
    @classmethod
    def _timer_events(cls, v: Any) -> Any:
        return _parse_timer_events(v)


class InspectorRef(CamelModel):
    name: str
    username: str


class InspectionRead(CamelModel):
    id: int
    unit_number: int
    component_name: str
    supplier_details: str | None
    remarks: str | None
    duration: str | None
    is_completed: bool
    end_time: datetime | None
    image_path: str | None
    timer_events: list[Any] | None
    inspected_by: int
    inspected_by_user: InspectorRef | None
    created_at: datetime | None
    updated_at: datetime | None


class InspectionPage(CamelModel):
    inspections: list[InspectionRead]
    total_pages: int
    current_page: int
    total: int
