"""Shared Pydantic base & small response envelopes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Bounds of the SQL INTEGER columns
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python. Accepts either on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    message: str


class HealthResponse(CamelModel):
    status: str
    version: str
