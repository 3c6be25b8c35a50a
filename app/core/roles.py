"""
Role tiers and assignable workflow tasks.

Roles form a fixed total order: Admin > Supervisor > User. A check for a
tier passes for that tier and every tier ranked above it.
"""

from __future__ import annotations

import enum


class Role(str, enum.Enum):
    ADMIN = "Admin"
    SUPERVISOR = "Supervisor"
    USER = "User"


class AssignedTask(str, enum.Enum):
    INCOMING_INSPECTION = "Incoming Inspection"
    FINISHING = "Finishing"
    QUALITY_CONTROL = "Quality Control"
    DELIVERY = "Delivery"


_ROLE_RANK: dict[Role, int] = {
    Role.ADMIN: 3,
    Role.SUPERVISOR: 2,
    Role.USER: 1,
}

# Roles that can be handed a task from the assignment board
ASSIGNABLE_ROLES = (Role.USER, Role.SUPERVISOR)


def role_satisfies(role: str | Role | None, minimum: Role) -> bool:
    """Return True if *role* is *minimum* or ranked above it.

    Unknown role strings never satisfy any tier.
    """
    try:
        actual = Role(role)
    except ValueError:
        return False
    return _ROLE_RANK[actual] >= _ROLE_RANK[minimum]
