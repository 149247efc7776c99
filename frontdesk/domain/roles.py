"""Desk roles and the capabilities each one is granted."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from frontdesk.domain.errors import PermissionDeniedError

if TYPE_CHECKING:
    from frontdesk.domain.models import User


class Role(str, Enum):
    MANAGER = "Manager"
    RECEPTIONIST = "Receptionist"


class Capability(str, Enum):
    VIEW_ROOMS = "view_rooms"
    MANAGE_ROOMS = "manage_rooms"
    VIEW_BOOKINGS = "view_bookings"
    MANAGE_BOOKINGS = "manage_bookings"
    VIEW_BILLS = "view_bills"
    MANAGE_BILLS = "manage_bills"
    VIEW_STATISTICS = "view_statistics"
    MANAGE_USERS = "manage_users"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.MANAGER: frozenset(
        {
            Capability.VIEW_ROOMS,
            Capability.MANAGE_ROOMS,
            Capability.VIEW_BOOKINGS,
            Capability.VIEW_BILLS,
            Capability.VIEW_STATISTICS,
            Capability.MANAGE_USERS,
        }
    ),
    Role.RECEPTIONIST: frozenset(
        {
            Capability.VIEW_ROOMS,
            Capability.VIEW_BOOKINGS,
            Capability.MANAGE_BOOKINGS,
            Capability.VIEW_BILLS,
            Capability.MANAGE_BILLS,
            Capability.VIEW_STATISTICS,
        }
    ),
}


def has_capability(role: Role, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def require_capability(user: User, capability: Capability) -> None:
    if not has_capability(user.role, capability):
        raise PermissionDeniedError(
            f"{user.role.value} '{user.user_id}' is not allowed to {capability.value}"
        )
