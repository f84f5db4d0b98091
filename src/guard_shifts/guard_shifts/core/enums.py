from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles as stored on user records by the identity layer."""

    ADMIN = "admin"
    ADMINISTRADOR = "administrador"
    SUPERVISOR = "supervisor"
    MANAGER = "manager"
    GUARD = "guardia"
    RESIDENT = "residente"
    RESIDENT_EN = "resident"
    COMMITTEE = "comite"

    @classmethod
    def parse(cls, value: object) -> "Role":
        """Stored or session role string; unknown values count as residents."""
        try:
            return cls(value)
        except ValueError:
            return cls.RESIDENT

    @property
    def is_administrative(self) -> bool:
        return self in ADMINISTRATIVE_ROLES


ADMINISTRATIVE_ROLES = frozenset({Role.ADMIN, Role.ADMINISTRADOR, Role.SUPERVISOR, Role.MANAGER})


class ShiftStatus(str, Enum):
    """Lifecycle state of a scheduled shift."""

    SCHEDULED = "scheduled"
    BIOMETRIC_REGISTERED = "biometric_registered"
    ACTIVE = "active"
    ON_BREAK = "on_break"
    ON_PATROL = "on_patrol"
    COMPLETED = "completed"
    MISSED = "missed"

    @property
    def is_terminal(self) -> bool:
        return self in (ShiftStatus.COMPLETED, ShiftStatus.MISSED)


# A guard holds at most one shift in any of these.
OPEN_STATUSES = frozenset(
    {ShiftStatus.BIOMETRIC_REGISTERED, ShiftStatus.ACTIVE, ShiftStatus.ON_BREAK, ShiftStatus.ON_PATROL}
)

# Shifts that break/patrol/end operations act upon.
STARTED_STATUSES = frozenset({ShiftStatus.ACTIVE, ShiftStatus.ON_BREAK, ShiftStatus.ON_PATROL})


class ActivityType(str, Enum):
    BREAK_START = "break_start"
    BREAK_END = "break_end"
    PATROL_START = "patrol_start"
    PATROL_END = "patrol_end"
    INCIDENT = "incident"
