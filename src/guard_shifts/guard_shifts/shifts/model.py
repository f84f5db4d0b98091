from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..core.enums import ActivityType, ShiftStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> Optional["GeoLocation"]:
        if not data:
            return None
        if data.get("latitude") is None or data.get("longitude") is None:
            return None
        return cls(latitude=float(data["latitude"]), longitude=float(data["longitude"]))

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class ShiftActivity:
    activity_type: ActivityType
    timestamp: datetime
    notes: str = ""
    location: Optional[GeoLocation] = None

    def to_dict(self) -> dict:
        return {
            "type": self.activity_type.value,
            "timestamp": self.timestamp.isoformat(),
            "notes": self.notes,
            "location": self.location.to_dict() if self.location else None,
        }


@dataclass(frozen=True)
class Shift:
    """Domain entity: one scheduled work period for one guard at one service.

    Instances are immutable; every lifecycle transition returns a new value
    (see ``state_machine``) which the store writes conditionally on the
    previous ``status`` and ``version``.
    """

    shift_id: int
    guard_id: int
    service_id: int
    shift_date: date
    scheduled_start_time: datetime
    scheduled_end_time: datetime
    status: ShiftStatus = ShiftStatus.SCHEDULED
    biometric_start_time: Optional[datetime] = None
    app_start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    activities: tuple[ShiftActivity, ...] = ()
    is_within_time_window: bool = False
    total_worked_minutes: float = 0.0
    total_break_minutes: float = 0.0
    total_patrol_minutes: float = 0.0
    notes: str = ""
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        return {
            "shift_id": self.shift_id,
            "guard_id": self.guard_id,
            "service_id": self.service_id,
            "shift_date": self.shift_date.isoformat(),
            "scheduled_start_time": _iso(self.scheduled_start_time),
            "scheduled_end_time": _iso(self.scheduled_end_time),
            "biometric_start_time": _iso(self.biometric_start_time),
            "app_start_time": _iso(self.app_start_time),
            "end_time": _iso(self.end_time),
            "status": self.status.value,
            "activities": [a.to_dict() for a in self.activities],
            "is_within_time_window": self.is_within_time_window,
            "total_worked_minutes": round(self.total_worked_minutes, 2),
            "total_break_minutes": round(self.total_break_minutes, 2),
            "total_patrol_minutes": round(self.total_patrol_minutes, 2),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class ShiftStatusStats:
    """Read-model: per-status aggregate used by reports."""

    status: ShiftStatus
    count: int
    total_worked_minutes: float
    total_break_minutes: float
    total_patrol_minutes: float
