"""Shift lifecycle transitions.

Every function here is pure: it validates the source state, then returns a new
``Shift`` with the target status, the derived fields, and ``version`` bumped by
one. Nothing is persisted; the caller saves the result conditionally on the
original status and version.

    scheduled -> biometric_registered -> active <-> on_break
                                   |          <-> on_patrol
                                   v          -> completed
                                 missed
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import minutes_between
from ..core.constants import DEFAULT_APP_START_WINDOW_MINUTES, DEFAULT_BIOMETRIC_TOLERANCE_MINUTES
from ..core.enums import STARTED_STATUSES, ActivityType, ShiftStatus
from ..core.exceptions import InvalidStateError, OutOfWindowError
from .calculator.base import WorkedTimeCalculator
from .calculator.standard_calculator import StandardWorkedTimeCalculator
from .model import GeoLocation, Shift, ShiftActivity

TRANSITIONS: dict[ShiftStatus, frozenset[ShiftStatus]] = {
    ShiftStatus.SCHEDULED: frozenset({ShiftStatus.BIOMETRIC_REGISTERED}),
    ShiftStatus.BIOMETRIC_REGISTERED: frozenset({ShiftStatus.ACTIVE, ShiftStatus.MISSED}),
    ShiftStatus.ACTIVE: frozenset({ShiftStatus.ON_BREAK, ShiftStatus.ON_PATROL, ShiftStatus.COMPLETED}),
    ShiftStatus.ON_BREAK: frozenset({ShiftStatus.ACTIVE, ShiftStatus.COMPLETED}),
    ShiftStatus.ON_PATROL: frozenset({ShiftStatus.ACTIVE, ShiftStatus.COMPLETED}),
    ShiftStatus.COMPLETED: frozenset(),
    ShiftStatus.MISSED: frozenset(),
}


def can_transition(source: ShiftStatus, target: ShiftStatus) -> bool:
    return target in TRANSITIONS[source]


def _move(shift: Shift, target: ShiftStatus, *, now: datetime, **changes) -> Shift:
    if not can_transition(shift.status, target):
        raise InvalidStateError(f"Cannot move shift {shift.shift_id} from {shift.status.value} to {target.value}")
    return replace(shift, status=target, version=shift.version + 1, updated_at=now, **changes)


def _require(shift: Shift, *allowed: ShiftStatus, action: str) -> None:
    if shift.status not in allowed:
        raise InvalidStateError(f"Cannot {action} while shift is {shift.status.value}")


def open_interval_start(
    activities: tuple[ShiftActivity, ...], start_type: ActivityType, end_type: ActivityType
) -> Optional[ShiftActivity]:
    """Most recent ``start_type`` activity not followed by an ``end_type``."""
    for activity in reversed(activities):
        if activity.activity_type == end_type:
            return None
        if activity.activity_type == start_type:
            return activity
    return None


def biometric_window(shift: Shift, tolerance_minutes: int) -> tuple[datetime, datetime]:
    tolerance = timedelta(minutes=tolerance_minutes)
    return shift.scheduled_start_time - tolerance, shift.scheduled_start_time + tolerance


def register_biometric(
    shift: Shift,
    timestamp: datetime,
    *,
    tolerance_minutes: int = DEFAULT_BIOMETRIC_TOLERANCE_MINUTES,
) -> Shift:
    _require(shift, ShiftStatus.SCHEDULED, action="register biometric entry")

    earliest, latest = biometric_window(shift, tolerance_minutes)
    if timestamp < earliest or timestamp > latest:
        raise OutOfWindowError(
            f"Biometric entry at {timestamp:%H:%M} outside allowed window {earliest:%H:%M}-{latest:%H:%M}"
        )

    return _move(
        shift,
        ShiftStatus.BIOMETRIC_REGISTERED,
        now=timestamp,
        biometric_start_time=timestamp,
        is_within_time_window=True,
    )


def app_start_window_expired(
    shift: Shift,
    now: datetime,
    *,
    window_minutes: int = DEFAULT_APP_START_WINDOW_MINUTES,
) -> bool:
    if shift.biometric_start_time is None:
        raise InvalidStateError(f"Shift {shift.shift_id} has no biometric entry")
    return now > shift.biometric_start_time + timedelta(minutes=window_minutes)


def mark_missed(shift: Shift, *, now: datetime) -> Shift:
    _require(shift, ShiftStatus.BIOMETRIC_REGISTERED, action="mark shift as missed")
    return _move(shift, ShiftStatus.MISSED, now=now)


def confirm_app_start(shift: Shift, *, now: datetime) -> Shift:
    _require(shift, ShiftStatus.BIOMETRIC_REGISTERED, action="start shift")
    if shift.biometric_start_time is None or shift.app_start_time is not None:
        raise InvalidStateError(f"Shift {shift.shift_id} cannot be confirmed in the app")
    return _move(shift, ShiftStatus.ACTIVE, now=now, app_start_time=now)


def start_break(shift: Shift, *, now: datetime) -> Shift:
    _require(shift, ShiftStatus.ACTIVE, action="start a break")
    activity = ShiftActivity(activity_type=ActivityType.BREAK_START, timestamp=now)
    return _move(shift, ShiftStatus.ON_BREAK, now=now, activities=shift.activities + (activity,))


def end_break(shift: Shift, *, now: datetime) -> Shift:
    _require(shift, ShiftStatus.ON_BREAK, action="end a break")

    total = shift.total_break_minutes
    opened = open_interval_start(shift.activities, ActivityType.BREAK_START, ActivityType.BREAK_END)
    if opened is not None:
        total += max(minutes_between(opened.timestamp, now), 0.0)

    activity = ShiftActivity(activity_type=ActivityType.BREAK_END, timestamp=now)
    return _move(
        shift,
        ShiftStatus.ACTIVE,
        now=now,
        activities=shift.activities + (activity,),
        total_break_minutes=total,
    )


def start_patrol(shift: Shift, *, now: datetime, location: Optional[GeoLocation] = None) -> Shift:
    _require(shift, ShiftStatus.ACTIVE, action="start a patrol")
    activity = ShiftActivity(activity_type=ActivityType.PATROL_START, timestamp=now, location=location)
    return _move(shift, ShiftStatus.ON_PATROL, now=now, activities=shift.activities + (activity,))


def end_patrol(shift: Shift, *, now: datetime, location: Optional[GeoLocation] = None) -> Shift:
    _require(shift, ShiftStatus.ON_PATROL, action="end a patrol")

    total = shift.total_patrol_minutes
    opened = open_interval_start(shift.activities, ActivityType.PATROL_START, ActivityType.PATROL_END)
    if opened is not None:
        total += max(minutes_between(opened.timestamp, now), 0.0)

    activity = ShiftActivity(activity_type=ActivityType.PATROL_END, timestamp=now, location=location)
    return _move(
        shift,
        ShiftStatus.ACTIVE,
        now=now,
        activities=shift.activities + (activity,),
        total_patrol_minutes=total,
    )


def record_incident(
    shift: Shift,
    *,
    now: datetime,
    notes: str,
    location: Optional[GeoLocation] = None,
) -> Shift:
    """Append an incident; the status does not change."""
    _require(shift, *STARTED_STATUSES, action="log an incident")
    activity = ShiftActivity(activity_type=ActivityType.INCIDENT, timestamp=now, notes=notes, location=location)
    return replace(
        shift,
        activities=shift.activities + (activity,),
        version=shift.version + 1,
        updated_at=now,
    )


def complete(
    shift: Shift,
    *,
    now: datetime,
    calculator: Optional[WorkedTimeCalculator] = None,
) -> Shift:
    _require(shift, *STARTED_STATUSES, action="end the shift")
    version = shift.version + 1

    # Close any open interval first so its minutes are credited.
    if shift.status == ShiftStatus.ON_BREAK:
        shift = end_break(shift, now=now)
    elif shift.status == ShiftStatus.ON_PATROL:
        shift = end_patrol(shift, now=now)

    calculator = calculator or StandardWorkedTimeCalculator()
    closed = _move(shift, ShiftStatus.COMPLETED, now=now, end_time=now)
    return replace(closed, total_worked_minutes=calculator.worked_minutes(closed), version=version)
