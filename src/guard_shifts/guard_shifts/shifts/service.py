from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_APP_START_WINDOW_MINUTES, DEFAULT_BIOMETRIC_TOLERANCE_MINUTES
from ..core.enums import OPEN_STATUSES, Role, ShiftStatus
from ..core.exceptions import (
    InvalidStateError,
    ServiceMismatchError,
    ShiftError,
    ShiftNotFoundError,
    WindowExpiredError,
)
from ..directory.model import Service
from ..directory.repository import ServiceDirectory
from ..guards.repository import GuardRepository
from . import state_machine
from .calculator.base import WorkedTimeCalculator
from .calculator.standard_calculator import StandardWorkedTimeCalculator
from .model import GeoLocation, Shift
from .repository import ShiftRepository

logger = logging.getLogger(__name__)


class ShiftLifecycleService:
    """Use case: drive one guard's shift through its workday.

    Every operation resolves the shift, applies one transition from
    ``state_machine`` and commits it with a conditional save. A save that loses
    a race surfaces as ``InvalidStateError``; nothing is retried.

    All operations accept ``now`` so callers and tests control the clock.
    """

    def __init__(
        self,
        shifts: ShiftRepository,
        guards: GuardRepository,
        services: ServiceDirectory,
        *,
        calculator: Optional[WorkedTimeCalculator] = None,
        biometric_tolerance_minutes: int = DEFAULT_BIOMETRIC_TOLERANCE_MINUTES,
        app_start_window_minutes: int = DEFAULT_APP_START_WINDOW_MINUTES,
    ):
        self._shifts = shifts
        self._guards = guards
        self._services = services
        self._calculator = calculator or StandardWorkedTimeCalculator()
        self._tolerance = int(biometric_tolerance_minutes)
        self._app_window = int(app_start_window_minutes)

    def _commit(self, original: Shift, updated: Shift, *, action: str) -> Shift:
        saved = self._shifts.save(updated, expected_status=original.status, expected_version=original.version)
        if not saved:
            logger.warning(
                "Lost update on shift %s (%s, guard %s) during %s",
                original.shift_id,
                original.status.value,
                original.guard_id,
                action,
            )
            raise InvalidStateError(f"Shift changed while trying to {action}; please retry from the current state")

        logger.info(
            "Shift %s guard %s: %s -> %s (%s)",
            updated.shift_id,
            updated.guard_id,
            original.status.value,
            updated.status.value,
            action,
        )
        return updated

    def _transition(self, shift: Shift, transition: Callable[[], Shift], *, action: str) -> Shift:
        try:
            updated = transition()
        except ShiftError as e:
            logger.warning("Rejected %s for guard %s on shift %s: %s", action, shift.guard_id, shift.shift_id, e)
            raise
        return self._commit(shift, updated, action=action)

    def _not_found(self, guard_id: int, action: str, message: str) -> ShiftNotFoundError:
        logger.warning("Rejected %s for guard %s: %s", action, guard_id, message)
        return ShiftNotFoundError(message)

    def _require_active(self, guard_id: int, action: str) -> Shift:
        shift = self._shifts.find_active(int(guard_id))
        if not shift:
            raise self._not_found(guard_id, action, "No active shift found")
        return shift

    def register_biometric_entry(
        self, guard_id: int, timestamp: Optional[datetime] = None, *, now: Optional[datetime] = None
    ) -> Shift:
        now = now or now_local()
        timestamp = timestamp or now

        shift = self._shifts.find_scheduled_for_day(int(guard_id), now.date())
        if not shift:
            raise self._not_found(guard_id, "register biometric entry", "No scheduled shift found for today")

        other = self._shifts.find_for_guard_in_status(int(guard_id), OPEN_STATUSES)
        if other:
            logger.warning("Guard %s already holds open shift %s (%s)", guard_id, other.shift_id, other.status.value)
            raise InvalidStateError(f"Guard already has shift {other.shift_id} in progress ({other.status.value})")

        return self._transition(
            shift,
            lambda: state_machine.register_biometric(shift, timestamp, tolerance_minutes=self._tolerance),
            action="register biometric entry",
        )

    def start_shift_in_app(self, guard_id: int, service_id: int, *, now: Optional[datetime] = None) -> Shift:
        now = now or now_local()

        shift = self._shifts.find_for_guard_in_status(int(guard_id), (ShiftStatus.BIOMETRIC_REGISTERED,))
        if not shift:
            raise self._not_found(guard_id, "start shift in app", "No biometric entry found or shift already started")

        if state_machine.app_start_window_expired(shift, now, window_minutes=self._app_window):
            self._commit(shift, state_machine.mark_missed(shift, now=now), action="expire app start window")
            logger.warning("App start window expired for guard %s on shift %s", guard_id, shift.shift_id)
            raise WindowExpiredError("Time window expired. Cannot start shift.")

        if int(service_id) != shift.service_id:
            logger.warning(
                "Guard %s tried to start shift %s for service %s (assigned %s)",
                guard_id,
                shift.shift_id,
                service_id,
                shift.service_id,
            )
            raise ServiceMismatchError("Service mismatch. Cannot start shift for different service.")

        return self._transition(
            shift, lambda: state_machine.confirm_app_start(shift, now=now), action="start shift in app"
        )

    def start_break(self, guard_id: int, *, now: Optional[datetime] = None) -> Shift:
        now = now or now_local()
        shift = self._require_active(guard_id, "start break")
        return self._transition(shift, lambda: state_machine.start_break(shift, now=now), action="start break")

    def end_break(self, guard_id: int, *, now: Optional[datetime] = None) -> Shift:
        now = now or now_local()
        shift = self._require_active(guard_id, "end break")
        return self._transition(shift, lambda: state_machine.end_break(shift, now=now), action="end break")

    def start_patrol(
        self, guard_id: int, location: Optional[GeoLocation] = None, *, now: Optional[datetime] = None
    ) -> Shift:
        now = now or now_local()
        shift = self._require_active(guard_id, "start patrol")
        return self._transition(
            shift, lambda: state_machine.start_patrol(shift, now=now, location=location), action="start patrol"
        )

    def end_patrol(
        self, guard_id: int, location: Optional[GeoLocation] = None, *, now: Optional[datetime] = None
    ) -> Shift:
        now = now or now_local()
        shift = self._require_active(guard_id, "end patrol")
        return self._transition(
            shift, lambda: state_machine.end_patrol(shift, now=now, location=location), action="end patrol"
        )

    def log_incident(
        self,
        guard_id: int,
        notes: str,
        location: Optional[GeoLocation] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Shift:
        now = now or now_local()
        notes = require_non_empty(notes, "Incident notes")
        shift = self._require_active(guard_id, "log incident")
        return self._transition(
            shift,
            lambda: state_machine.record_incident(shift, now=now, notes=notes, location=location),
            action="log incident",
        )

    def end_shift(self, guard_id: int, *, now: Optional[datetime] = None) -> Shift:
        now = now or now_local()
        shift = self._require_active(guard_id, "end shift")
        return self._transition(
            shift, lambda: state_machine.complete(shift, now=now, calculator=self._calculator), action="end shift"
        )

    def get_active_shift(self, guard_id: int) -> Optional[Shift]:
        return self._shifts.find_active(int(guard_id))

    def get_today_shift(self, guard_id: int, *, now: Optional[datetime] = None) -> Optional[Shift]:
        """Today's shift for dashboards: the open one if any, else the earliest."""
        now = now or now_local()
        items = self._shifts.list_for_guard_on_date(int(guard_id), now.date())
        for shift in items:
            if shift.status in OPEN_STATUSES:
                return shift
        return items[0] if items else None

    def get_available_services(self, guard_id: int) -> Sequence[Service]:
        guard = self._guards.get_by_id(int(guard_id))
        if not guard:
            return []

        if guard.role.is_administrative:
            return self._services.list_active()

        if guard.role == Role.GUARD:
            if not guard.service_codes:
                return []
            return self._services.list_active_by_codes(guard.service_codes)

        if guard.service_code:
            return self._services.list_active_by_codes([guard.service_code])
        return []
