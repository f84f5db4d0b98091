from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_positive_id
from ..core.enums import Role, ShiftStatus
from ..core.exceptions import AuthorizationError, GuardNotFoundError, ServiceNotFoundError, ValidationError
from ..directory.repository import ServiceDirectory
from ..guards.repository import GuardRepository
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository

logger = logging.getLogger(__name__)


class ScheduleService:
    """Use case: administrative shift scheduling and listing."""

    def __init__(self, shifts: ShiftRepository, guards: GuardRepository, services: ServiceDirectory):
        self._shifts = shifts
        self._guards = guards
        self._services = services

    def schedule_shift(
        self,
        *,
        current_role: Role,
        guard_id: int,
        service_id: int,
        scheduled_start_time: datetime,
        scheduled_end_time: datetime,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Shift:
        if not current_role.is_administrative:
            raise AuthorizationError("You are not allowed to schedule shifts")

        guard_id = require_positive_id(guard_id, "Guard")
        service_id = require_positive_id(service_id, "Service")
        if scheduled_end_time <= scheduled_start_time:
            raise ValidationError("Scheduled end must be after scheduled start")

        if not self._guards.get_by_id(guard_id):
            raise GuardNotFoundError(f"Guard {guard_id} does not exist")

        service = self._services.get_by_id(service_id)
        if not service:
            raise ServiceNotFoundError(f"Service {service_id} does not exist")
        if not service.is_active:
            raise ValidationError(f"Service {service.code} is not active")

        shift = self._shifts.create(
            guard_id=guard_id,
            service_id=service_id,
            shift_date=scheduled_start_time.date(),
            scheduled_start_time=scheduled_start_time,
            scheduled_end_time=scheduled_end_time,
            notes=notes.strip() if notes else "",
            created_at=now or now_local(),
        )
        logger.info(
            "Scheduled shift %s for guard %s at %s (%s - %s)",
            shift.shift_id,
            guard_id,
            service.code,
            scheduled_start_time.isoformat(),
            scheduled_end_time.isoformat(),
        )
        return shift

    def list_shifts(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        status: Optional[ShiftStatus] = None,
        service_id: Optional[int] = None,
    ) -> Sequence[Shift]:
        if start and end and end < start:
            raise ValidationError("End date cannot be before start date")
        return self._shifts.list_filtered(start=start, end=end, status=status, service_id=service_id)
