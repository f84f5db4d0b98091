from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import ShiftStatus
from .model import Shift, ShiftStatusStats


class ShiftRepository(Protocol):
    """Shift store interface.

    ``save`` is the only mutation after ``create``: it must commit atomically
    and only when the stored shift still has ``expected_status`` and
    ``expected_version``. It must also refuse a write that would give the guard
    a second shift in ``OPEN_STATUSES``. It returns ``False`` when it refuses.
    """

    def create(
        self,
        *,
        guard_id: int,
        service_id: int,
        shift_date: date,
        scheduled_start_time: datetime,
        scheduled_end_time: datetime,
        notes: str = "",
        created_at: Optional[datetime] = None,
    ) -> Shift:
        raise NotImplementedError

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def find_scheduled_for_day(self, guard_id: int, shift_date: date) -> Optional[Shift]:
        """The guard's earliest-starting ``scheduled`` shift on ``shift_date``."""

        raise NotImplementedError

    def find_for_guard_in_status(
        self, guard_id: int, statuses: Iterable[ShiftStatus], *, shift_date: Optional[date] = None
    ) -> Optional[Shift]:
        raise NotImplementedError

    def find_active(self, guard_id: int) -> Optional[Shift]:
        """The guard's shift in active, on_break or on_patrol, if any."""

        raise NotImplementedError

    def list_for_guard_on_date(self, guard_id: int, shift_date: date) -> Sequence[Shift]:
        raise NotImplementedError

    def save(self, shift: Shift, *, expected_status: ShiftStatus, expected_version: int) -> bool:
        raise NotImplementedError

    def list_by_service(
        self, service_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[Shift]:
        """Newest ``shift_date`` first, then by scheduled start.

        The date range applies only when both bounds are given.
        """

        raise NotImplementedError

    def list_filtered(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        status: Optional[ShiftStatus] = None,
        service_id: Optional[int] = None,
    ) -> Sequence[Shift]:
        raise NotImplementedError

    def aggregate_by_status(
        self, service_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[ShiftStatusStats]:
        raise NotImplementedError
