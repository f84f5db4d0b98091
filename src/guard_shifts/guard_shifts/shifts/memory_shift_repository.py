from __future__ import annotations

import threading
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import OPEN_STATUSES, STARTED_STATUSES, ShiftStatus
from .model import Shift, ShiftStatusStats
from .repository import ShiftRepository


def _in_range(shift: Shift, start: Optional[date], end: Optional[date]) -> bool:
    if start is None or end is None:
        return True
    return start <= shift.shift_date <= end


def _listing_order(items: list[Shift]) -> list[Shift]:
    items.sort(key=lambda s: s.scheduled_start_time)
    items.sort(key=lambda s: s.shift_date, reverse=True)
    return items


class InMemoryShiftRepository(ShiftRepository):
    """Process-local shift store.

    A single lock serializes every read and conditional write, which is enough
    to give ``save`` compare-and-swap semantics across threads.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: dict[int, Shift] = {}
        self._id = 0

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
        with self._lock:
            self._id += 1
            shift = Shift(
                shift_id=self._id,
                guard_id=int(guard_id),
                service_id=int(service_id),
                shift_date=shift_date,
                scheduled_start_time=scheduled_start_time,
                scheduled_end_time=scheduled_end_time,
                notes=notes or "",
                created_at=created_at,
                updated_at=created_at,
            )
            self._by_id[shift.shift_id] = shift
            return shift

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with self._lock:
            return self._by_id.get(int(shift_id))

    def find_scheduled_for_day(self, guard_id: int, shift_date: date) -> Optional[Shift]:
        return self.find_for_guard_in_status(guard_id, (ShiftStatus.SCHEDULED,), shift_date=shift_date)

    def find_for_guard_in_status(
        self, guard_id: int, statuses: Iterable[ShiftStatus], *, shift_date: Optional[date] = None
    ) -> Optional[Shift]:
        wanted = set(statuses)
        with self._lock:
            items = [
                s
                for s in self._by_id.values()
                if s.guard_id == int(guard_id)
                and s.status in wanted
                and (shift_date is None or s.shift_date == shift_date)
            ]
        items.sort(key=lambda s: s.scheduled_start_time)
        return items[0] if items else None

    def find_active(self, guard_id: int) -> Optional[Shift]:
        return self.find_for_guard_in_status(guard_id, STARTED_STATUSES)

    def list_for_guard_on_date(self, guard_id: int, shift_date: date) -> Sequence[Shift]:
        with self._lock:
            items = [s for s in self._by_id.values() if s.guard_id == int(guard_id) and s.shift_date == shift_date]
        items.sort(key=lambda s: s.scheduled_start_time)
        return items

    def save(self, shift: Shift, *, expected_status: ShiftStatus, expected_version: int) -> bool:
        with self._lock:
            current = self._by_id.get(shift.shift_id)
            if current is None:
                return False
            if current.status != expected_status or current.version != expected_version:
                return False
            if shift.status in OPEN_STATUSES and expected_status not in OPEN_STATUSES:
                if any(
                    s.guard_id == shift.guard_id and s.shift_id != shift.shift_id and s.status in OPEN_STATUSES
                    for s in self._by_id.values()
                ):
                    return False
            self._by_id[shift.shift_id] = shift
            return True

    def list_by_service(
        self, service_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[Shift]:
        return self.list_filtered(start=start, end=end, service_id=service_id)

    def list_filtered(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        status: Optional[ShiftStatus] = None,
        service_id: Optional[int] = None,
    ) -> Sequence[Shift]:
        with self._lock:
            items = [
                s
                for s in self._by_id.values()
                if _in_range(s, start, end)
                and (status is None or s.status == status)
                and (service_id is None or s.service_id == int(service_id))
            ]
        return _listing_order(items)

    def aggregate_by_status(
        self, service_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[ShiftStatusStats]:
        groups: dict[ShiftStatus, list[Shift]] = {}
        for s in self.list_by_service(service_id, start=start, end=end):
            groups.setdefault(s.status, []).append(s)

        return [
            ShiftStatusStats(
                status=status,
                count=len(items),
                total_worked_minutes=sum(s.total_worked_minutes for s in items),
                total_break_minutes=sum(s.total_break_minutes for s in items),
                total_patrol_minutes=sum(s.total_patrol_minutes for s in items),
            )
            for status, items in sorted(groups.items(), key=lambda kv: kv[0].value)
        ]
