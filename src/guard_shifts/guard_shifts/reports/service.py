from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import format_minutes
from ..core.exceptions import ValidationError
from ..shifts.model import Shift, ShiftStatusStats
from ..shifts.repository import ShiftRepository


@dataclass(frozen=True)
class ShiftStatsReport:
    rows: list[dict]
    total_shifts: int
    total_worked_minutes: float


class ShiftReportService:
    """Read-only queries over the shift store for attendance reporting."""

    def __init__(self, shifts: ShiftRepository):
        self._shifts = shifts

    @staticmethod
    def _check_range(start: Optional[date], end: Optional[date]) -> None:
        if start and end and end < start:
            raise ValidationError("End date cannot be before start date")

    def get_shifts_by_service(
        self, service_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[Shift]:
        self._check_range(start, end)
        return self._shifts.list_by_service(int(service_id), start=start, end=end)

    def get_shift_stats(
        self, service_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> Sequence[ShiftStatusStats]:
        self._check_range(start, end)
        return self._shifts.aggregate_by_status(int(service_id), start=start, end=end)

    def build_stats_report(
        self, service_id: int, *, start: Optional[date] = None, end: Optional[date] = None
    ) -> ShiftStatsReport:
        stats = self.get_shift_stats(service_id, start=start, end=end)

        rows = [
            {
                "status": s.status.value,
                "count": s.count,
                "total_worked_minutes": round(s.total_worked_minutes, 2),
                "total_break_minutes": round(s.total_break_minutes, 2),
                "total_patrol_minutes": round(s.total_patrol_minutes, 2),
                "worked_hours": format_minutes(s.total_worked_minutes),
            }
            for s in stats
        ]
        return ShiftStatsReport(
            rows=rows,
            total_shifts=sum(s.count for s in stats),
            total_worked_minutes=round(sum(s.total_worked_minutes for s in stats), 2),
        )
