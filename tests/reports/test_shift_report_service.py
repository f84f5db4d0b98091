from __future__ import annotations

from datetime import date, datetime

import pytest

from src.guard_shifts.guard_shifts.core.enums import Role, ShiftStatus
from src.guard_shifts.guard_shifts.core.exceptions import ValidationError, WindowExpiredError
from src.guard_shifts.guard_shifts.directory.memory_service_directory import InMemoryServiceDirectory
from src.guard_shifts.guard_shifts.directory.model import Service
from src.guard_shifts.guard_shifts.guards.memory_guard_repository import InMemoryGuardRepository
from src.guard_shifts.guard_shifts.guards.model import Guard
from src.guard_shifts.guard_shifts.reports.service import ShiftReportService
from src.guard_shifts.guard_shifts.shifts.memory_shift_repository import InMemoryShiftRepository
from src.guard_shifts.guard_shifts.shifts.service import ShiftLifecycleService


def seeded():
    shifts = InMemoryShiftRepository()
    engine = ShiftLifecycleService(
        shifts,
        InMemoryGuardRepository(
            [Guard(guard_id=g, full_name=f"G{g}", role=Role.GUARD, service_codes=("ALBA",)) for g in (1, 2, 3)]
        ),
        InMemoryServiceDirectory([Service(service_id=1, code="ALBA", name="alba", display_name="Alba")]),
    )

    def create(guard_id, day, service_id=1):
        shifts.create(
            guard_id=guard_id,
            service_id=service_id,
            shift_date=date(2026, 2, day),
            scheduled_start_time=datetime(2026, 2, day, 9, 0),
            scheduled_end_time=datetime(2026, 2, day, 17, 0),
        )

    # guard 1: completed shift, 8h with 30 min break
    create(1, 1)
    engine.register_biometric_entry(1, datetime(2026, 2, 1, 9, 0), now=datetime(2026, 2, 1, 9, 0))
    engine.start_shift_in_app(1, 1, now=datetime(2026, 2, 1, 9, 0))
    engine.start_break(1, now=datetime(2026, 2, 1, 12, 0))
    engine.end_break(1, now=datetime(2026, 2, 1, 12, 30))
    engine.end_shift(1, now=datetime(2026, 2, 1, 17, 0))

    # guard 2: completed shift with a 20 min patrol
    create(2, 1)
    engine.register_biometric_entry(2, datetime(2026, 2, 1, 9, 0), now=datetime(2026, 2, 1, 9, 0))
    engine.start_shift_in_app(2, 1, now=datetime(2026, 2, 1, 9, 0))
    engine.start_patrol(2, now=datetime(2026, 2, 1, 10, 0))
    engine.end_patrol(2, now=datetime(2026, 2, 1, 10, 20))
    engine.end_shift(2, now=datetime(2026, 2, 1, 13, 0))

    # guard 3: missed the app window
    create(3, 1)
    engine.register_biometric_entry(3, datetime(2026, 2, 1, 9, 0), now=datetime(2026, 2, 1, 9, 0))
    with pytest.raises(WindowExpiredError):
        engine.start_shift_in_app(3, 1, now=datetime(2026, 2, 1, 10, 0))

    # later scheduled shift and a shift for another service
    create(1, 5)
    create(2, 1, service_id=2)

    return ShiftReportService(shifts)


def test_shifts_by_service_with_range():
    reports = seeded()

    assert len(reports.get_shifts_by_service(1)) == 4
    in_range = reports.get_shifts_by_service(1, start=date(2026, 2, 1), end=date(2026, 2, 1))
    assert {s.guard_id for s in in_range} == {1, 2, 3}
    assert reports.get_shifts_by_service(1)[0].shift_date == date(2026, 2, 5)


def test_stats_grouped_by_status():
    reports = seeded()

    stats = {s.status: s for s in reports.get_shift_stats(1)}

    assert set(stats) == {ShiftStatus.COMPLETED, ShiftStatus.MISSED, ShiftStatus.SCHEDULED}
    completed = stats[ShiftStatus.COMPLETED]
    assert completed.count == 2
    assert completed.total_worked_minutes == pytest.approx(450 + 240)
    assert completed.total_break_minutes == pytest.approx(30)
    assert completed.total_patrol_minutes == pytest.approx(20)
    assert stats[ShiftStatus.MISSED].count == 1


def test_stats_report_formats_hours():
    report = seeded().build_stats_report(1, start=date(2026, 2, 1), end=date(2026, 2, 1))

    assert report.total_shifts == 3
    assert report.total_worked_minutes == pytest.approx(690)
    completed = next(r for r in report.rows if r["status"] == "completed")
    assert completed["worked_hours"] == "11:30"


def test_reversed_range_is_rejected():
    with pytest.raises(ValidationError):
        seeded().get_shift_stats(1, start=date(2026, 2, 5), end=date(2026, 2, 1))
