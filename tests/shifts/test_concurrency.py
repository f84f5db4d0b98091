from __future__ import annotations

import threading
from datetime import date, datetime

import pytest

from src.guard_shifts.guard_shifts.core.enums import OPEN_STATUSES, ActivityType, Role, ShiftStatus
from src.guard_shifts.guard_shifts.core.exceptions import InvalidStateError
from src.guard_shifts.guard_shifts.directory.memory_service_directory import InMemoryServiceDirectory
from src.guard_shifts.guard_shifts.directory.model import Service
from src.guard_shifts.guard_shifts.guards.memory_guard_repository import InMemoryGuardRepository
from src.guard_shifts.guard_shifts.guards.model import Guard
from src.guard_shifts.guard_shifts.shifts import state_machine
from src.guard_shifts.guard_shifts.shifts.memory_shift_repository import InMemoryShiftRepository
from src.guard_shifts.guard_shifts.shifts.service import ShiftLifecycleService


def _active_engine():
    shifts = InMemoryShiftRepository()
    engine = ShiftLifecycleService(
        shifts,
        InMemoryGuardRepository([Guard(guard_id=1, full_name="G1", role=Role.GUARD, service_codes=("ALBA",))]),
        InMemoryServiceDirectory([Service(service_id=1, code="ALBA", name="alba", display_name="Alba")]),
    )
    shift = shifts.create(
        guard_id=1,
        service_id=1,
        shift_date=date(2026, 2, 1),
        scheduled_start_time=datetime(2026, 2, 1, 9, 0),
        scheduled_end_time=datetime(2026, 2, 1, 17, 0),
    )
    engine.register_biometric_entry(1, datetime(2026, 2, 1, 9, 0), now=datetime(2026, 2, 1, 9, 0))
    engine.start_shift_in_app(1, 1, now=datetime(2026, 2, 1, 9, 5))
    return engine, shifts, shift


def test_stale_save_is_rejected():
    engine, shifts, shift = _active_engine()
    stale = shifts.get_by_id(shift.shift_id)

    engine.start_break(1, now=datetime(2026, 2, 1, 12, 0))

    # A second writer that read before the break started loses.
    late = state_machine.start_break(stale, now=datetime(2026, 2, 1, 12, 0, 1))
    assert not shifts.save(late, expected_status=stale.status, expected_version=stale.version)


def test_concurrent_start_break_commits_once():
    engine, shifts, shift = _active_engine()
    stale = shifts.get_by_id(shift.shift_id)

    barrier = threading.Barrier(8)
    results: list[bool] = []
    lock = threading.Lock()

    def attempt(i: int):
        updated = state_machine.start_break(stale, now=datetime(2026, 2, 1, 12, 0, i))
        barrier.wait()
        ok = shifts.save(updated, expected_status=stale.status, expected_version=stale.version)
        with lock:
            results.append(ok)

    threads = [threading.Thread(target=attempt, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    stored = shifts.get_by_id(shift.shift_id)
    assert stored.status == ShiftStatus.ON_BREAK
    assert [a.activity_type for a in stored.activities] == [ActivityType.BREAK_START]


def test_engine_reports_lost_race_as_invalid_state(monkeypatch):
    engine, shifts, shift = _active_engine()
    original_find = shifts.find_active

    def find_then_interfere(guard_id):
        found = original_find(guard_id)
        # Another request starts the break between our read and our write.
        shifts.save(
            state_machine.start_break(found, now=datetime(2026, 2, 1, 12, 0)),
            expected_status=found.status,
            expected_version=found.version,
        )
        return found

    monkeypatch.setattr(shifts, "find_active", find_then_interfere)

    with pytest.raises(InvalidStateError):
        engine.start_break(1, now=datetime(2026, 2, 1, 12, 0, 1))

    assert len(shifts.get_by_id(shift.shift_id).activities) == 1


def test_store_refuses_second_open_shift_for_guard():
    engine, shifts, _ = _active_engine()
    other = shifts.create(
        guard_id=1,
        service_id=1,
        shift_date=date(2026, 2, 1),
        scheduled_start_time=datetime(2026, 2, 1, 18, 0),
        scheduled_end_time=datetime(2026, 2, 1, 23, 0),
    )

    opened = state_machine.register_biometric(other, datetime(2026, 2, 1, 18, 0))
    assert not shifts.save(opened, expected_status=other.status, expected_version=other.version)

    open_shifts = [s for s in shifts.list_filtered() if s.guard_id == 1 and s.status in OPEN_STATUSES]
    assert len(open_shifts) == 1
