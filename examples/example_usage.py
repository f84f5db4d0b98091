"""Example: drive a guard's workday through the service layer (no Flask).

Uses the in-memory adapters, so no database is needed.
"""

from datetime import datetime, timedelta

from src.guard_shifts.guard_shifts.container import build_container
from src.guard_shifts.guard_shifts.core.enums import Role
from src.guard_shifts.guard_shifts.directory.model import Service
from src.guard_shifts.guard_shifts.guards.model import Guard


def main():
    container = build_container(shift_store="memory")
    container.services_repo.add(Service(service_id=1, code="ALBA", name="alba", display_name="Alba"))
    container.guards_repo.add(Guard(guard_id=7, full_name="Guard Demo", role=Role.GUARD, service_codes=("ALBA",)))

    start = datetime.now().replace(second=0, microsecond=0)
    container.schedule_service.schedule_shift(
        current_role=Role.ADMIN,
        guard_id=7,
        service_id=1,
        scheduled_start_time=start,
        scheduled_end_time=start + timedelta(hours=8),
    )

    engine = container.shift_service
    engine.register_biometric_entry(7, start, now=start)
    engine.start_shift_in_app(7, 1, now=start + timedelta(minutes=5))
    engine.start_break(7, now=start + timedelta(hours=3))
    engine.end_break(7, now=start + timedelta(hours=3, minutes=30))
    shift = engine.end_shift(7, now=start + timedelta(hours=8))
    print(shift.to_dict())


if __name__ == "__main__":
    main()
