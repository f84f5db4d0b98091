from datetime import date, datetime

from src.guard_shifts.guard_shifts.core.enums import ShiftStatus
from src.guard_shifts.guard_shifts.shifts.calculator.standard_calculator import StandardWorkedTimeCalculator
from src.guard_shifts.guard_shifts.shifts.model import Shift


def _shift(**kw) -> Shift:
    return Shift(
        shift_id=1,
        guard_id=1,
        service_id=1,
        shift_date=date(2026, 1, 1),
        scheduled_start_time=datetime(2026, 1, 1, 8, 0),
        scheduled_end_time=datetime(2026, 1, 1, 17, 0),
        status=ShiftStatus.COMPLETED,
        **kw,
    )


def test_standard_calculator_subtracts_break_not_patrol():
    shift = _shift(
        app_start_time=datetime(2026, 1, 1, 8, 0),
        end_time=datetime(2026, 1, 1, 17, 0),
        total_break_minutes=60,
        total_patrol_minutes=45,
    )
    assert StandardWorkedTimeCalculator().worked_minutes(shift) == 8 * 60


def test_standard_calculator_is_zero_without_start_or_end():
    calc = StandardWorkedTimeCalculator()
    assert calc.worked_minutes(_shift(end_time=datetime(2026, 1, 1, 17, 0))) == 0
    assert calc.worked_minutes(_shift(app_start_time=datetime(2026, 1, 1, 8, 0))) == 0


def test_standard_calculator_never_negative():
    shift = _shift(
        app_start_time=datetime(2026, 1, 1, 8, 0),
        end_time=datetime(2026, 1, 1, 8, 20),
        total_break_minutes=30,
    )
    assert StandardWorkedTimeCalculator().worked_minutes(shift) == 0
