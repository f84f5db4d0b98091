from __future__ import annotations

from ...common.datetime_utils import minutes_between
from ..model import Shift
from .base import WorkedTimeCalculator


class StandardWorkedTimeCalculator(WorkedTimeCalculator):
    """Standard rule: (end - app start) - break minutes, not below 0.

    Patrol time is worked time and is not subtracted.
    """

    def worked_minutes(self, shift: Shift) -> float:
        if not shift.app_start_time or not shift.end_time:
            return 0.0
        minutes = minutes_between(shift.app_start_time, shift.end_time)
        minutes -= float(shift.total_break_minutes or 0)
        return max(minutes, 0.0)
