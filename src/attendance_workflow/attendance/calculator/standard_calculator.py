from __future__ import annotations

from datetime import datetime

from ...core.constants import DEFAULT_STANDARD_WORK_MINUTES
from .base import WorkTime, WorkTimeCalculator


class StandardWorkTimeCalculator(WorkTimeCalculator):
    """Standard rule: (out - in) - break_minutes, not below 0; anything past
    the standard day is overtime."""

    def __init__(self, standard_work_minutes: int = DEFAULT_STANDARD_WORK_MINUTES):
        self._standard = int(standard_work_minutes)

    def calculate(self, *, clock_in: datetime, clock_out: datetime, break_minutes: int = 0) -> WorkTime:
        minutes = int((clock_out - clock_in).total_seconds() // 60)
        minutes -= int(break_minutes or 0)
        minutes = max(minutes, 0)
        return WorkTime(work_minutes=minutes, overtime_minutes=max(minutes - self._standard, 0))
