from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WorkTime:
    work_minutes: int
    overtime_minutes: int


class WorkTimeCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked/overtime minutes)."""

    @abstractmethod
    def calculate(self, *, clock_in: datetime, clock_out: datetime, break_minutes: int = 0) -> WorkTime:
        raise NotImplementedError
