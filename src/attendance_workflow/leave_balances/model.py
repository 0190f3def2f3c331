from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import LeaveType


@dataclass(frozen=True)
class LeaveBalance:
    user_id: int
    fiscal_year: int
    leave_type: LeaveType
    total_days: float = 0.0
    used_days: float = 0.0
    carried_over: float = 0.0
    balance_id: Optional[int] = None

    @property
    def remaining_days(self) -> float:
        return self.total_days + self.carried_over - self.used_days

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "fiscal_year": self.fiscal_year,
            "leave_type": self.leave_type.value,
            "total_days": self.total_days,
            "used_days": self.used_days,
            "carried_over": self.carried_over,
            "remaining_days": self.remaining_days,
        }
