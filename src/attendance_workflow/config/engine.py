from __future__ import annotations

from dataclasses import dataclass, field
from types import ModuleType
from typing import Dict

from ..core.constants import (
    DEFAULT_FISCAL_YEAR_START_MONTH,
    DEFAULT_LEAVE_GRANTS,
    DEFAULT_MONTHLY_OVERTIME_LIMIT_MINUTES,
    DEFAULT_STANDARD_WORK_MINUTES,
    DEFAULT_YEARLY_OVERTIME_LIMIT_MINUTES,
)
from ..core.enums import BALANCE_LEAVE_TYPES, LeaveType


@dataclass(frozen=True)
class EngineSettings:
    """Runtime parameters handed to the services."""

    standard_work_minutes: int = DEFAULT_STANDARD_WORK_MINUTES
    monthly_overtime_limit_minutes: int = DEFAULT_MONTHLY_OVERTIME_LIMIT_MINUTES
    yearly_overtime_limit_minutes: int = DEFAULT_YEARLY_OVERTIME_LIMIT_MINUTES
    fiscal_year_start_month: int = DEFAULT_FISCAL_YEAR_START_MONTH
    leave_grants: Dict[LeaveType, float] = field(
        default_factory=lambda: {LeaveType(k): float(v) for k, v in DEFAULT_LEAVE_GRANTS.items()}
    )

    def grant_for(self, leave_type: LeaveType) -> float:
        return float(self.leave_grants.get(leave_type, 0.0))

    @classmethod
    def from_settings(cls, settings: ModuleType) -> "EngineSettings":
        grants = getattr(settings, "DEFAULT_LEAVE_GRANTS", DEFAULT_LEAVE_GRANTS)
        return cls(
            standard_work_minutes=int(getattr(settings, "STANDARD_WORK_MINUTES", DEFAULT_STANDARD_WORK_MINUTES)),
            monthly_overtime_limit_minutes=int(
                getattr(settings, "MONTHLY_OVERTIME_LIMIT_MINUTES", DEFAULT_MONTHLY_OVERTIME_LIMIT_MINUTES)
            ),
            yearly_overtime_limit_minutes=int(
                getattr(settings, "YEARLY_OVERTIME_LIMIT_MINUTES", DEFAULT_YEARLY_OVERTIME_LIMIT_MINUTES)
            ),
            fiscal_year_start_month=int(getattr(settings, "FISCAL_YEAR_START_MONTH", DEFAULT_FISCAL_YEAR_START_MONTH)),
            leave_grants={
                LeaveType(k): float(v) for k, v in grants.items() if LeaveType(k) in BALANCE_LEAVE_TYPES
            },
        )
