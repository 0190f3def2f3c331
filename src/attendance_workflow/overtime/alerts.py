from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Tuple

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds, now_local, year_bounds
from ..common.validators import require_approver
from ..config.engine import EngineSettings
from ..core.enums import Role
from ..requests.repository import OvertimeRequestRepository


@dataclass(frozen=True)
class OvertimeAlert:
    user_id: int
    monthly_overtime_minutes: int
    yearly_overtime_minutes: int
    monthly_limit_minutes: int
    yearly_limit_minutes: int
    is_monthly_exceeded: bool
    is_yearly_exceeded: bool

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "monthly_overtime_minutes": self.monthly_overtime_minutes,
            "yearly_overtime_minutes": self.yearly_overtime_minutes,
            "monthly_limit_minutes": self.monthly_limit_minutes,
            "yearly_limit_minutes": self.yearly_limit_minutes,
            "is_monthly_exceeded": self.is_monthly_exceeded,
            "is_yearly_exceeded": self.is_yearly_exceeded,
        }


class OvertimeAlertService:
    """Read-only report of users over their monthly or yearly overtime cap."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        overtime_requests: OvertimeRequestRepository,
        *,
        settings: EngineSettings | None = None,
    ):
        self._attendance = attendance
        self._overtime_requests = overtime_requests
        self._settings = settings or EngineSettings()

    def _minutes_per_day(self, start: date, end: date) -> Dict[Tuple[int, date], int]:
        # Recorded overtime plus approved overtime requests.
        per_day: Dict[Tuple[int, date], int] = defaultdict(int)
        for user_id, day, minutes in self._attendance.overtime_by_user_and_date(start_date=start, end_date=end):
            per_day[(user_id, day)] += int(minutes)
        for user_id, day, minutes in self._overtime_requests.approved_minutes_by_user_and_date(
            start_date=start, end_date=end
        ):
            per_day[(user_id, day)] += int(minutes)
        return per_day

    def get_overtime_alerts(self, *, current_role: Role, now: datetime | None = None) -> List[OvertimeAlert]:
        require_approver(current_role)
        today = (now or now_local()).date()
        month_start, month_end = month_bounds(today)
        year_start, year_end = year_bounds(today)
        monthly_limit = self._settings.monthly_overtime_limit_minutes
        yearly_limit = self._settings.yearly_overtime_limit_minutes

        monthly: Dict[int, int] = defaultdict(int)
        yearly: Dict[int, int] = defaultdict(int)
        for (user_id, day), minutes in self._minutes_per_day(year_start, year_end).items():
            yearly[user_id] += minutes
            if month_start <= day <= month_end:
                monthly[user_id] += minutes

        alerts = []
        for user_id in sorted(yearly):
            month_exceeded = monthly[user_id] > monthly_limit
            year_exceeded = yearly[user_id] > yearly_limit
            if not (month_exceeded or year_exceeded):
                continue
            alerts.append(
                OvertimeAlert(
                    user_id=user_id,
                    monthly_overtime_minutes=monthly[user_id],
                    yearly_overtime_minutes=yearly[user_id],
                    monthly_limit_minutes=monthly_limit,
                    yearly_limit_minutes=yearly_limit,
                    is_monthly_exceeded=month_exceeded,
                    is_yearly_exceeded=year_exceeded,
                )
            )
        return alerts
