from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="seconds") if value else None


@dataclass(frozen=True)
class Attendance:
    """One user's clock-in/out record for one date.

    ``work_date`` is the clock-in date even when the clock-out falls on the
    following day.
    """

    attendance_id: int
    user_id: int
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    status: AttendanceStatus
    work_minutes: int = 0
    overtime_minutes: int = 0
    break_minutes: int = 0
    note: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_in is not None and self.clock_out is None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "user_id": self.user_id,
            "date": self.work_date.isoformat(),
            "clock_in": _iso(self.clock_in),
            "clock_out": _iso(self.clock_out),
            "status": self.status.value,
            "break_minutes": self.break_minutes,
            "work_minutes": self.work_minutes,
            "overtime_minutes": self.overtime_minutes,
            "note": self.note or "",
        }


@dataclass(frozen=True)
class AttendanceSummary:
    total_work_days: int = 0
    total_work_minutes: int = 0
    total_overtime_minutes: int = 0
    average_work_minutes: float = 0.0
    leave_days: int = 0
    absent_days: int = 0

    def to_dict(self) -> dict:
        return {
            "total_work_days": self.total_work_days,
            "total_work_minutes": self.total_work_minutes,
            "total_overtime_minutes": self.total_overtime_minutes,
            "average_work_minutes": self.average_work_minutes,
            "leave_days": self.leave_days,
            "absent_days": self.absent_days,
        }
