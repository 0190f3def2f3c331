from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.validators import optional_text, require_enum
from ..core.constants import HALF_DAY
from ..core.enums import LeaveType, RequestStatus
from ..core.exceptions import ValidationError


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="seconds") if value else None


def _hm(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value else None


@dataclass(frozen=True)
class ApprovalDecision:
    """Target state chosen by an approver; the reason only applies to rejections."""

    status: RequestStatus
    rejected_reason: Optional[str] = None

    @classmethod
    def parse(cls, status, rejected_reason: Optional[str] = None) -> "ApprovalDecision":
        status = require_enum(RequestStatus, status, "status")
        if not status.is_terminal:
            raise ValidationError("status must be approved or rejected")
        reason = optional_text(rejected_reason, "rejected_reason") if status == RequestStatus.REJECTED else None
        return cls(status=status, rejected_reason=reason)


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    user_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Optional[str]
    status: RequestStatus
    created_at: datetime
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None

    @property
    def day_count(self) -> float:
        if self.leave_type == LeaveType.HALF:
            return HALF_DAY
        return float((self.end_date - self.start_date).days + 1)

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "user_id": self.user_id,
            "leave_type": self.leave_type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "days": self.day_count,
            "reason": self.reason or "",
            "status": self.status.value,
            "approved_by": self.approved_by,
            "approved_at": _ts(self.approved_at),
            "rejected_reason": self.rejected_reason or "",
            "created_at": _ts(self.created_at),
        }


@dataclass(frozen=True)
class OvertimeRequest:
    request_id: int
    user_id: int
    work_date: date
    planned_minutes: int
    reason: str
    status: RequestStatus
    created_at: datetime
    actual_minutes: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None

    @property
    def counted_minutes(self) -> int:
        return self.actual_minutes if self.actual_minutes is not None else self.planned_minutes

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "user_id": self.user_id,
            "date": self.work_date.isoformat(),
            "planned_minutes": self.planned_minutes,
            "actual_minutes": self.actual_minutes,
            "reason": self.reason,
            "status": self.status.value,
            "approved_by": self.approved_by,
            "approved_at": _ts(self.approved_at),
            "rejected_reason": self.rejected_reason or "",
            "created_at": _ts(self.created_at),
        }


@dataclass(frozen=True)
class AttendanceCorrection:
    request_id: int
    user_id: int
    work_date: date
    corrected_clock_in: Optional[time]
    corrected_clock_out: Optional[time]
    reason: str
    status: RequestStatus
    created_at: datetime
    attendance_id: Optional[int] = None
    original_clock_in: Optional[datetime] = None
    original_clock_out: Optional[datetime] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "user_id": self.user_id,
            "attendance_id": self.attendance_id,
            "date": self.work_date.isoformat(),
            "original_clock_in": _ts(self.original_clock_in),
            "original_clock_out": _ts(self.original_clock_out),
            "corrected_clock_in": _hm(self.corrected_clock_in),
            "corrected_clock_out": _hm(self.corrected_clock_out),
            "reason": self.reason,
            "status": self.status.value,
            "approved_by": self.approved_by,
            "approved_at": _ts(self.approved_at),
            "rejected_reason": self.rejected_reason or "",
            "created_at": _ts(self.created_at),
        }
