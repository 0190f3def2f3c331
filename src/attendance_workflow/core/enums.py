from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller roles supplied by the authentication layer."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


APPROVER_ROLES = frozenset({Role.ADMIN, Role.MANAGER})


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LEAVE = "leave"
    HOLIDAY = "holiday"


class RequestStatus(str, Enum):
    """Approval state shared by leave, overtime and correction requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


class RequestKind(str, Enum):
    LEAVE = "leave"
    OVERTIME = "overtime"
    CORRECTION = "correction"


class LeaveType(str, Enum):
    PAID = "paid"
    SICK = "sick"
    SPECIAL = "special"
    HALF = "half"

    @property
    def balance_type(self) -> "LeaveType":
        # Half days are taken out of the paid allowance.
        return LeaveType.PAID if self is LeaveType.HALF else self


# Leave types that own a balance row.
BALANCE_LEAVE_TYPES = (LeaveType.PAID, LeaveType.SICK, LeaveType.SPECIAL)


class NotificationType(str, Enum):
    LEAVE_APPROVED = "leave_approved"
    LEAVE_REJECTED = "leave_rejected"
    OVERTIME_APPROVED = "overtime_approved"
    OVERTIME_REJECTED = "overtime_rejected"
    CORRECTION_APPROVED = "correction_approved"
    CORRECTION_REJECTED = "correction_rejected"
