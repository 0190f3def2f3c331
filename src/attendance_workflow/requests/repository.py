from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence, Tuple, TypeVar

from ..core.enums import LeaveType, RequestStatus
from .model import AttendanceCorrection, LeaveRequest, OvertimeRequest

R = TypeVar("R")


class ApprovableRepository(Protocol[R]):
    """Storage shared by every pending -> approved/rejected request type."""

    def get(self, request_id: int) -> Optional[R]:
        raise NotImplementedError

    def list_by_user(self, *, user_id: int, limit: int, offset: int) -> Tuple[Sequence[R], int]:
        """Newest first."""

        raise NotImplementedError

    def list_pending(self, *, limit: int, offset: int) -> Tuple[Sequence[R], int]:
        """Oldest first."""

        raise NotImplementedError

    def transition_if_pending(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approved_by: int,
        decided_at: datetime,
        rejected_reason: Optional[str] = None,
    ) -> bool:
        """Move a request out of pending in one conditional write.

        Returns False when the row was no longer pending, i.e. another
        approver already decided it.
        """

        raise NotImplementedError


class LeaveRequestRepository(ApprovableRepository[LeaveRequest], Protocol):
    def create(
        self,
        *,
        user_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError


class OvertimeRequestRepository(ApprovableRepository[OvertimeRequest], Protocol):
    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        planned_minutes: int,
        reason: str,
        actual_minutes: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def approved_minutes_by_user_and_date(self, *, start_date: date, end_date: date) -> Sequence[Tuple[int, date, int]]:
        """(user_id, work_date, minutes) for approved requests; actual minutes win over planned."""

        raise NotImplementedError


class CorrectionRepository(ApprovableRepository[AttendanceCorrection], Protocol):
    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        corrected_clock_in: Optional[time],
        corrected_clock_out: Optional[time],
        reason: str,
        attendance_id: Optional[int] = None,
        original_clock_in: Optional[datetime] = None,
        original_clock_out: Optional[datetime] = None,
    ) -> int:
        raise NotImplementedError
