from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import parse_clock_time, parse_iso_date
from ..common.pagination import Page
from ..common.validators import optional_text, require_enum, require_non_empty, require_positive_int
from ..core.enums import LeaveType, RequestKind, Role
from ..core.exceptions import LeaveAlreadyProcessedError, ValidationError
from ..database.transaction import TransactionManager
from ..leave_balances.service import LeaveBalanceService
from ..notifications.sender import NotificationSender
from .correction_applier import CorrectionApplier
from .model import ApprovalDecision, AttendanceCorrection, LeaveRequest, OvertimeRequest
from .repository import CorrectionRepository, LeaveRequestRepository, OvertimeRequestRepository
from .workflow import ApprovalWorkflow


class _RequestService:
    """Approval and listing delegate to the shared workflow."""

    _workflow: ApprovalWorkflow

    def approve(
        self,
        *,
        current_role: Role,
        approver_id: int,
        request_id: int,
        status,
        rejected_reason: Optional[str] = None,
        now: datetime | None = None,
    ):
        return self._workflow.approve(
            request_id=int(request_id),
            approver_id=int(approver_id),
            current_role=current_role,
            decision=ApprovalDecision.parse(status, rejected_reason),
            now=now,
        )

    def get_by_user(self, user_id: int, *, page: int = 1, page_size: int = 20) -> Page:
        return self._workflow.get_by_user(user_id, page=page, page_size=page_size)

    def get_pending(self, *, current_role: Role, page: int = 1, page_size: int = 20) -> Page:
        return self._workflow.get_pending(current_role=current_role, page=page, page_size=page_size)


class LeaveRequestService(_RequestService):
    def __init__(
        self,
        requests: LeaveRequestRepository,
        balances: LeaveBalanceService,
        tx: TransactionManager,
        notifier: NotificationSender,
    ):
        self._requests = requests
        self._balances = balances
        self._workflow = ApprovalWorkflow(
            kind=RequestKind.LEAVE,
            repository=requests,
            tx=tx,
            notifier=notifier,
            on_approved=self._debit_balance,
            already_processed=LeaveAlreadyProcessedError,
        )

    def _debit_balance(self, request: LeaveRequest) -> None:
        self._balances.debit(
            user_id=request.user_id,
            fiscal_year=self._balances.fiscal_year_for(request.start_date),
            leave_type=request.leave_type,
            days=request.day_count,
        )

    def create(self, *, user_id: int, leave_type, start_date, end_date, reason: Optional[str] = None) -> LeaveRequest:
        leave_type = require_enum(LeaveType, leave_type, "leave_type")
        start = parse_iso_date(start_date, "start_date")
        end = parse_iso_date(end_date or start_date, "end_date")
        if end < start:
            raise ValidationError("end_date must not be before start_date")
        if leave_type == LeaveType.HALF and end != start:
            raise ValidationError("A half-day leave must start and end on the same date")

        request_id = self._requests.create(
            user_id=int(user_id),
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            reason=optional_text(reason, "reason"),
        )
        return self._requests.get(request_id)


class OvertimeRequestService(_RequestService):
    def __init__(self, requests: OvertimeRequestRepository, tx: TransactionManager, notifier: NotificationSender):
        self._requests = requests
        self._workflow = ApprovalWorkflow(
            kind=RequestKind.OVERTIME,
            repository=requests,
            tx=tx,
            notifier=notifier,
        )

    def create(
        self,
        *,
        user_id: int,
        work_date,
        planned_minutes,
        reason: str,
        actual_minutes=None,
    ) -> OvertimeRequest:
        day = parse_iso_date(work_date, "date")
        planned = require_positive_int(planned_minutes, "planned_minutes")
        actual = None
        if actual_minutes not in (None, ""):
            actual = require_positive_int(actual_minutes, "actual_minutes")

        request_id = self._requests.create(
            user_id=int(user_id),
            work_date=day,
            planned_minutes=planned,
            actual_minutes=actual,
            reason=require_non_empty(reason, "reason"),
        )
        return self._requests.get(request_id)


class CorrectionService(_RequestService):
    def __init__(
        self,
        corrections: CorrectionRepository,
        attendance: AttendanceRepository,
        applier: CorrectionApplier,
        tx: TransactionManager,
        notifier: NotificationSender,
    ):
        self._corrections = corrections
        self._attendance = attendance
        self._workflow = ApprovalWorkflow(
            kind=RequestKind.CORRECTION,
            repository=corrections,
            tx=tx,
            notifier=notifier,
            on_approved=applier.apply,
        )

    def create(
        self,
        *,
        user_id: int,
        work_date,
        corrected_clock_in: Optional[str] = None,
        corrected_clock_out: Optional[str] = None,
        reason: str,
    ) -> AttendanceCorrection:
        day = parse_iso_date(work_date, "date")
        clock_in = parse_clock_time(corrected_clock_in, "corrected_clock_in")
        clock_out = parse_clock_time(corrected_clock_out, "corrected_clock_out")
        if clock_in is None and clock_out is None:
            raise ValidationError("corrected_clock_in or corrected_clock_out is required")
        reason = require_non_empty(reason, "reason")

        # Snapshot of the row as it was when the correction was filed.
        record = self._attendance.get_for_user_and_date(int(user_id), day)
        request_id = self._corrections.create(
            user_id=int(user_id),
            work_date=day,
            corrected_clock_in=clock_in,
            corrected_clock_out=clock_out,
            reason=reason,
            attendance_id=record.attendance_id if record else None,
            original_clock_in=record.clock_in if record else None,
            original_clock_out=record.clock_out if record else None,
        )
        return self._corrections.get(request_id)
