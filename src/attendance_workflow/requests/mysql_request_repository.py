from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Dict, Optional, Sequence, Tuple

from ..core.enums import LeaveType, RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_count, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceCorrection, LeaveRequest, OvertimeRequest
from .repository import CorrectionRepository, LeaveRequestRepository, OvertimeRequestRepository

_DECISION_COLUMNS = "status, approved_by, approved_at, rejected_reason, created_at"


def _optional_int(value: Any) -> Optional[int]:
    return int(value) if value is not None else None


class _MySQLApprovableRepository:
    """Listing and the conditional pending transition, shared by all request tables."""

    _table = ""
    _columns = ""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _to_model(self, r: Dict[str, Any]):
        raise NotImplementedError

    def _select(self) -> str:
        return f"SELECT request_id, user_id, {self._columns}, {_DECISION_COLUMNS} FROM {self._table}"

    def get(self, request_id: int):
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{self._select()} WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return self._to_model(r) if r else None

    def _page(self, where: str, params: tuple, order: str, limit: int, offset: int) -> Tuple[Sequence[Any], int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM {self._table} WHERE {where}", params)
            total = fetch_count(cur)
            cur.execute(
                f"{self._select()} WHERE {where} ORDER BY {order} LIMIT %s OFFSET %s",
                params + (int(limit), int(offset)),
            )
            return [self._to_model(r) for r in fetchall(cur)], total

    def list_by_user(self, *, user_id: int, limit: int, offset: int):
        return self._page("user_id=%s", (int(user_id),), "created_at DESC, request_id DESC", limit, offset)

    def list_pending(self, *, limit: int, offset: int):
        return self._page(
            "status=%s", (RequestStatus.PENDING.value,), "created_at ASC, request_id ASC", limit, offset
        )

    def transition_if_pending(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        approved_by: int,
        decided_at: datetime,
        rejected_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE {self._table}
                SET status=%s, approved_by=%s, approved_at=%s, rejected_reason=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(approved_by),
                    decided_at,
                    rejected_reason,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0


class MySQLLeaveRequestRepository(_MySQLApprovableRepository, LeaveRequestRepository):
    _table = "leave_requests"
    _columns = "leave_type, start_date, end_date, reason"

    def _to_model(self, r: Dict[str, Any]) -> LeaveRequest:
        return LeaveRequest(
            request_id=int(r["request_id"]),
            user_id=int(r["user_id"]),
            leave_type=LeaveType(r["leave_type"]),
            start_date=r["start_date"],
            end_date=r["end_date"],
            reason=r.get("reason"),
            status=RequestStatus(r["status"]),
            created_at=r["created_at"],
            approved_by=_optional_int(r.get("approved_by")),
            approved_at=r.get("approved_at"),
            rejected_reason=r.get("rejected_reason"),
        )

    def create(
        self,
        *,
        user_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(user_id, leave_type, start_date, end_date, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), leave_type.value, start_date, end_date, reason, RequestStatus.PENDING.value),
            )
            return int(cur.lastrowid)


class MySQLOvertimeRequestRepository(_MySQLApprovableRepository, OvertimeRequestRepository):
    _table = "overtime_requests"
    _columns = "work_date, planned_minutes, actual_minutes, reason"

    def _to_model(self, r: Dict[str, Any]) -> OvertimeRequest:
        return OvertimeRequest(
            request_id=int(r["request_id"]),
            user_id=int(r["user_id"]),
            work_date=r["work_date"],
            planned_minutes=int(r["planned_minutes"]),
            actual_minutes=_optional_int(r.get("actual_minutes")),
            reason=r["reason"],
            status=RequestStatus(r["status"]),
            created_at=r["created_at"],
            approved_by=_optional_int(r.get("approved_by")),
            approved_at=r.get("approved_at"),
            rejected_reason=r.get("rejected_reason"),
        )

    def create(
        self,
        *,
        user_id: int,
        work_date: date,
        planned_minutes: int,
        reason: str,
        actual_minutes: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO overtime_requests(user_id, work_date, planned_minutes, actual_minutes, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    work_date,
                    int(planned_minutes),
                    _optional_int(actual_minutes),
                    reason,
                    RequestStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def approved_minutes_by_user_and_date(self, *, start_date: date, end_date: date) -> Sequence[Tuple[int, date, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, work_date, SUM(COALESCE(actual_minutes, planned_minutes)) AS minutes
                FROM overtime_requests
                WHERE status=%s AND work_date BETWEEN %s AND %s
                GROUP BY user_id, work_date
                """,
                (RequestStatus.APPROVED.value, start_date, end_date),
            )
            return [(int(r["user_id"]), r["work_date"], int(r["minutes"] or 0)) for r in fetchall(cur)]


class MySQLCorrectionRepository(_MySQLApprovableRepository, CorrectionRepository):
    _table = "attendance_corrections"
    _columns = (
        "attendance_id, work_date, original_clock_in, original_clock_out, "
        "corrected_clock_in, corrected_clock_out, reason"
    )

    def _to_model(self, r: Dict[str, Any]) -> AttendanceCorrection:
        return AttendanceCorrection(
            request_id=int(r["request_id"]),
            user_id=int(r["user_id"]),
            attendance_id=_optional_int(r.get("attendance_id")),
            work_date=r["work_date"],
            original_clock_in=r.get("original_clock_in"),
            original_clock_out=r.get("original_clock_out"),
            corrected_clock_in=normalize_mysql_time(r.get("corrected_clock_in")),
            corrected_clock_out=normalize_mysql_time(r.get("corrected_clock_out")),
            reason=r["reason"],
            status=RequestStatus(r["status"]),
            created_at=r["created_at"],
            approved_by=_optional_int(r.get("approved_by")),
            approved_at=r.get("approved_at"),
            rejected_reason=r.get("rejected_reason"),
        )

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_corrections(
                    user_id, attendance_id, work_date, original_clock_in, original_clock_out,
                    corrected_clock_in, corrected_clock_out, reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(user_id),
                    _optional_int(attendance_id),
                    work_date,
                    original_clock_in,
                    original_clock_out,
                    corrected_clock_in,
                    corrected_clock_out,
                    reason,
                    RequestStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)
