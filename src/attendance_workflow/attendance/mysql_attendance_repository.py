from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence, Tuple

import mysql.connector

from ..core.enums import AttendanceStatus
from ..core.exceptions import AlreadyClockedInError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetch_count, fetchall, fetchone
from .model import Attendance
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, work_date, clock_in, clock_out, status,
    break_minutes, work_minutes, overtime_minutes, note
"""


def _to_attendance(r: dict) -> Attendance:
    return Attendance(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        clock_in=r.get("clock_in"),
        clock_out=r.get("clock_out"),
        status=AttendanceStatus(r["status"]),
        break_minutes=int(r.get("break_minutes") or 0),
        work_minutes=int(r.get("work_minutes") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_attendance(r) if r else None

    def get_for_user_and_date(
        self, user_id: int, work_date: date, *, for_update: bool = False
    ) -> Optional[Attendance]:
        lock = " FOR UPDATE" if for_update else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND work_date=%s{lock}",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_attendance(r) if r else None

    def create_clock_in(
        self,
        *,
        user_id: int,
        work_date: date,
        clock_in: datetime,
        note: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance_records(user_id, work_date, clock_in, status, note)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (int(user_id), work_date, clock_in, AttendanceStatus.PRESENT.value, note),
                )
            except mysql.connector.IntegrityError as exc:
                # uq_attendance_user_date: a concurrent clock-in won
                raise AlreadyClockedInError() from exc
            return int(cur.lastrowid)

    def update_clock_in(
        self,
        *,
        attendance_id: int,
        clock_in: datetime,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_in=%s, status=%s, note=COALESCE(%s, note)
                WHERE attendance_id=%s AND clock_in IS NULL
                """,
                (clock_in, AttendanceStatus.PRESENT.value, note, int(attendance_id)),
            )
            return cur.rowcount > 0

    def update_clock_out(
        self,
        *,
        attendance_id: int,
        clock_out: datetime,
        work_minutes: int,
        overtime_minutes: int,
        note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_out=%s, work_minutes=%s, overtime_minutes=%s, note=COALESCE(%s, note)
                WHERE attendance_id=%s AND clock_out IS NULL
                """,
                (clock_out, int(work_minutes), int(overtime_minutes), note, int(attendance_id)),
            )
            return cur.rowcount > 0

    def update_times(
        self,
        *,
        attendance_id: int,
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        work_minutes: int,
        overtime_minutes: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_in=%s, clock_out=%s, work_minutes=%s, overtime_minutes=%s, status=%s
                WHERE attendance_id=%s
                """,
                (
                    clock_in,
                    clock_out,
                    int(work_minutes),
                    int(overtime_minutes),
                    AttendanceStatus.PRESENT.value,
                    int(attendance_id),
                ),
            )
            # rowcount is 0 when the values are unchanged, so re-check existence
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT COUNT(*) AS n FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return fetch_count(cur) > 0

    def list_by_user_and_date_range(
        self,
        *,
        user_id: int,
        start_date: date,
        end_date: date,
        limit: int,
        offset: int,
    ) -> Tuple[Sequence[Attendance], int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n FROM attendance_records
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                """,
                (int(user_id), start_date, end_date),
            )
            total = fetch_count(cur)
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date DESC
                LIMIT %s OFFSET %s
                """,
                (int(user_id), start_date, end_date, int(limit), int(offset)),
            )
            return [_to_attendance(r) for r in fetchall(cur)], total

    def list_all_in_range(self, *, user_id: int, start_date: date, end_date: date) -> Sequence[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE user_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(user_id), start_date, end_date),
            )
            return [_to_attendance(r) for r in fetchall(cur)]

    def overtime_by_user_and_date(self, *, start_date: date, end_date: date) -> Sequence[Tuple[int, date, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, work_date, overtime_minutes
                FROM attendance_records
                WHERE work_date BETWEEN %s AND %s AND overtime_minutes > 0
                """,
                (start_date, end_date),
            )
            return [
                (int(r["user_id"]), r["work_date"], int(r["overtime_minutes"]))
                for r in fetchall(cur)
            ]
