from __future__ import annotations

from typing import Mapping, Optional, Sequence

import mysql.connector

from ..core.enums import LeaveType
from ..core.exceptions import BalanceAlreadyInitializedError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveBalance
from .repository import LeaveBalanceRepository


def _to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        balance_id=int(r["balance_id"]),
        user_id=int(r["user_id"]),
        fiscal_year=int(r["fiscal_year"]),
        leave_type=LeaveType(r["leave_type"]),
        total_days=float(r["total_days"]),
        used_days=float(r["used_days"]),
        carried_over=float(r["carried_over"]),
    )


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_user_and_year(self, user_id: int, fiscal_year: int) -> Sequence[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT balance_id, user_id, fiscal_year, leave_type, total_days, used_days, carried_over
                FROM leave_balances
                WHERE user_id=%s AND fiscal_year=%s
                ORDER BY leave_type ASC
                """,
                (int(user_id), int(fiscal_year)),
            )
            return [_to_balance(r) for r in fetchall(cur)]

    def get(self, *, user_id: int, fiscal_year: int, leave_type: LeaveType) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT balance_id, user_id, fiscal_year, leave_type, total_days, used_days, carried_over
                FROM leave_balances
                WHERE user_id=%s AND fiscal_year=%s AND leave_type=%s
                """,
                (int(user_id), int(fiscal_year), leave_type.value),
            )
            r = fetchone(cur)
            return _to_balance(r) if r else None

    def create_many(self, *, user_id: int, fiscal_year: int, grants: Mapping[LeaveType, float]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.executemany(
                    """
                    INSERT INTO leave_balances(user_id, fiscal_year, leave_type, total_days, used_days, carried_over)
                    VALUES(%s,%s,%s,%s,0,0)
                    """,
                    [(int(user_id), int(fiscal_year), lt.value, float(days)) for lt, days in grants.items()],
                )
            except mysql.connector.IntegrityError as exc:
                raise BalanceAlreadyInitializedError() from exc

    def upsert(
        self,
        *,
        user_id: int,
        fiscal_year: int,
        leave_type: LeaveType,
        total_days: float,
        used_days: float,
        carried_over: float,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_balances(user_id, fiscal_year, leave_type, total_days, used_days, carried_over)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    total_days=VALUES(total_days),
                    used_days=VALUES(used_days),
                    carried_over=VALUES(carried_over)
                """,
                (
                    int(user_id),
                    int(fiscal_year),
                    leave_type.value,
                    float(total_days),
                    float(used_days),
                    float(carried_over),
                ),
            )

    def debit(self, *, user_id: int, fiscal_year: int, leave_type: LeaveType, days: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_balances
                SET used_days = used_days + %s
                WHERE user_id=%s AND fiscal_year=%s AND leave_type=%s
                  AND total_days + carried_over - used_days >= %s
                """,
                (float(days), int(user_id), int(fiscal_year), leave_type.value, float(days)),
            )
            return cur.rowcount > 0
