from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence, Tuple

from .model import Attendance


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[Attendance]:
        raise NotImplementedError

    def get_for_user_and_date(
        self, user_id: int, work_date: date, *, for_update: bool = False
    ) -> Optional[Attendance]:
        """``for_update`` locks the row until the surrounding transaction ends."""

        raise NotImplementedError

    def create_clock_in(
        self,
        *,
        user_id: int,
        work_date: date,
        clock_in: datetime,
        note: Optional[str] = None,
    ) -> int:
        """Insert today's row. Raises AlreadyClockedInError on a duplicate (user, date)."""

        raise NotImplementedError

    def update_clock_in(
        self,
        *,
        attendance_id: int,
        clock_in: datetime,
        note: Optional[str] = None,
    ) -> bool:
        """Fill clock_in on a row that has none yet; the row becomes present."""

        raise NotImplementedError

    def update_clock_out(
        self,
        *,
        attendance_id: int,
        clock_out: datetime,
        work_minutes: int,
        overtime_minutes: int,
        note: Optional[str] = None,
    ) -> bool:
        """Set clock_out only while it is still empty; False when someone got there first."""

        raise NotImplementedError

    def update_times(
        self,
        *,
        attendance_id: int,
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        work_minutes: int,
        overtime_minutes: int,
    ) -> bool:
        """Overwrite clock-in/out after an approved correction."""

        raise NotImplementedError

    def list_by_user_and_date_range(
        self,
        *,
        user_id: int,
        start_date: date,
        end_date: date,
        limit: int,
        offset: int,
    ) -> Tuple[Sequence[Attendance], int]:
        """One page ordered by date descending, plus the total row count."""

        raise NotImplementedError

    def list_all_in_range(self, *, user_id: int, start_date: date, end_date: date) -> Sequence[Attendance]:
        raise NotImplementedError

    def overtime_by_user_and_date(self, *, start_date: date, end_date: date) -> Sequence[Tuple[int, date, int]]:
        """(user_id, work_date, overtime_minutes) for rows with overtime in the range."""

        raise NotImplementedError
