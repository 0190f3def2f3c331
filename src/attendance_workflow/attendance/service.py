from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.pagination import Page, build_page, normalize_pagination, offset_for
from ..common.validators import optional_text
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    AlreadyClockedInError,
    AlreadyClockedOutError,
    AttendanceNotFoundError,
    NotClockedInError,
    ValidationError,
)
from ..database.transaction import TransactionManager
from .calculator.base import WorkTimeCalculator
from .calculator.standard_calculator import StandardWorkTimeCalculator
from .model import Attendance, AttendanceSummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _date_range(start_date, end_date) -> tuple[date, date]:
    start = parse_iso_date(start_date, "start_date")
    end = parse_iso_date(end_date, "end_date")
    if end < start:
        raise ValidationError("end_date must not be before start_date")
    return start, end


class AttendanceService:
    """Clock ledger: one attendance row per user and date."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        tx: TransactionManager,
        *,
        calculator: WorkTimeCalculator | None = None,
    ):
        self._attendance = attendance
        self._tx = tx
        self._calculator = calculator or StandardWorkTimeCalculator()

    def clock_in(self, user_id: int, *, note: Optional[str] = None, now: datetime | None = None) -> Attendance:
        now = (now or now_local()).replace(microsecond=0)
        today = now.date()
        note = optional_text(note, "note")

        with self._tx.atomic():
            existing = self._attendance.get_for_user_and_date(user_id, today)
            if existing and existing.clock_in is not None:
                raise AlreadyClockedInError()

            if existing:
                # Pre-seeded row (absent/leave) for today: fill it in.
                if not self._attendance.update_clock_in(attendance_id=existing.attendance_id, clock_in=now, note=note):
                    raise AlreadyClockedInError()
                attendance_id = existing.attendance_id
            else:
                attendance_id = self._attendance.create_clock_in(
                    user_id=user_id, work_date=today, clock_in=now, note=note
                )
            record = self._attendance.get_by_id(attendance_id)

        logger.debug("User %s clocked in at %s", user_id, now.isoformat())
        return record

    def _open_record(self, user_id: int, today: date) -> Attendance:
        record = self._attendance.get_for_user_and_date(user_id, today)
        if record and record.clock_in is not None:
            if record.clock_out is not None:
                raise AlreadyClockedOutError()
            return record

        # Shift that started yesterday and runs past midnight.
        previous = self._attendance.get_for_user_and_date(user_id, today - timedelta(days=1))
        if previous and previous.is_open:
            return previous
        raise NotClockedInError()

    def clock_out(self, user_id: int, *, note: Optional[str] = None, now: datetime | None = None) -> Attendance:
        now = (now or now_local()).replace(microsecond=0)
        note = optional_text(note, "note")

        with self._tx.atomic():
            record = self._open_record(user_id, now.date())
            work = self._calculator.calculate(
                clock_in=record.clock_in, clock_out=now, break_minutes=record.break_minutes
            )
            updated = self._attendance.update_clock_out(
                attendance_id=record.attendance_id,
                clock_out=now,
                work_minutes=work.work_minutes,
                overtime_minutes=work.overtime_minutes,
                note=note,
            )
            if not updated:
                raise AlreadyClockedOutError()
            record = self._attendance.get_by_id(record.attendance_id)

        logger.debug(
            "User %s clocked out for %s: %s min worked, %s min overtime",
            user_id,
            record.work_date.isoformat(),
            record.work_minutes,
            record.overtime_minutes,
        )
        return record

    def get_today_status(self, user_id: int, *, now: datetime | None = None) -> Attendance:
        today = (now or now_local()).date()
        record = self._attendance.get_for_user_and_date(user_id, today)
        if not record:
            raise AttendanceNotFoundError("No attendance recorded for today")
        return record

    def get_by_user_and_date_range(
        self,
        user_id: int,
        start_date,
        end_date,
        *,
        page: int = 1,
        page_size: int = 20,
    ) -> Page[Attendance]:
        start, end = _date_range(start_date, end_date)
        page, page_size = normalize_pagination(page, page_size)
        rows, total = self._attendance.list_by_user_and_date_range(
            user_id=user_id,
            start_date=start,
            end_date=end,
            limit=page_size,
            offset=offset_for(page, page_size),
        )
        return build_page(rows, total, page, page_size)

    def get_summary(self, user_id: int, start_date, end_date) -> AttendanceSummary:
        """Aggregate the rows dated inside [start_date, end_date].

        Only present rows count as work days and carry minutes; leave and
        absent rows are counted separately, holidays are ignored.
        """

        start, end = _date_range(start_date, end_date)
        rows = self._attendance.list_all_in_range(user_id=user_id, start_date=start, end_date=end)

        work_days = work_minutes = overtime_minutes = leave_days = absent_days = 0
        for r in rows:
            if r.status == AttendanceStatus.PRESENT:
                work_days += 1
                work_minutes += r.work_minutes
                overtime_minutes += r.overtime_minutes
            elif r.status == AttendanceStatus.LEAVE:
                leave_days += 1
            elif r.status == AttendanceStatus.ABSENT:
                absent_days += 1

        return AttendanceSummary(
            total_work_days=work_days,
            total_work_minutes=work_minutes,
            total_overtime_minutes=overtime_minutes,
            average_work_minutes=round(work_minutes / work_days, 1) if work_days else 0.0,
            leave_days=leave_days,
            absent_days=absent_days,
        )
