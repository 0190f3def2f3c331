from __future__ import annotations

import logging

from ..attendance.calculator.base import WorkTimeCalculator
from ..attendance.calculator.standard_calculator import StandardWorkTimeCalculator
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import combine_shift
from ..core.exceptions import AttendanceNotFoundError
from .model import AttendanceCorrection

logger = logging.getLogger(__name__)


class CorrectionApplier:
    """Rewrites an attendance row with the times of an approved correction.

    Runs inside the approval transaction: a missing row aborts the approval.
    """

    def __init__(self, attendance: AttendanceRepository, calculator: WorkTimeCalculator | None = None):
        self._attendance = attendance
        self._calculator = calculator or StandardWorkTimeCalculator()

    def apply(self, correction: AttendanceCorrection) -> None:
        # Row lock is held until the approval commits.
        record = self._attendance.get_for_user_and_date(correction.user_id, correction.work_date, for_update=True)
        if record is None:
            raise AttendanceNotFoundError(
                f"No attendance for user {correction.user_id} on {correction.work_date.isoformat()} to correct"
            )

        clock_in_t = correction.corrected_clock_in or (record.clock_in.time() if record.clock_in else None)
        clock_out_t = correction.corrected_clock_out or (record.clock_out.time() if record.clock_out else None)
        # Times are re-anchored on the row's own date; an earlier clock-out means the next day.
        clock_in, clock_out = combine_shift(record.work_date, clock_in_t, clock_out_t)

        work_minutes = overtime_minutes = 0
        if clock_in and clock_out:
            work = self._calculator.calculate(
                clock_in=clock_in, clock_out=clock_out, break_minutes=record.break_minutes
            )
            work_minutes, overtime_minutes = work.work_minutes, work.overtime_minutes

        if not self._attendance.update_times(
            attendance_id=record.attendance_id,
            clock_in=clock_in,
            clock_out=clock_out,
            work_minutes=work_minutes,
            overtime_minutes=overtime_minutes,
        ):
            raise AttendanceNotFoundError()

        logger.info(
            "Attendance %s corrected by request %s (%s min worked)",
            record.attendance_id,
            correction.request_id,
            work_minutes,
        )

    __call__ = apply
