from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple, Union

from ..core.exceptions import ValidationError

_CLOCK_FORMATS = ("%H:%M", "%H:%M:%S", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S")


def parse_iso_date(value: Union[str, date], field_name: str = "date") -> date:
    """Parse YYYY-MM-DD string into date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be formatted as YYYY-MM-DD")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field_name} must be formatted as YYYY-MM-DD")


def parse_clock_time(value: Optional[str], field_name: str) -> Optional[time]:
    """Accept ``HH:MM`` or an ISO ``YYYY-MM-DDTHH:MM[:SS]`` timestamp.

    Only the time of day is kept; it is combined with the attendance date later.
    A bare date has no time of day and is rejected.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be HH:MM or YYYY-MM-DDTHH:MM:SS")
    v = value.strip()
    if not v:
        return None
    for fmt in _CLOCK_FORMATS:
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            pass
    raise ValidationError(f"{field_name} must be HH:MM or YYYY-MM-DDTHH:MM:SS")


def combine_shift(work_date: date, clock_in: Optional[time], clock_out: Optional[time]) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Anchor times of day on ``work_date``; a clock-out earlier than the
    clock-in belongs to the next calendar day."""

    start = datetime.combine(work_date, clock_in) if clock_in else None
    end = datetime.combine(work_date, clock_out) if clock_out else None
    if start and end and end < start:
        end += timedelta(days=1)
    return start, end


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def month_bounds(day: date) -> Tuple[date, date]:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def year_bounds(day: date) -> Tuple[date, date]:
    return date(day.year, 1, 1), date(day.year, 12, 31)


def fiscal_year_of(day: date, start_month: int = 1) -> int:
    """Fiscal years are keyed by the calendar year in which they start."""
    return day.year if day.month >= start_month else day.year - 1
