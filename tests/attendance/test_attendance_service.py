from __future__ import annotations

from datetime import date, datetime

import pytest

from attendance_workflow.core.enums import AttendanceStatus
from attendance_workflow.core.exceptions import (
    AlreadyClockedInError,
    AlreadyClockedOutError,
    AttendanceNotFoundError,
    NotClockedInError,
    ValidationError,
)


@pytest.fixture
def service(container):
    return container.attendance_service


def test_clock_in_creates_present_row_for_today(service, fixed_now):
    record = service.clock_in(1, note="  office  ", now=fixed_now)

    assert record.work_date == fixed_now.date()
    assert record.clock_in == fixed_now
    assert record.clock_out is None
    assert record.status == AttendanceStatus.PRESENT
    assert record.note == "office"


def test_second_clock_in_same_day_is_rejected(service, fixed_now):
    service.clock_in(1, now=fixed_now)

    with pytest.raises(AlreadyClockedInError):
        service.clock_in(1, now=fixed_now.replace(hour=10))


def test_clock_in_fills_preseeded_row_instead_of_duplicating(service, attendance_repo, fixed_now):
    seeded = attendance_repo.add(user_id=1, work_date=fixed_now.date(), status=AttendanceStatus.ABSENT)

    record = service.clock_in(1, now=fixed_now)

    assert record.attendance_id == seeded.attendance_id
    assert record.status == AttendanceStatus.PRESENT
    assert record.clock_in == fixed_now


def test_clock_out_without_clock_in_is_rejected(service, fixed_now):
    with pytest.raises(NotClockedInError):
        service.clock_out(1, now=fixed_now)


def test_second_clock_out_is_rejected(service, fixed_now):
    service.clock_in(1, now=fixed_now)
    service.clock_out(1, now=fixed_now.replace(hour=17))

    with pytest.raises(AlreadyClockedOutError):
        service.clock_out(1, now=fixed_now.replace(hour=18))


def test_clock_out_computes_work_and_overtime_minutes(service, fixed_now):
    service.clock_in(1, now=fixed_now)

    record = service.clock_out(1, now=fixed_now.replace(hour=18, minute=30, second=59))

    assert record.work_minutes == 570
    assert record.overtime_minutes == 90


def test_clock_out_subtracts_break_minutes(service, attendance_repo, fixed_now):
    attendance_repo.add(user_id=1, work_date=fixed_now.date(), clock_in=fixed_now, break_minutes=60)

    record = service.clock_out(1, now=fixed_now.replace(hour=18))

    assert record.work_minutes == 480
    assert record.overtime_minutes == 0


def test_cross_midnight_shift_stays_on_clock_in_date(service):
    service.clock_in(1, now=datetime(2026, 3, 9, 23, 30))

    record = service.clock_out(1, now=datetime(2026, 3, 10, 1, 30))

    assert record.work_date == date(2026, 3, 9)
    assert record.clock_out == datetime(2026, 3, 10, 1, 30)
    assert record.work_minutes == 120

    on_clock_in_date = service.get_summary(1, date(2026, 3, 9), date(2026, 3, 9))
    assert on_clock_in_date.total_work_days == 1
    assert on_clock_in_date.total_work_minutes == 120

    on_closing_date = service.get_summary(1, "2026-03-10", "2026-03-10")
    assert on_closing_date.total_work_days == 0
    assert on_closing_date.total_work_minutes == 0


def test_get_today_status(service, fixed_now):
    with pytest.raises(AttendanceNotFoundError):
        service.get_today_status(1, now=fixed_now)

    service.clock_in(1, now=fixed_now)
    assert service.get_today_status(1, now=fixed_now).clock_in == fixed_now


def test_pagination_most_recent_first(service, attendance_repo):
    for d in (1, 2, 3):
        attendance_repo.add(user_id=1, work_date=date(2026, 3, d))
    attendance_repo.add(user_id=2, work_date=date(2026, 3, 2))

    first = service.get_by_user_and_date_range(1, "2026-03-01", "2026-03-31", page=1, page_size=2)
    assert [r.work_date.day for r in first.data] == [3, 2]
    assert first.total == 3
    assert first.total_pages == 2

    second = service.get_by_user_and_date_range(1, "2026-03-01", "2026-03-31", page=2, page_size=2)
    assert [r.work_date.day for r in second.data] == [1]
    assert second.to_dict(lambda r: r.to_dict())["data"][0]["date"] == "2026-03-01"


def test_pagination_normalizes_bad_values(service, attendance_repo):
    attendance_repo.add(user_id=1, work_date=date(2026, 3, 1))

    result = service.get_by_user_and_date_range(1, "2026-03-01", "2026-03-31", page=0, page_size=500)

    assert result.page == 1
    assert result.page_size == 20
    assert len(result.data) == 1


def test_summary_aggregates_by_status(service, attendance_repo):
    attendance_repo.add(user_id=1, work_date=date(2026, 3, 2), work_minutes=480)
    attendance_repo.add(user_id=1, work_date=date(2026, 3, 3), work_minutes=450, overtime_minutes=60)
    attendance_repo.add(user_id=1, work_date=date(2026, 3, 4), status=AttendanceStatus.LEAVE)
    attendance_repo.add(user_id=1, work_date=date(2026, 3, 5), status=AttendanceStatus.HOLIDAY)
    attendance_repo.add(user_id=1, work_date=date(2026, 3, 6), status=AttendanceStatus.ABSENT)

    summary = service.get_summary(1, "2026-03-01", "2026-03-31")

    assert summary.total_work_days == 2
    assert summary.total_work_minutes == 930
    assert summary.total_overtime_minutes == 60
    assert summary.average_work_minutes == 465.0
    assert summary.leave_days == 1
    assert summary.absent_days == 1


def test_invalid_range_is_rejected(service):
    with pytest.raises(ValidationError):
        service.get_summary(1, "2026-03-10", "2026-03-01")
    with pytest.raises(ValidationError):
        service.get_by_user_and_date_range(1, "03/01/2026", "2026-03-31")
