from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, time

import pytest

from attendance_workflow.core.enums import AttendanceStatus, NotificationType, RequestStatus, Role
from attendance_workflow.core.exceptions import (
    AlreadyProcessedError,
    AttendanceNotFoundError,
    ValidationError,
)

EMPLOYEE = 7
WORK_DATE = date(2026, 3, 9)


@pytest.fixture
def corrections(container):
    return container.correction_service


@pytest.fixture
def record(attendance_repo):
    return attendance_repo.add(
        user_id=EMPLOYEE,
        work_date=WORK_DATE,
        clock_in=datetime(2026, 3, 9, 9, 0),
        clock_out=datetime(2026, 3, 9, 18, 0),
        work_minutes=540,
        overtime_minutes=60,
    )


def _approve(corrections, request_id, status="approved", approver_id=2):
    return corrections.approve(current_role=Role.MANAGER, approver_id=approver_id, request_id=request_id, status=status)


def test_create_snapshots_original_times(corrections, record):
    req = corrections.create(
        user_id=EMPLOYEE, work_date="2026-03-09", corrected_clock_in="08:30", corrected_clock_out="17:00",
        reason="forgot badge",
    )

    assert req.status == RequestStatus.PENDING
    assert req.attendance_id == record.attendance_id
    assert req.original_clock_in == record.clock_in
    assert req.corrected_clock_in == time(8, 30)


@pytest.mark.parametrize(
    "payload",
    [
        {"corrected_clock_in": "", "corrected_clock_out": None, "reason": "x"},
        {"corrected_clock_in": "8.30", "corrected_clock_out": None, "reason": "x"},
        {"corrected_clock_in": "08:30", "corrected_clock_out": None, "reason": "   "},
        {"corrected_clock_in": "2026-03-09", "corrected_clock_out": None, "reason": "x"},
        {"corrected_clock_in": 830, "corrected_clock_out": None, "reason": "x"},
        {"corrected_clock_in": "08:30", "corrected_clock_out": None, "reason": ["badge"]},
    ],
)
def test_create_validation(corrections, payload):
    with pytest.raises(ValidationError):
        corrections.create(user_id=EMPLOYEE, work_date="2026-03-09", **payload)


def test_create_accepts_iso_timestamp(corrections):
    req = corrections.create(
        user_id=EMPLOYEE, work_date="2026-03-09", corrected_clock_in="2026-03-09T08:45", reason="badge"
    )

    assert req.corrected_clock_in == time(8, 45)


def test_approval_rewrites_attendance_and_recomputes_minutes(corrections, record, attendance_repo, notifier):
    req = corrections.create(
        user_id=EMPLOYEE, work_date=WORK_DATE, corrected_clock_in="08:30", corrected_clock_out="17:00", reason="badge"
    )

    decided = _approve(corrections, req.request_id)

    row = attendance_repo.get_by_id(record.attendance_id)
    assert decided.status == RequestStatus.APPROVED
    assert row.clock_in == datetime(2026, 3, 9, 8, 30)
    assert row.clock_out == datetime(2026, 3, 9, 17, 0)
    assert row.work_minutes == 510
    assert row.overtime_minutes == 30
    assert notifier.sent[0]["type"] == NotificationType.CORRECTION_APPROVED


def test_partial_correction_keeps_other_time(corrections, record, attendance_repo):
    req = corrections.create(user_id=EMPLOYEE, work_date=WORK_DATE, corrected_clock_out="17:00", reason="left early")

    _approve(corrections, req.request_id)

    row = attendance_repo.get_by_id(record.attendance_id)
    assert row.clock_in == datetime(2026, 3, 9, 9, 0)
    assert row.clock_out == datetime(2026, 3, 9, 17, 0)
    assert row.work_minutes == 480
    assert row.overtime_minutes == 0
    assert attendance_repo.locked_reads == 1


def test_corrected_clock_out_before_clock_in_rolls_to_next_day(corrections, attendance_repo):
    row = attendance_repo.add(
        user_id=EMPLOYEE, work_date=WORK_DATE, clock_in=datetime(2026, 3, 9, 22, 0), status=AttendanceStatus.ABSENT
    )
    req = corrections.create(
        user_id=EMPLOYEE, work_date=WORK_DATE, corrected_clock_in="23:30", corrected_clock_out="01:30",
        reason="night shift",
    )

    _approve(corrections, req.request_id)

    row = attendance_repo.get_by_id(row.attendance_id)
    assert row.work_date == WORK_DATE
    assert row.clock_out == datetime(2026, 3, 10, 1, 30)
    assert row.work_minutes == 120
    assert row.status == AttendanceStatus.PRESENT


def test_missing_attendance_keeps_correction_pending(corrections, correction_repo, attendance_repo, notifier):
    req = corrections.create(
        user_id=EMPLOYEE, work_date=WORK_DATE, corrected_clock_in="09:00", corrected_clock_out="18:00", reason="x"
    )

    with pytest.raises(AttendanceNotFoundError):
        _approve(corrections, req.request_id)

    assert correction_repo.get(req.request_id).status == RequestStatus.PENDING
    assert attendance_repo.get_for_user_and_date(EMPLOYEE, WORK_DATE) is None
    assert notifier.sent == []


def test_rejection_never_mutates_attendance(corrections, record, attendance_repo):
    req = corrections.create(
        user_id=EMPLOYEE, work_date=WORK_DATE, corrected_clock_in="06:00", corrected_clock_out="23:00", reason="x"
    )

    decided = _approve(corrections, req.request_id, status="rejected")

    assert decided.status == RequestStatus.REJECTED
    assert attendance_repo.get_by_id(record.attendance_id) == record


def test_last_approved_correction_wins(corrections, record, attendance_repo):
    early = corrections.create(user_id=EMPLOYEE, work_date=WORK_DATE, corrected_clock_in="08:00", reason="first")
    late = corrections.create(user_id=EMPLOYEE, work_date=WORK_DATE, corrected_clock_in="10:00", reason="second")

    _approve(corrections, late.request_id)
    _approve(corrections, early.request_id)

    assert attendance_repo.get_by_id(record.attendance_id).clock_in == datetime(2026, 3, 9, 8, 0)


def test_concurrent_approvals_transition_exactly_once(corrections, record, correction_repo, notifier):
    req = corrections.create(
        user_id=EMPLOYEE, work_date=WORK_DATE, corrected_clock_in="08:30", corrected_clock_out="17:00", reason="x"
    )

    def attempt(approver_id):
        try:
            _approve(corrections, req.request_id, approver_id=approver_id)
            return "OK"
        except AlreadyProcessedError:
            return "AlreadyProcessed"

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(attempt, range(100, 106)))

    assert sorted(results) == ["AlreadyProcessed"] * 5 + ["OK"]
    assert correction_repo.transitions == 1
    assert len(notifier.sent) == 1
    assert correction_repo.get(req.request_id).approved_by in range(100, 106)
    assert correction_repo.list_pending(limit=20, offset=0)[1] == 0


def test_lost_conditional_update_reports_already_processed(corrections, record, correction_repo, attendance_repo):
    req = corrections.create(user_id=EMPLOYEE, work_date=WORK_DATE, corrected_clock_in="07:00", reason="x")
    stale = correction_repo.get(req.request_id)
    _approve(corrections, req.request_id, status="rejected")

    # Reader saw the request before the other approver's write landed.
    correction_repo.get = lambda request_id: stale

    with pytest.raises(AlreadyProcessedError):
        _approve(corrections, req.request_id)

    assert attendance_repo.get_by_id(record.attendance_id) == record
    assert correction_repo.transitions == 1
