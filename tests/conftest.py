from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from attendance_workflow.attendance.model import Attendance
from attendance_workflow.config.engine import EngineSettings
from attendance_workflow.container import assemble_container
from attendance_workflow.core.enums import AttendanceStatus, RequestStatus
from attendance_workflow.core.exceptions import AlreadyClockedInError, BalanceAlreadyInitializedError
from attendance_workflow.leave_balances.model import LeaveBalance
from attendance_workflow.requests.model import AttendanceCorrection, LeaveRequest, OvertimeRequest


class InMemoryStore:
    """Tables keyed by id; one lock stands in for row locks."""

    def __init__(self):
        self.lock = threading.RLock()
        self.tables: dict[str, dict] = {
            "attendance": {},
            "leave_balances": {},
            "leave_requests": {},
            "overtime_requests": {},
            "attendance_corrections": {},
        }
        self._next_id = 1
        self._clock = datetime(2026, 1, 1, 8, 0, 0)

    def next_id(self) -> int:
        with self.lock:
            nid = self._next_id
            self._next_id += 1
            return nid

    def tick(self) -> datetime:
        with self.lock:
            self._clock += timedelta(seconds=1)
            return self._clock

    def snapshot(self):
        return {name: dict(rows) for name, rows in self.tables.items()}

    def restore(self, snap) -> None:
        for name, rows in snap.items():
            self.tables[name].clear()
            self.tables[name].update(rows)


class InMemoryTransactionManager:
    def __init__(self, store: InMemoryStore):
        self._store = store
        self._local = threading.local()

    @contextmanager
    def atomic(self):
        with self._store.lock:
            depth = getattr(self._local, "depth", 0)
            snap = self._store.snapshot() if depth == 0 else None
            self._local.depth = depth + 1
            try:
                yield
            except Exception:
                if snap is not None:
                    self._store.restore(snap)
                raise
            finally:
                self._local.depth = depth


class InMemoryAttendanceRepo:
    def __init__(self, store: InMemoryStore):
        self._store = store
        self._rows = store.tables["attendance"]
        self.locked_reads = 0

    def add(self, *, user_id, work_date, clock_in=None, clock_out=None, status=AttendanceStatus.PRESENT,
            work_minutes=0, overtime_minutes=0, break_minutes=0, note=None) -> Attendance:
        record = Attendance(
            attendance_id=self._store.next_id(),
            user_id=user_id,
            work_date=work_date,
            clock_in=clock_in,
            clock_out=clock_out,
            status=status,
            work_minutes=work_minutes,
            overtime_minutes=overtime_minutes,
            break_minutes=break_minutes,
            note=note,
        )
        self._rows[record.attendance_id] = record
        return record

    def get_by_id(self, attendance_id):
        return self._rows.get(int(attendance_id))

    def get_for_user_and_date(self, user_id, work_date, *, for_update=False):
        if for_update:
            self.locked_reads += 1
        with self._store.lock:
            for r in self._rows.values():
                if r.user_id == user_id and r.work_date == work_date:
                    return r
        return None

    def create_clock_in(self, *, user_id, work_date, clock_in, note=None):
        with self._store.lock:
            if self.get_for_user_and_date(user_id, work_date):
                raise AlreadyClockedInError()
            return self.add(user_id=user_id, work_date=work_date, clock_in=clock_in, note=note).attendance_id

    def update_clock_in(self, *, attendance_id, clock_in, note=None):
        with self._store.lock:
            r = self._rows.get(attendance_id)
            if not r or r.clock_in is not None:
                return False
            self._rows[attendance_id] = replace(
                r, clock_in=clock_in, status=AttendanceStatus.PRESENT, note=note if note is not None else r.note
            )
            return True

    def update_clock_out(self, *, attendance_id, clock_out, work_minutes, overtime_minutes, note=None):
        with self._store.lock:
            r = self._rows.get(attendance_id)
            if not r or r.clock_out is not None:
                return False
            self._rows[attendance_id] = replace(
                r,
                clock_out=clock_out,
                work_minutes=work_minutes,
                overtime_minutes=overtime_minutes,
                note=note if note is not None else r.note,
            )
            return True

    def update_times(self, *, attendance_id, clock_in, clock_out, work_minutes, overtime_minutes):
        with self._store.lock:
            r = self._rows.get(attendance_id)
            if not r:
                return False
            self._rows[attendance_id] = replace(
                r,
                clock_in=clock_in,
                clock_out=clock_out,
                work_minutes=work_minutes,
                overtime_minutes=overtime_minutes,
                status=AttendanceStatus.PRESENT,
            )
            return True

    def list_all_in_range(self, *, user_id, start_date, end_date):
        rows = [r for r in self._rows.values() if r.user_id == user_id and start_date <= r.work_date <= end_date]
        return sorted(rows, key=lambda r: r.work_date)

    def list_by_user_and_date_range(self, *, user_id, start_date, end_date, limit, offset):
        rows = self.list_all_in_range(user_id=user_id, start_date=start_date, end_date=end_date)[::-1]
        return rows[offset:offset + limit], len(rows)

    def overtime_by_user_and_date(self, *, start_date, end_date):
        return [
            (r.user_id, r.work_date, r.overtime_minutes)
            for r in self._rows.values()
            if start_date <= r.work_date <= end_date and r.overtime_minutes > 0
        ]


class InMemoryLeaveBalanceRepo:
    def __init__(self, store: InMemoryStore):
        self._store = store
        self._rows = store.tables["leave_balances"]

    def list_for_user_and_year(self, user_id, fiscal_year):
        rows = [b for (u, y, _), b in self._rows.items() if u == user_id and y == fiscal_year]
        return sorted(rows, key=lambda b: b.leave_type.value)

    def get(self, *, user_id, fiscal_year, leave_type):
        return self._rows.get((user_id, fiscal_year, leave_type))

    def create_many(self, *, user_id, fiscal_year, grants):
        with self._store.lock:
            if any((user_id, fiscal_year, lt) in self._rows for lt in grants):
                raise BalanceAlreadyInitializedError()
            for lt, days in grants.items():
                self._rows[(user_id, fiscal_year, lt)] = LeaveBalance(
                    user_id=user_id, fiscal_year=fiscal_year, leave_type=lt, total_days=float(days)
                )

    def upsert(self, *, user_id, fiscal_year, leave_type, total_days, used_days, carried_over):
        self._rows[(user_id, fiscal_year, leave_type)] = LeaveBalance(
            user_id=user_id,
            fiscal_year=fiscal_year,
            leave_type=leave_type,
            total_days=float(total_days),
            used_days=float(used_days),
            carried_over=float(carried_over),
        )

    def debit(self, *, user_id, fiscal_year, leave_type, days):
        with self._store.lock:
            b = self._rows.get((user_id, fiscal_year, leave_type))
            if not b or b.remaining_days < days:
                return False
            self._rows[(user_id, fiscal_year, leave_type)] = replace(b, used_days=b.used_days + days)
            return True


class _InMemoryApprovableRepo:
    table = ""

    def __init__(self, store: InMemoryStore):
        self._store = store
        self._rows = store.tables[self.table]
        self.transitions = 0

    def get(self, request_id):
        return self._rows.get(int(request_id))

    def _insert(self, model_cls, **fields):
        rid = self._store.next_id()
        self._rows[rid] = model_cls(
            request_id=rid, status=RequestStatus.PENDING, created_at=self._store.tick(), **fields
        )
        return rid

    def list_by_user(self, *, user_id, limit, offset):
        rows = sorted(
            (r for r in self._rows.values() if r.user_id == user_id),
            key=lambda r: (r.created_at, r.request_id),
            reverse=True,
        )
        return rows[offset:offset + limit], len(rows)

    def list_pending(self, *, limit, offset):
        rows = sorted(
            (r for r in self._rows.values() if r.status == RequestStatus.PENDING),
            key=lambda r: (r.created_at, r.request_id),
        )
        return rows[offset:offset + limit], len(rows)

    def transition_if_pending(self, *, request_id, status, approved_by, decided_at, rejected_reason=None):
        with self._store.lock:
            r = self._rows.get(int(request_id))
            if not r or r.status != RequestStatus.PENDING:
                return False
            self._rows[int(request_id)] = replace(
                r, status=status, approved_by=approved_by, approved_at=decided_at, rejected_reason=rejected_reason
            )
            self.transitions += 1
            return True


class InMemoryLeaveRequestRepo(_InMemoryApprovableRepo):
    table = "leave_requests"

    def create(self, *, user_id, leave_type, start_date, end_date, reason):
        return self._insert(
            LeaveRequest, user_id=user_id, leave_type=leave_type, start_date=start_date, end_date=end_date, reason=reason
        )


class InMemoryOvertimeRequestRepo(_InMemoryApprovableRepo):
    table = "overtime_requests"

    def create(self, *, user_id, work_date, planned_minutes, reason, actual_minutes=None):
        return self._insert(
            OvertimeRequest,
            user_id=user_id,
            work_date=work_date,
            planned_minutes=planned_minutes,
            actual_minutes=actual_minutes,
            reason=reason,
        )

    def approved_minutes_by_user_and_date(self, *, start_date, end_date):
        totals: dict = {}
        for r in self._rows.values():
            if r.status == RequestStatus.APPROVED and start_date <= r.work_date <= end_date:
                key = (r.user_id, r.work_date)
                totals[key] = totals.get(key, 0) + r.counted_minutes
        return [(u, d, m) for (u, d), m in totals.items()]


class InMemoryCorrectionRepo(_InMemoryApprovableRepo):
    table = "attendance_corrections"

    def create(self, *, user_id, work_date, corrected_clock_in, corrected_clock_out, reason,
               attendance_id=None, original_clock_in=None, original_clock_out=None):
        return self._insert(
            AttendanceCorrection,
            user_id=user_id,
            work_date=work_date,
            corrected_clock_in=corrected_clock_in,
            corrected_clock_out=corrected_clock_out,
            reason=reason,
            attendance_id=attendance_id,
            original_clock_in=original_clock_in,
            original_clock_out=original_clock_out,
        )


class RecordingNotifier:
    def __init__(self):
        self.sent = []
        self._lock = threading.Lock()

    def send(self, *, user_id, notification_type, title, message):
        with self._lock:
            self.sent.append(
                {"user_id": user_id, "type": notification_type, "title": title, "message": message}
            )


class FailingNotifier:
    def send(self, *, user_id, notification_type, title, message):
        raise ConnectionError("notification backend down")


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 10, 9, 0, 0)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def tx(store):
    return InMemoryTransactionManager(store)


@pytest.fixture
def settings():
    return EngineSettings()


@pytest.fixture
def attendance_repo(store):
    return InMemoryAttendanceRepo(store)


@pytest.fixture
def balance_repo(store):
    return InMemoryLeaveBalanceRepo(store)


@pytest.fixture
def leave_repo(store):
    return InMemoryLeaveRequestRepo(store)


@pytest.fixture
def overtime_repo(store):
    return InMemoryOvertimeRequestRepo(store)


@pytest.fixture
def correction_repo(store):
    return InMemoryCorrectionRepo(store)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def build_container(settings, tx, notifier, attendance_repo, balance_repo, leave_repo, overtime_repo, correction_repo):
    """Container factory; keyword overrides replace individual collaborators."""

    def _build(**overrides):
        parts = dict(
            settings=settings,
            tx=tx,
            notifier=notifier,
            attendance_repo=attendance_repo,
            leave_balance_repo=balance_repo,
            leave_request_repo=leave_repo,
            overtime_request_repo=overtime_repo,
            correction_repo=correction_repo,
        )
        parts.update(overrides)
        return assemble_container(**parts)

    return _build


@pytest.fixture
def container(build_container):
    return build_container()


@pytest.fixture
def failing_notifier():
    return FailingNotifier()
