from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.calculator.standard_calculator import StandardWorkTimeCalculator
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .config.engine import EngineSettings
from .database.connection import DBConfig, DatabaseConnection
from .database.transaction import MySQLTransactionManager, TransactionManager
from .leave_balances.mysql_leave_balance_repository import MySQLLeaveBalanceRepository
from .leave_balances.repository import LeaveBalanceRepository
from .leave_balances.service import LeaveBalanceService
from .notifications.sender import DatabaseNotificationSender, LoggingNotificationSender, NotificationSender
from .overtime.alerts import OvertimeAlertService
from .requests.correction_applier import CorrectionApplier
from .requests.mysql_request_repository import (
    MySQLCorrectionRepository,
    MySQLLeaveRequestRepository,
    MySQLOvertimeRequestRepository,
)
from .requests.repository import CorrectionRepository, LeaveRequestRepository, OvertimeRequestRepository
from .requests.service import CorrectionService, LeaveRequestService, OvertimeRequestService


@dataclass(frozen=True)
class Container:
    settings: EngineSettings
    tx: TransactionManager
    notifier: NotificationSender

    attendance_repo: AttendanceRepository
    leave_balance_repo: LeaveBalanceRepository
    leave_request_repo: LeaveRequestRepository
    overtime_request_repo: OvertimeRequestRepository
    correction_repo: CorrectionRepository

    attendance_service: AttendanceService
    leave_balance_service: LeaveBalanceService
    leave_request_service: LeaveRequestService
    overtime_request_service: OvertimeRequestService
    correction_service: CorrectionService
    overtime_alert_service: OvertimeAlertService

    conn: Optional[DatabaseConnection] = None


def assemble_container(
    *,
    settings: EngineSettings,
    tx: TransactionManager,
    notifier: NotificationSender,
    attendance_repo: AttendanceRepository,
    leave_balance_repo: LeaveBalanceRepository,
    leave_request_repo: LeaveRequestRepository,
    overtime_request_repo: OvertimeRequestRepository,
    correction_repo: CorrectionRepository,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over whichever repositories are given (MySQL or in-memory)."""

    calculator = StandardWorkTimeCalculator(settings.standard_work_minutes)

    attendance_service = AttendanceService(attendance_repo, tx, calculator=calculator)
    leave_balance_service = LeaveBalanceService(leave_balance_repo, tx, settings=settings)
    leave_request_service = LeaveRequestService(leave_request_repo, leave_balance_service, tx, notifier)
    overtime_request_service = OvertimeRequestService(overtime_request_repo, tx, notifier)
    correction_service = CorrectionService(
        correction_repo,
        attendance_repo,
        CorrectionApplier(attendance_repo, calculator),
        tx,
        notifier,
    )
    overtime_alert_service = OvertimeAlertService(attendance_repo, overtime_request_repo, settings=settings)

    return Container(
        settings=settings,
        tx=tx,
        notifier=notifier,
        attendance_repo=attendance_repo,
        leave_balance_repo=leave_balance_repo,
        leave_request_repo=leave_request_repo,
        overtime_request_repo=overtime_request_repo,
        correction_repo=correction_repo,
        attendance_service=attendance_service,
        leave_balance_service=leave_balance_service,
        leave_request_service=leave_request_service,
        overtime_request_service=overtime_request_service,
        correction_service=correction_service,
        overtime_alert_service=overtime_alert_service,
        conn=conn,
    )


def build_container(
    *, db_config: dict, settings: EngineSettings | None = None, notification_backend: str = "database"
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    notifier: NotificationSender
    if notification_backend == "log":
        notifier = LoggingNotificationSender()
    else:
        notifier = DatabaseNotificationSender(conn)

    return assemble_container(
        settings=settings or EngineSettings(),
        tx=MySQLTransactionManager(conn),
        notifier=notifier,
        attendance_repo=MySQLAttendanceRepository(conn),
        leave_balance_repo=MySQLLeaveBalanceRepository(conn),
        leave_request_repo=MySQLLeaveRequestRepository(conn),
        overtime_request_repo=MySQLOvertimeRequestRepository(conn),
        correction_repo=MySQLCorrectionRepository(conn),
        conn=conn,
    )
