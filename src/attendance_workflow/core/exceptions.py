from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a stable machine-readable ``code``; callers compare
    errors by class or code, never by identity.
    """

    code = "DOMAIN_ERROR"
    default_message = "Operation failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"
    default_message = "You are not allowed to perform this action"


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    default_message = "Resource not found"


class RequestNotFoundError(NotFoundError):
    code = "REQUEST_NOT_FOUND"
    default_message = "Request not found"


class AttendanceNotFoundError(NotFoundError):
    code = "ATTENDANCE_NOT_FOUND"
    default_message = "Attendance record not found"


class LeaveBalanceNotFoundError(NotFoundError):
    code = "LEAVE_BALANCE_NOT_FOUND"
    default_message = "Leave balance is not initialized"


class ConflictError(DomainError):
    """Domain-state conflict. Never retried by the engine itself."""

    code = "CONFLICT"
    default_message = "Conflicting state"


class AlreadyClockedInError(ConflictError):
    code = "ALREADY_CLOCKED_IN"
    default_message = "Already clocked in today"


class NotClockedInError(ConflictError):
    code = "NOT_CLOCKED_IN"
    default_message = "No clock-in recorded for today"


class AlreadyClockedOutError(ConflictError):
    code = "ALREADY_CLOCKED_OUT"
    default_message = "Already clocked out today"


class AlreadyProcessedError(ConflictError):
    code = "ALREADY_PROCESSED"
    default_message = "This request has already been processed"


class LeaveAlreadyProcessedError(AlreadyProcessedError):
    code = "LEAVE_ALREADY_PROCESSED"
    default_message = "This leave request has already been processed"


class BalanceAlreadyInitializedError(ConflictError):
    code = "BALANCE_ALREADY_INITIALIZED"
    default_message = "Leave balances already exist for this fiscal year"


class InsufficientLeaveBalanceError(ConflictError):
    code = "INSUFFICIENT_LEAVE_BALANCE"
    default_message = "Not enough leave balance remaining"


class DependencyError(DomainError):
    """Store unavailable or another collaborator failed."""

    code = "DEPENDENCY_ERROR"
    default_message = "A backing service is unavailable"
