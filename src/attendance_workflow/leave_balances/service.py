from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional

from ..common.datetime_utils import fiscal_year_of, now_local
from ..common.validators import require_admin, require_enum
from ..config.engine import EngineSettings
from ..core.enums import BALANCE_LEAVE_TYPES, LeaveType, Role
from ..core.exceptions import (
    BalanceAlreadyInitializedError,
    InsufficientLeaveBalanceError,
    LeaveBalanceNotFoundError,
    ValidationError,
)
from ..database.transaction import TransactionManager
from .model import LeaveBalance
from .repository import LeaveBalanceRepository

logger = logging.getLogger(__name__)


def _days(value, field_name: str) -> Optional[float]:
    if value is None:
        return None
    try:
        days = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if days < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return days


class LeaveBalanceService:
    def __init__(self, balances: LeaveBalanceRepository, tx: TransactionManager, *, settings: EngineSettings | None = None):
        self._balances = balances
        self._tx = tx
        self._settings = settings or EngineSettings()

    def fiscal_year_for(self, day: date) -> int:
        return fiscal_year_of(day, self._settings.fiscal_year_start_month)

    def _resolve_year(self, fiscal_year: Optional[int], now: datetime | None) -> int:
        if fiscal_year is None:
            return self.fiscal_year_for((now or now_local()).date())
        try:
            return int(fiscal_year)
        except (TypeError, ValueError):
            raise ValidationError("fiscal_year must be an integer")

    def initialize(
        self,
        *,
        current_role: Role,
        user_id: int,
        fiscal_year: Optional[int] = None,
        now: datetime | None = None,
    ) -> List[LeaveBalance]:
        """Grant the configured default days for every leave type.

        Re-initialization is rejected rather than merged.
        """

        require_admin(current_role)
        year = self._resolve_year(fiscal_year, now)
        grants = {lt: self._settings.grant_for(lt) for lt in BALANCE_LEAVE_TYPES}

        with self._tx.atomic():
            if self._balances.list_for_user_and_year(user_id, year):
                raise BalanceAlreadyInitializedError()
            self._balances.create_many(user_id=user_id, fiscal_year=year, grants=grants)
            rows = list(self._balances.list_for_user_and_year(user_id, year))

        logger.info("Initialized leave balances for user %s, fiscal year %s", user_id, year)
        return rows

    def get_by_user(self, user_id: int, fiscal_year: Optional[int] = None, *, now: datetime | None = None) -> List[LeaveBalance]:
        """One entry per leave type; types without a row come back as zeros."""

        year = self._resolve_year(fiscal_year, now)
        stored = {b.leave_type: b for b in self._balances.list_for_user_and_year(user_id, year)}
        return [
            stored.get(lt) or LeaveBalance(user_id=user_id, fiscal_year=year, leave_type=lt)
            for lt in BALANCE_LEAVE_TYPES
        ]

    def set_balance(
        self,
        *,
        current_role: Role,
        user_id: int,
        fiscal_year: int,
        leave_type,
        total_days=None,
        used_days=None,
        carried_over=None,
    ) -> LeaveBalance:
        require_admin(current_role)
        leave_type = require_enum(LeaveType, leave_type, "leave_type")
        if leave_type not in BALANCE_LEAVE_TYPES:
            raise ValidationError(f"{leave_type.value} leave is drawn from the {leave_type.balance_type.value} balance")
        year = self._resolve_year(fiscal_year, None)
        total_days = _days(total_days, "total_days")
        used_days = _days(used_days, "used_days")
        carried_over = _days(carried_over, "carried_over")

        with self._tx.atomic():
            current = self._balances.get(user_id=user_id, fiscal_year=year, leave_type=leave_type)
            current = current or LeaveBalance(user_id=user_id, fiscal_year=year, leave_type=leave_type)
            self._balances.upsert(
                user_id=user_id,
                fiscal_year=year,
                leave_type=leave_type,
                total_days=current.total_days if total_days is None else total_days,
                used_days=current.used_days if used_days is None else used_days,
                carried_over=current.carried_over if carried_over is None else carried_over,
            )
            updated = self._balances.get(user_id=user_id, fiscal_year=year, leave_type=leave_type)

        logger.info("Leave balance %s/%s/%s set by admin", user_id, year, leave_type.value)
        return updated

    def debit(self, *, user_id: int, fiscal_year: int, leave_type: LeaveType, days: float) -> LeaveBalance:
        """Consume ``days`` from the balance; must run inside the approval's transaction."""

        balance_type = leave_type.balance_type
        balance = self._balances.get(user_id=user_id, fiscal_year=fiscal_year, leave_type=balance_type)
        if not balance:
            raise LeaveBalanceNotFoundError(
                f"No {balance_type.value} leave balance for user {user_id} in fiscal year {fiscal_year}"
            )
        if not self._balances.debit(user_id=user_id, fiscal_year=fiscal_year, leave_type=balance_type, days=days):
            raise InsufficientLeaveBalanceError(
                f"{days:g} day(s) requested, {balance.remaining_days:g} remaining"
            )

        logger.info("Debited %s %s day(s) from user %s, fiscal year %s", days, balance_type.value, user_id, fiscal_year)
        return self._balances.get(user_id=user_id, fiscal_year=fiscal_year, leave_type=balance_type)
