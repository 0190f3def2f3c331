from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import LeaveType
from .model import LeaveBalance


class LeaveBalanceRepository(Protocol):
    def list_for_user_and_year(self, user_id: int, fiscal_year: int) -> Sequence[LeaveBalance]:
        raise NotImplementedError

    def get(self, *, user_id: int, fiscal_year: int, leave_type: LeaveType) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def create_many(self, *, user_id: int, fiscal_year: int, grants: Mapping[LeaveType, float]) -> None:
        """Insert one row per leave type. Raises BalanceAlreadyInitializedError on duplicates."""

        raise NotImplementedError

    def upsert(
        self,
        *,
        user_id: int,
        fiscal_year: int,
        leave_type: LeaveType,
        total_days: float,
        used_days: float,
        carried_over: float,
    ) -> None:
        raise NotImplementedError

    def debit(self, *, user_id: int, fiscal_year: int, leave_type: LeaveType, days: float) -> bool:
        """Add ``days`` to used_days only if that many days remain."""

        raise NotImplementedError
