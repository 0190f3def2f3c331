"""Settings shared by every environment.

Each value can be overridden by an environment variable of the same name.
"""

import json
import os

from ..core.constants import (
    DEFAULT_FISCAL_YEAR_START_MONTH,
    DEFAULT_LEAVE_GRANTS,
    DEFAULT_MONTHLY_OVERTIME_LIMIT_MINUTES,
    DEFAULT_STANDARD_WORK_MINUTES,
    DEFAULT_YEARLY_OVERTIME_LIMIT_MINUTES,
)


def env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def env_leave_grants() -> dict:
    # LEAVE_GRANTS='{"paid": 12, "sick": 5, "special": 3}'
    raw = os.getenv("LEAVE_GRANTS")
    grants = dict(DEFAULT_LEAVE_GRANTS)
    if raw:
        grants.update({k: float(v) for k, v in json.loads(raw).items()})
    return grants


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

STANDARD_WORK_MINUTES = env_int("STANDARD_WORK_MINUTES", DEFAULT_STANDARD_WORK_MINUTES)
MONTHLY_OVERTIME_LIMIT_MINUTES = env_int("MONTHLY_OVERTIME_LIMIT_MINUTES", DEFAULT_MONTHLY_OVERTIME_LIMIT_MINUTES)
YEARLY_OVERTIME_LIMIT_MINUTES = env_int("YEARLY_OVERTIME_LIMIT_MINUTES", DEFAULT_YEARLY_OVERTIME_LIMIT_MINUTES)
FISCAL_YEAR_START_MONTH = env_int("FISCAL_YEAR_START_MONTH", DEFAULT_FISCAL_YEAR_START_MONTH)
DEFAULT_LEAVE_GRANTS = env_leave_grants()

# "database" stores notifications in the notifications table, "log" only logs them
NOTIFICATION_BACKEND = os.getenv("NOTIFICATION_BACKEND", "database").lower()
