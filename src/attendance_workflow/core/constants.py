"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Runtime thresholds (workday length, overtime caps, leave grants) come from
settings, these are only their fallbacks.
"""

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

DEFAULT_STANDARD_WORK_MINUTES = 8 * 60
DEFAULT_MONTHLY_OVERTIME_LIMIT_MINUTES = 35 * 60
DEFAULT_YEARLY_OVERTIME_LIMIT_MINUTES = 360 * 60
DEFAULT_FISCAL_YEAR_START_MONTH = 1

DEFAULT_LEAVE_GRANTS = {
    "paid": 10.0,
    "sick": 5.0,
    "special": 3.0,
}

HALF_DAY = 0.5
