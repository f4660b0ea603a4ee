"""Mini README: Month and year helpers for ledger keys and report ranges.

The ``months`` module owns the canonical month list and the inclusive range
walker that every report relies on.
"""

from .parsing import parse_date
from .months import (
    MONTH_NAMES,
    DateRange,
    MonthKey,
    MonthName,
    is_valid_year_key,
    month_ordinal,
    parse_month,
    parse_year,
    walk_months,
)

__all__ = [
    "MONTH_NAMES",
    "DateRange",
    "MonthKey",
    "MonthName",
    "is_valid_year_key",
    "month_ordinal",
    "parse_date",
    "parse_month",
    "parse_year",
    "walk_months",
]
