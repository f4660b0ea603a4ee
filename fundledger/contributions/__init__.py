"""Mini README: Periodic member contributions and the blacklist that gates them.

Modules expose the in-memory ``ContributionLedger`` (year -> month -> bucket)
and the ``BlacklistRegistry`` it consults before admitting a member.
"""

from .blacklist import BlacklistRegistry
from .ledger import (
    ContributionLedger,
    ContributionRecord,
    MonthBucket,
    MonthCreation,
    MonthTotals,
    YearTotals,
)

__all__ = [
    "BlacklistRegistry",
    "ContributionLedger",
    "ContributionRecord",
    "MonthBucket",
    "MonthCreation",
    "MonthTotals",
    "YearTotals",
]
