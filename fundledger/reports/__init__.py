"""Mini README: Read-only reports over contributions, campaigns and budgets.

``engine`` holds the builders; ``models`` holds the frozen report values they
return. Both are re-exported here for convenience.
"""

from .engine import (
    all_members_report,
    budget_summary_report,
    campaign_summary_report,
    expected_members_report,
    generate_report,
    individual_report,
    month_range_report,
    new_members_report,
    non_contributors_report,
)
from .models import Report, ReportKind, StatusFilter, to_plain

__all__ = [
    "Report",
    "ReportKind",
    "StatusFilter",
    "all_members_report",
    "budget_summary_report",
    "campaign_summary_report",
    "expected_members_report",
    "generate_report",
    "individual_report",
    "month_range_report",
    "new_members_report",
    "non_contributors_report",
    "to_plain",
]
