"""Mini README: Core package initializer for the FundLedger treasury platform.

This module exposes convenience imports for the ledgers, the snapshot store
and the report builders so that the interface layer and scripts do not need
to know the exact module structure. Keep it free of side effects beyond the
logging bootstrap performed by ``get_logger``.
"""

from .access import AccessPolicy, Role
from .budget import BudgetLedger
from .campaigns import CampaignLedger
from .contributions import BlacklistRegistry, ContributionLedger
from .dates import DateRange
from .logging_utils import get_logger
from .members import ExpectedMemberRoster
from .reports import ReportKind, generate_report
from .snapshot import LedgerState, SnapshotStore

__all__ = [
    "AccessPolicy",
    "BlacklistRegistry",
    "BudgetLedger",
    "CampaignLedger",
    "ContributionLedger",
    "DateRange",
    "ExpectedMemberRoster",
    "LedgerState",
    "ReportKind",
    "Role",
    "SnapshotStore",
    "generate_report",
    "get_logger",
]
