"""Mini README: Typed, immutable report values produced by the report engine.

Structure:
    * ReportKind - closed set of report types.
    * StatusFilter - row filter for the individual member report.
    * <Kind>Row / <Kind>Summary - frozen dataclasses for each report's rows.
    * Report - base value object; one subclass per ``ReportKind``.

Reports are recomputed on demand and never persisted. ``as_dict`` produces
plain JSON-ready data (enums by value, dates as ISO strings) for the HTTP
interface and for exporters living outside this package.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from datetime import date
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from ..campaigns import CampaignStats, CampaignStatus
from ..dates import MonthName
from ..errors import ValidationError


class ReportKind(str, Enum):
    """Every report the engine can produce."""

    INDIVIDUAL = "individual"
    ALL_MEMBERS = "all-members"
    EXPECTED_MEMBERS = "expected-members"
    MONTH_RANGE = "month-range"
    NON_CONTRIBUTORS = "non-contributors"
    NEW_MEMBERS = "new-members"
    CAMPAIGN_SUMMARY = "campaign-summary"
    BUDGET_SUMMARY = "budget-summary"

    @classmethod
    def from_str(cls, value: str) -> "ReportKind":
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValidationError(f"Invalid report type: {value}") from error


class StatusFilter(str, Enum):
    """Which rows of an individual report to keep."""

    ALL = "all"
    PAID = "paid"
    UNPAID = "unpaid"
    NO_RECORD = "no-record"

    @classmethod
    def from_str(cls, value: str) -> "StatusFilter":
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValidationError(f"Invalid status filter: {value}") from error

    @property
    def label(self) -> str:
        return self.value.replace("-", " ")


def to_plain(value: Any) -> Any:
    """Convert report values into JSON-ready builtins."""

    if is_dataclass(value) and not isinstance(value, type):
        return {item.name: to_plain(getattr(value, item.name)) for item in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    if isinstance(value, dict):
        return {str(key): to_plain(item) for key, item in value.items()}
    return value


@dataclass(frozen=True, slots=True)
class IndividualRow:
    year: int
    month: MonthName
    amount: int
    paid: bool
    no_record: bool


@dataclass(frozen=True, slots=True)
class IndividualSummary:
    total_amount: int
    total_paid: int
    total_unpaid: int
    months_contributed: int
    total_months: int


@dataclass(frozen=True, slots=True)
class AllMembersRow:
    name: str
    total_amount: int
    total_paid: int
    total_unpaid: int
    months_contributed: int
    months_outstanding: int


@dataclass(frozen=True, slots=True)
class AllMembersSummary:
    total_members: int
    total_months_in_range: int
    grand_total_amount: int
    grand_total_paid: int
    grand_total_unpaid: int


@dataclass(frozen=True, slots=True)
class ExpectedMemberRow:
    name: str
    monthly_expected_amount: float
    never_contributed: bool
    total_owed: float
    months_missed: int
    total_months: int
    total_expected_amount: float


@dataclass(frozen=True, slots=True)
class ExpectedMembersSummary:
    total_expected: int
    never_contributed: int
    total_owed: float
    total_expected_amount: float


@dataclass(frozen=True, slots=True)
class MonthRangeRow:
    year: int
    month: MonthName
    total: int
    paid: int
    unpaid: int
    contributors: int


@dataclass(frozen=True, slots=True)
class MonthRangeSummary:
    total_months: int
    grand_total: int
    grand_paid: int
    grand_unpaid: int


@dataclass(frozen=True, slots=True)
class NonContributorRow:
    name: str
    months_missed: int
    last_paid_year: Optional[int]
    last_paid_month: Optional[MonthName]
    total_owed: int


@dataclass(frozen=True, slots=True)
class NonContributorsSummary:
    total_non_contributors: int
    total_months_missed: int
    total_owed: int


@dataclass(frozen=True, slots=True)
class NewMemberRow:
    name: str
    join_year: int
    join_month: MonthName
    first_amount: int
    first_paid: bool


@dataclass(frozen=True, slots=True)
class NewMembersSummary:
    total_new_members: int


@dataclass(frozen=True, slots=True)
class CampaignRow:
    campaign_id: str
    purpose: str
    status: CampaignStatus
    date_created: date
    target_date: Optional[date]
    target_amount: float
    amount_raised: float
    total_paid: float
    outstanding_amount: float
    remaining: float
    pledged_progress: int
    paid_progress: int
    contributor_count: int


@dataclass(frozen=True, slots=True)
class BudgetCategoryRow:
    category: str
    amount: float
    expense_count: int


@dataclass(frozen=True, slots=True)
class BudgetSummary:
    owner: str
    total_income: float
    total_expenses: float
    remaining: float
    percentage_used: float
    filtered_expenses: float
    filtered_count: int


@dataclass(frozen=True, slots=True)
class Report:
    """Common report shape: ``{type, title, subtitle, data, summary}``."""

    kind: ClassVar[ReportKind]

    title: str
    subtitle: str
    data: Tuple[Any, ...]
    summary: Any

    def as_dict(self) -> Dict[str, Any]:
        payload = {"type": self.kind.value}
        payload.update(to_plain(self))
        return payload


@dataclass(frozen=True, slots=True)
class IndividualReport(Report):
    kind: ClassVar[ReportKind] = ReportKind.INDIVIDUAL

    data: Tuple[IndividualRow, ...]
    summary: IndividualSummary
    member_name: str
    status_filter: StatusFilter


@dataclass(frozen=True, slots=True)
class AllMembersReport(Report):
    kind: ClassVar[ReportKind] = ReportKind.ALL_MEMBERS

    data: Tuple[AllMembersRow, ...]
    summary: AllMembersSummary


@dataclass(frozen=True, slots=True)
class ExpectedMembersReport(Report):
    kind: ClassVar[ReportKind] = ReportKind.EXPECTED_MEMBERS

    data: Tuple[ExpectedMemberRow, ...]
    summary: ExpectedMembersSummary


@dataclass(frozen=True, slots=True)
class MonthRangeReport(Report):
    kind: ClassVar[ReportKind] = ReportKind.MONTH_RANGE

    data: Tuple[MonthRangeRow, ...]
    summary: MonthRangeSummary


@dataclass(frozen=True, slots=True)
class NonContributorsReport(Report):
    kind: ClassVar[ReportKind] = ReportKind.NON_CONTRIBUTORS

    data: Tuple[NonContributorRow, ...]
    summary: NonContributorsSummary


@dataclass(frozen=True, slots=True)
class NewMembersReport(Report):
    kind: ClassVar[ReportKind] = ReportKind.NEW_MEMBERS

    data: Tuple[NewMemberRow, ...]
    summary: NewMembersSummary


@dataclass(frozen=True, slots=True)
class CampaignSummaryReport(Report):
    kind: ClassVar[ReportKind] = ReportKind.CAMPAIGN_SUMMARY

    data: Tuple[CampaignRow, ...]
    summary: CampaignStats


@dataclass(frozen=True, slots=True)
class BudgetSummaryReport(Report):
    kind: ClassVar[ReportKind] = ReportKind.BUDGET_SUMMARY

    data: Tuple[BudgetCategoryRow, ...]
    summary: BudgetSummary
