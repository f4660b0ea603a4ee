"""Mini README: Pure report builders over the ledgers.

Every function walks a validated ``DateRange`` (or reads a ledger directly)
and returns a frozen report from ``reports.models``. Nothing here mutates a
ledger, so identical inputs always yield identical reports. ``generate_report``
dispatches over ``ReportKind`` for callers that select a report by name, such
as the HTTP interface and the CLI.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple, Union

from ..budget import BudgetLedger, ExpensePeriod
from ..campaigns import CampaignLedger
from ..contributions import BlacklistRegistry, ContributionLedger
from ..dates import DateRange, MonthName, month_ordinal
from ..errors import ValidationError
from ..logging_utils import get_logger
from ..members import ExpectedMember, ExpectedMemberRoster
from .models import (
    AllMembersReport,
    AllMembersRow,
    AllMembersSummary,
    BudgetCategoryRow,
    BudgetSummary,
    BudgetSummaryReport,
    CampaignRow,
    CampaignSummaryReport,
    ExpectedMemberRow,
    ExpectedMembersReport,
    ExpectedMembersSummary,
    IndividualReport,
    IndividualRow,
    IndividualSummary,
    MonthRangeReport,
    MonthRangeRow,
    MonthRangeSummary,
    NewMemberRow,
    NewMembersReport,
    NewMembersSummary,
    NonContributorRow,
    NonContributorsReport,
    NonContributorsSummary,
    Report,
    ReportKind,
    StatusFilter,
)

if TYPE_CHECKING:
    from ..contributions import ContributionRecord

LOGGER = get_logger(__name__)

ExpectedMembers = Union[ExpectedMemberRoster, Iterable[ExpectedMember]]


def _period(date_range: DateRange) -> str:
    return f"Period: {date_range.label}"


def _keep(record: Optional["ContributionRecord"], status_filter: StatusFilter) -> bool:
    if status_filter is StatusFilter.ALL:
        return True
    if record is None:
        return status_filter is StatusFilter.NO_RECORD
    if status_filter is StatusFilter.PAID:
        return record.paid
    if status_filter is StatusFilter.UNPAID:
        return not record.paid
    return False


def individual_report(
    ledger: ContributionLedger,
    member_name: str,
    date_range: DateRange,
    status_filter: Union[StatusFilter, str] = StatusFilter.ALL,
) -> IndividualReport:
    """One row per month in range for a single member.

    Rows removed by ``status_filter`` do not count towards the summary, but
    ``total_months`` always reflects the whole range.
    """

    name = (member_name or "").strip()
    if not name:
        raise ValidationError("Please enter a member name")
    if not isinstance(status_filter, StatusFilter):
        status_filter = StatusFilter.from_str(status_filter)

    rows: List[IndividualRow] = []
    total_paid = total_unpaid = months_contributed = 0
    walked = date_range.months()
    for year, month in walked:
        bucket = ledger.get_bucket(year, month)
        record = bucket.find(name) if bucket is not None else None
        if not _keep(record, status_filter):
            continue
        if record is None:
            rows.append(IndividualRow(year=year, month=month, amount=0, paid=False, no_record=True))
            continue
        rows.append(
            IndividualRow(year=year, month=month, amount=record.amount, paid=record.paid, no_record=False)
        )
        months_contributed += 1
        if record.paid:
            total_paid += record.amount
        else:
            total_unpaid += record.amount

    subtitle = _period(date_range)
    if status_filter is not StatusFilter.ALL:
        subtitle = f"{subtitle} ({status_filter.label})"
    return IndividualReport(
        title=f"Contribution Report: {name}",
        subtitle=subtitle,
        data=tuple(rows),
        summary=IndividualSummary(
            total_amount=total_paid + total_unpaid,
            total_paid=total_paid,
            total_unpaid=total_unpaid,
            months_contributed=months_contributed,
            total_months=len(walked),
        ),
        member_name=name,
        status_filter=status_filter,
    )


def all_members_report(ledger: ContributionLedger, date_range: DateRange) -> AllMembersReport:
    """Per-member totals across the range, alphabetical by name."""

    totals: Dict[str, List[int]] = {}
    walked = date_range.months()
    for year, month in walked:
        bucket = ledger.get_bucket(year, month)
        if bucket is None:
            continue
        for record in bucket.contributions:
            # paid, unpaid, months contributed, months outstanding
            entry = totals.setdefault(record.name, [0, 0, 0, 0])
            entry[2] += 1
            if record.paid:
                entry[0] += record.amount
            else:
                entry[1] += record.amount
                entry[3] += 1

    rows = tuple(
        AllMembersRow(
            name=name,
            total_amount=paid + unpaid,
            total_paid=paid,
            total_unpaid=unpaid,
            months_contributed=contributed,
            months_outstanding=outstanding,
        )
        for name, (paid, unpaid, contributed, outstanding) in sorted(totals.items())
    )
    return AllMembersReport(
        title="All Members Contribution Status",
        subtitle=_period(date_range),
        data=rows,
        summary=AllMembersSummary(
            total_members=len(rows),
            total_months_in_range=len(walked),
            grand_total_amount=sum(row.total_amount for row in rows),
            grand_total_paid=sum(row.total_paid for row in rows),
            grand_total_unpaid=sum(row.total_unpaid for row in rows),
        ),
    )


def expected_members_report(
    ledger: ContributionLedger,
    expected_members: ExpectedMembers,
    date_range: DateRange,
) -> ExpectedMembersReport:
    """Compare a baseline roster against what was actually recorded.

    Months without a bucket are skipped entirely, so a month nobody opened
    never inflates what a member owes.
    """

    if isinstance(expected_members, ExpectedMemberRoster):
        roster = expected_members.members()
    else:
        roster = list(expected_members)
    if not roster:
        raise ValidationError("Please add expected members first")

    buckets = [
        bucket
        for bucket in (ledger.get_bucket(year, month) for year, month in date_range.months())
        if bucket is not None
    ]

    rows: List[ExpectedMemberRow] = []
    for member in roster:
        never_contributed = True
        owed = 0.0
        missed = 0
        for bucket in buckets:
            record = bucket.find(member.name)
            if record is None:
                owed += member.monthly_amount
                missed += 1
                continue
            never_contributed = False
            if not record.paid:
                owed += record.amount
                missed += 1
        rows.append(
            ExpectedMemberRow(
                name=member.name,
                monthly_expected_amount=member.monthly_amount,
                never_contributed=never_contributed,
                total_owed=owed,
                months_missed=missed,
                total_months=len(buckets),
                total_expected_amount=member.monthly_amount * len(buckets),
            )
        )

    return ExpectedMembersReport(
        title="Expected Members List",
        subtitle=_period(date_range),
        data=tuple(rows),
        summary=ExpectedMembersSummary(
            total_expected=len(rows),
            never_contributed=sum(1 for row in rows if row.never_contributed),
            total_owed=sum(row.total_owed for row in rows),
            total_expected_amount=sum(row.total_expected_amount for row in rows),
        ),
    )


def month_range_report(ledger: ContributionLedger, date_range: DateRange) -> MonthRangeReport:
    """Per-month totals in chronological order."""

    rows: List[MonthRangeRow] = []
    for year, month in date_range.months():
        bucket = ledger.get_bucket(year, month)
        totals = ledger.calculate_totals(year, month)
        rows.append(
            MonthRangeRow(
                year=year,
                month=month,
                total=totals.total_amount,
                paid=totals.total_paid,
                unpaid=totals.total_unpaid,
                contributors=len(bucket.contributions) if bucket is not None else 0,
            )
        )
    return MonthRangeReport(
        title="Month Range Summary",
        subtitle=_period(date_range),
        data=tuple(rows),
        summary=MonthRangeSummary(
            total_months=len(rows),
            grand_total=sum(row.total for row in rows),
            grand_paid=sum(row.paid for row in rows),
            grand_unpaid=sum(row.unpaid for row in rows),
        ),
    )


def _member_history(ledger: ContributionLedger) -> Dict[str, List[Tuple[int, int]]]:
    """Chronological ``(month ordinal, amount)`` pairs for every member."""

    history: Dict[str, List[Tuple[int, int]]] = defaultdict(list)
    for year, month, bucket in ledger.iter_buckets():
        ordinal = month_ordinal(year, month)
        for record in bucket.contributions:
            history[record.name].append((ordinal, record.amount))
    return history


def _usual_amount(entries: List[Tuple[int, int]], ordinal: int) -> int:
    """Latest recorded amount at or before ``ordinal``, else the earliest one."""

    amount = entries[0][1]
    for entry_ordinal, entry_amount in entries:
        if entry_ordinal > ordinal:
            break
        amount = entry_amount
    return amount


def non_contributors_report(
    ledger: ContributionLedger,
    date_range: DateRange,
    blacklist: Optional[BlacklistRegistry] = None,
) -> NonContributorsReport:
    """Known members missing from opened months in the range.

    A member is known if they appear anywhere in the ledger. Blacklisted
    members are excluded since they can no longer be recorded. Each missed
    month adds the member's usual amount to what they owe.
    """

    blacklist = blacklist if blacklist is not None else ledger.blacklist
    history = _member_history(ledger)
    members = [name for name in sorted(history) if name not in blacklist]

    missed: Dict[str, int] = {name: 0 for name in members}
    owed: Dict[str, int] = {name: 0 for name in members}
    last_paid: Dict[str, Tuple[int, MonthName]] = {}
    for year, month in date_range.months():
        bucket = ledger.get_bucket(year, month)
        if bucket is None:
            continue
        ordinal = month_ordinal(year, month)
        for name in members:
            record = bucket.find(name)
            if record is None:
                missed[name] += 1
                owed[name] += _usual_amount(history[name], ordinal)
            elif record.paid:
                last_paid[name] = (year, month)

    rows = sorted(
        (
            NonContributorRow(
                name=name,
                months_missed=missed[name],
                last_paid_year=last_paid[name][0] if name in last_paid else None,
                last_paid_month=last_paid[name][1] if name in last_paid else None,
                total_owed=owed[name],
            )
            for name in members
            if missed[name] > 0
        ),
        key=lambda row: (-row.months_missed, row.name),
    )
    return NonContributorsReport(
        title="Non-Contributing Members Report",
        subtitle=_period(date_range),
        data=tuple(rows),
        summary=NonContributorsSummary(
            total_non_contributors=len(rows),
            total_months_missed=sum(row.months_missed for row in rows),
            total_owed=sum(row.total_owed for row in rows),
        ),
    )


def new_members_report(ledger: ContributionLedger, date_range: DateRange) -> NewMembersReport:
    """Members whose first ever record falls inside the range, in join order."""

    start = month_ordinal(date_range.start_year, date_range.start_month)
    seen = set()
    for year, month, bucket in ledger.iter_buckets():
        if month_ordinal(year, month) >= start:
            break
        seen.update(bucket.member_names())

    rows: List[NewMemberRow] = []
    for year, month in date_range.months():
        bucket = ledger.get_bucket(year, month)
        if bucket is None:
            continue
        for record in bucket.contributions:
            if record.name in seen:
                continue
            seen.add(record.name)
            rows.append(
                NewMemberRow(
                    name=record.name,
                    join_year=year,
                    join_month=month,
                    first_amount=record.amount,
                    first_paid=record.paid,
                )
            )
    return NewMembersReport(
        title="New Members Report",
        subtitle=_period(date_range),
        data=tuple(rows),
        summary=NewMembersSummary(total_new_members=len(rows)),
    )


def campaign_summary_report(campaigns: CampaignLedger) -> CampaignSummaryReport:
    """Progress of every campaign, newest first, with overall statistics."""

    rows: List[CampaignRow] = []
    for campaign in campaigns.list_campaigns():
        progress = campaigns.progress(campaign.campaign_id)
        rows.append(
            CampaignRow(
                campaign_id=campaign.campaign_id,
                purpose=campaign.purpose,
                status=campaign.status,
                date_created=campaign.date_created,
                target_date=campaign.target_date,
                target_amount=campaign.target_amount,
                amount_raised=campaign.amount_raised,
                total_paid=progress.total_paid,
                outstanding_amount=progress.outstanding_amount,
                remaining=progress.remaining,
                pledged_progress=progress.pledged_progress,
                paid_progress=progress.paid_progress,
                contributor_count=progress.contributor_count,
            )
        )
    stats = campaigns.campaign_stats()
    return CampaignSummaryReport(
        title="Special Giving Campaigns",
        subtitle=f"{stats.total_campaigns} campaigns ({stats.active_campaigns} active)",
        data=tuple(rows),
        summary=stats,
    )


def budget_summary_report(
    budget: BudgetLedger,
    contributions: ContributionLedger,
    period: Union[ExpensePeriod, str] = ExpensePeriod.ALL,
    *,
    category: Optional[str] = None,
    start: Optional[object] = None,
    end: Optional[object] = None,
) -> BudgetSummaryReport:
    """Category totals for the filtered expenses plus the overall balance."""

    if not isinstance(period, ExpensePeriod):
        period = ExpensePeriod.from_str(period)
    expenses = budget.filter_expenses(period, category=category, start=start, end=end)
    counts: Dict[str, int] = defaultdict(int)
    for expense in expenses:
        counts[expense.category] += 1
    rows = tuple(
        BudgetCategoryRow(category=name, amount=amount, expense_count=counts[name])
        for name, amount in budget.totals_by_category(expenses).items()
    )

    balance = budget.calculate_from_income(contributions)
    return BudgetSummaryReport(
        title=f"Budget Summary: {budget.owner}",
        subtitle=f"Expenses: {period.value.replace('-', ' ')}",
        data=rows,
        summary=BudgetSummary(
            owner=budget.owner,
            total_income=balance.total_income,
            total_expenses=balance.total_expenses,
            remaining=balance.remaining,
            percentage_used=balance.percentage_used,
            filtered_expenses=sum(row.amount for row in rows),
            filtered_count=len(expenses),
        ),
    )


def _require(value, message: str):
    if value is None:
        raise ValidationError(message)
    return value


def generate_report(
    kind: Union[ReportKind, str],
    *,
    contributions: Optional[ContributionLedger] = None,
    date_range: Optional[DateRange] = None,
    member_name: Optional[str] = None,
    status_filter: Union[StatusFilter, str] = StatusFilter.ALL,
    expected_members: Optional[ExpectedMembers] = None,
    campaigns: Optional[CampaignLedger] = None,
    budget: Optional[BudgetLedger] = None,
    expense_period: Union[ExpensePeriod, str] = ExpensePeriod.ALL,
) -> Report:
    """Build the report named by ``kind`` from whichever inputs it needs."""

    if not isinstance(kind, ReportKind):
        kind = ReportKind.from_str(kind)
    LOGGER.info("Generating %s report", kind.value)

    if kind is ReportKind.CAMPAIGN_SUMMARY:
        return campaign_summary_report(_require(campaigns, "Campaign data is required"))

    ledger = _require(contributions, "Contribution data is required")
    if kind is ReportKind.BUDGET_SUMMARY:
        return budget_summary_report(
            _require(budget, "A budget is required"), ledger, expense_period
        )

    window = _require(date_range, "Please select a date range")
    if kind is ReportKind.INDIVIDUAL:
        return individual_report(ledger, member_name or "", window, status_filter)
    if kind is ReportKind.ALL_MEMBERS:
        return all_members_report(ledger, window)
    if kind is ReportKind.EXPECTED_MEMBERS:
        return expected_members_report(ledger, expected_members or (), window)
    if kind is ReportKind.MONTH_RANGE:
        return month_range_report(ledger, window)
    if kind is ReportKind.NON_CONTRIBUTORS:
        return non_contributors_report(ledger, window)
    return new_members_report(ledger, window)
