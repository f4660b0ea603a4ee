"""Mini README: Whole-ledger snapshots in the browser client's wire format.

Structure:
    * LedgerState - explicit aggregate of every ledger a request works on.
    * validate_contributions_payload / validate_blacklist_payload - ingestion
      filters that drop malformed keys and records.
    * state_from_payload / state_to_payload - wire format <-> domain objects.
    * SnapshotStore - loads and saves the whole payload as one JSON file.

Wire format (camelCase, dates as epoch milliseconds)::

    {
      "contributionsData": {"2024": {"January": {"contributions": [...], "total": 0}}},
      "blacklistData": {"blacklistedMembers": ["..."]},
      "specialGiving": {"camp_0001": {"id": ..., "contributions": {...}}},
      "budgets": {"<owner>": {"expenses": {"exp_0001": {...}}}},
      "expectedMembers": [{"name": "...", "monthlyAmount": 500}],
      "meta": {"lastSync": 1704067200000}
    }

Saving writes the complete snapshot every time; concurrent writers overwrite
each other (last write wins).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from .access import DEFAULT_POLICY, AccessPolicy
from .budget import BudgetLedger, Expense
from .campaigns import Campaign, CampaignLedger, CampaignPledge, CampaignStatus
from .configuration import FundLedgerSettings, get_settings
from .contributions import BlacklistRegistry, ContributionLedger, ContributionRecord, MonthBucket
from .dates import MONTH_NAMES, is_valid_year_key, parse_date
from .errors import LedgerError, ValidationError
from .logging_utils import get_logger
from .members import ExpectedMember, ExpectedMemberRoster
from .validation import round_money

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class LedgerState:
    """Every ledger plus the policy they currently enforce."""

    contributions: ContributionLedger = field(default_factory=ContributionLedger)
    campaigns: CampaignLedger = field(default_factory=CampaignLedger)
    budgets: Dict[str, BudgetLedger] = field(default_factory=dict)
    expected_members: ExpectedMemberRoster = field(default_factory=ExpectedMemberRoster)
    policy: AccessPolicy = DEFAULT_POLICY
    last_sync: Optional[int] = None

    @property
    def blacklist(self) -> BlacklistRegistry:
        return self.contributions.blacklist

    def apply_policy(self, policy: AccessPolicy) -> "LedgerState":
        """Make every ledger enforce ``policy`` from now on."""

        self.policy = policy
        self.contributions.policy = policy
        self.contributions.blacklist.policy = policy
        self.campaigns.policy = policy
        self.expected_members.policy = policy
        for budget in self.budgets.values():
            budget.policy = policy
        return self

    def budget_for(self, owner: str) -> BudgetLedger:
        """Return ``owner``'s budget, starting an empty one if needed."""

        if owner not in self.budgets:
            self.budgets[owner] = BudgetLedger(owner, policy=self.policy)
        return self.budgets[owner]


def _epoch_millis(day: Optional[date]) -> Optional[int]:
    if day is None:
        return None
    midnight = datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
    return int(midnight.timestamp() * 1000)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _valid_record(record: object) -> bool:
    return (
        isinstance(record, Mapping)
        and isinstance(record.get("name"), str)
        and _is_number(record.get("amount"))
        and isinstance(record.get("paid"), bool)
    )


def validate_contributions_payload(data: object) -> Dict[str, Dict[str, Dict[str, Any]]]:
    """Return a cleaned copy of ``contributionsData``.

    Years that are not four digits and unknown month names are dropped,
    records missing a string name, numeric amount or boolean paid flag are
    filtered out, and every month total is recomputed.
    """

    if not isinstance(data, Mapping):
        return {}
    cleaned: Dict[str, Dict[str, Dict[str, Any]]] = {}
    dropped = 0
    for year, months in data.items():
        if not isinstance(year, str) or not is_valid_year_key(year) or not isinstance(months, Mapping):
            dropped += 1
            continue
        for month, bucket in months.items():
            if month not in MONTH_NAMES:
                dropped += 1
                continue
            raw = bucket.get("contributions") if isinstance(bucket, Mapping) else None
            records = [
                {
                    "name": record["name"],
                    "amount": int(record["amount"])
                    if float(record["amount"]).is_integer()
                    else record["amount"],
                    "paid": record["paid"],
                }
                for record in (raw if isinstance(raw, list) else [])
                if _valid_record(record)
            ]
            dropped += (len(raw) if isinstance(raw, list) else 0) - len(records)
            cleaned.setdefault(year, {})[month] = {
                "contributions": records,
                "total": sum(record["amount"] for record in records),
            }
    if dropped:
        LOGGER.warning("Dropped %s malformed contribution keys or records", dropped)
    return cleaned


def validate_blacklist_payload(data: object) -> Dict[str, List[str]]:
    """Keep only non-blank string names from ``blacklistData``."""

    names = data.get("blacklistedMembers") if isinstance(data, Mapping) else None
    if not isinstance(names, list):
        return {"blacklistedMembers": []}
    return {"blacklistedMembers": [name for name in names if isinstance(name, str) and name.strip()]}


def _contributions_from_wire(payload: Mapping[str, Any], policy: AccessPolicy) -> ContributionLedger:
    blacklist = BlacklistRegistry(
        validate_blacklist_payload(payload.get("blacklistData"))["blacklistedMembers"],
        policy=policy,
    )
    data = {
        year: {
            month: MonthBucket(
                contributions=[
                    ContributionRecord(name=r["name"], amount=r["amount"], paid=r["paid"])
                    for r in bucket["contributions"]
                ]
            )
            for month, bucket in months.items()
        }
        for year, months in validate_contributions_payload(payload.get("contributionsData")).items()
    }
    return ContributionLedger(data, blacklist=blacklist, policy=policy)


def _pledge_from_wire(pledge_id: str, item: Mapping[str, Any]) -> CampaignPledge:
    # Older clients stored the pledged figure under "amount".
    pledged = item.get("pledgedAmount") or item.get("amount")
    return CampaignPledge(
        pledge_id=str(item.get("id") or pledge_id),
        contributor_name=str(item["contributorName"]),
        pledged_amount=round_money(float(pledged)),
        amount_paid=round_money(float(item.get("amountPaid") or 0)),
        pledged_on=parse_date(item["date"]),
        notes=str(item.get("notes") or ""),
    )


def _pledges_from_wire(campaign_id: str, raw_pledges: object) -> Dict[str, CampaignPledge]:
    pledges: Dict[str, CampaignPledge] = {}
    for pledge_id, raw in (raw_pledges.items() if isinstance(raw_pledges, Mapping) else ()):
        try:
            pledge = _pledge_from_wire(str(pledge_id), raw)
        except (KeyError, TypeError, ValueError, AttributeError, LedgerError) as error:
            LOGGER.warning("Skipping malformed pledge %s in campaign %s: %s", pledge_id, campaign_id, error)
            continue
        pledges[pledge.pledge_id] = pledge
    return pledges


def _campaign_from_wire(campaign_id: str, item: Mapping[str, Any]) -> Campaign:
    return Campaign(
        campaign_id=str(item.get("id") or campaign_id),
        purpose=str(item["purpose"]),
        target_amount=round_money(float(item["targetAmount"])),
        date_created=parse_date(item["dateCreated"]),
        amount_raised=round_money(float(item.get("amountRaised") or 0)),
        target_date=parse_date(item["targetDate"]) if item.get("targetDate") else None,
        reason=str(item.get("reason") or ""),
        notes=str(item.get("notes") or ""),
        status=CampaignStatus.from_str(str(item.get("status") or "active")),
        pledges=_pledges_from_wire(campaign_id, item.get("contributions")),
    )


def _campaigns_from_wire(
    data: object, policy: AccessPolicy, clock: Callable[[], date]
) -> CampaignLedger:
    campaigns: Dict[str, Campaign] = {}
    for campaign_id, item in (data.items() if isinstance(data, Mapping) else ()):
        try:
            campaign = _campaign_from_wire(str(campaign_id), item)
            if campaign.campaign_id in campaigns:
                raise ValidationError(f"duplicate campaign id {campaign.campaign_id}")
        except (KeyError, TypeError, ValueError, AttributeError, LedgerError) as error:
            LOGGER.warning("Skipping malformed campaign %s: %s", campaign_id, error)
            continue
        campaigns[campaign.campaign_id] = campaign
    return CampaignLedger(campaigns.values(), clock=clock, policy=policy)


def _budgets_from_wire(
    data: object, policy: AccessPolicy, clock: Callable[[], date]
) -> Dict[str, BudgetLedger]:
    budgets: Dict[str, BudgetLedger] = {}
    for owner, budget in (data.items() if isinstance(data, Mapping) else ()):
        expenses: List[Expense] = []
        raw_expenses = budget.get("expenses") if isinstance(budget, Mapping) else None
        for expense_id, item in (raw_expenses or {}).items():
            try:
                expenses.append(
                    Expense(
                        expense_id=str(expense_id),
                        amount=round_money(float(item["amount"])),
                        category=str(item["category"]),
                        spent_on=parse_date(item["date"]),
                        description=str(item.get("description") or ""),
                    )
                )
            except (KeyError, TypeError, ValueError, AttributeError, LedgerError) as error:
                LOGGER.warning("Skipping malformed expense %s for %s: %s", expense_id, owner, error)
        budgets[str(owner)] = BudgetLedger(str(owner), expenses, clock=clock, policy=policy)
    return budgets


def _roster_from_wire(data: object, policy: AccessPolicy) -> ExpectedMemberRoster:
    members: List[ExpectedMember] = []
    for item in data if isinstance(data, list) else ():
        if not isinstance(item, Mapping) or not isinstance(item.get("name"), str):
            continue
        if not _is_number(item.get("monthlyAmount")) or item["monthlyAmount"] <= 0:
            continue
        members.append(ExpectedMember(name=item["name"].strip(), monthly_amount=float(item["monthlyAmount"])))
    return ExpectedMemberRoster(members, policy=policy)


def state_from_payload(
    payload: Optional[Mapping[str, Any]],
    *,
    policy: AccessPolicy = DEFAULT_POLICY,
    clock: Callable[[], date] = date.today,
) -> LedgerState:
    """Build a ``LedgerState`` from a decoded snapshot, dropping bad entries."""

    payload = payload or {}
    meta = payload.get("meta")
    last_sync = meta.get("lastSync") if isinstance(meta, Mapping) else None
    return LedgerState(
        contributions=_contributions_from_wire(payload, policy),
        campaigns=_campaigns_from_wire(payload.get("specialGiving"), policy, clock),
        budgets=_budgets_from_wire(payload.get("budgets"), policy, clock),
        expected_members=_roster_from_wire(payload.get("expectedMembers"), policy),
        policy=policy,
        last_sync=last_sync if _is_number(last_sync) else None,
    )


def _campaign_to_wire(campaign: Campaign) -> Dict[str, Any]:
    return {
        "id": campaign.campaign_id,
        "purpose": campaign.purpose,
        "targetAmount": campaign.target_amount,
        "amountRaised": campaign.amount_raised,
        "dateCreated": _epoch_millis(campaign.date_created),
        "targetDate": _epoch_millis(campaign.target_date),
        "reason": campaign.reason,
        "status": campaign.status.value,
        "notes": campaign.notes,
        "contributions": {
            pledge.pledge_id: {
                "id": pledge.pledge_id,
                "contributorName": pledge.contributor_name,
                "pledgedAmount": pledge.pledged_amount,
                "amountPaid": pledge.amount_paid,
                "date": _epoch_millis(pledge.pledged_on),
                "notes": pledge.notes,
            }
            for pledge in campaign.pledges.values()
        },
    }


def state_to_payload(state: LedgerState) -> Dict[str, Any]:
    """Serialise ``state`` into the wire format."""

    payload: Dict[str, Any] = {
        "contributionsData": state.contributions.export_snapshot(),
        "blacklistData": {"blacklistedMembers": state.blacklist.names()},
        "specialGiving": {
            campaign.campaign_id: _campaign_to_wire(campaign)
            for campaign in state.campaigns.list_campaigns()
        },
        "budgets": {
            owner: {
                "expenses": {
                    expense.expense_id: {
                        "amount": expense.amount,
                        "category": expense.category,
                        "date": _epoch_millis(expense.spent_on),
                        "description": expense.description,
                    }
                    for expense in budget.list_expenses()
                }
            }
            for owner, budget in sorted(state.budgets.items())
        },
        "expectedMembers": [
            {"name": member.name, "monthlyAmount": member.monthly_amount}
            for member in state.expected_members.members()
        ],
    }
    if state.last_sync is not None:
        payload["meta"] = {"lastSync": state.last_sync}
    return payload


class SnapshotStore:
    """Read and write the whole ledger snapshot as a single JSON document."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @classmethod
    def from_settings(cls, settings: Optional[FundLedgerSettings] = None) -> "SnapshotStore":
        settings = settings or get_settings()
        return cls(settings.snapshot_path)

    def load_payload(self) -> Dict[str, Any]:
        if not self.path.exists():
            LOGGER.info("No snapshot at %s; starting with an empty ledger", self.path)
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as error:
            raise ValidationError(f"Snapshot {self.path} is not valid JSON") from error
        if not isinstance(payload, dict):
            raise ValidationError(f"Snapshot {self.path} must contain a JSON object")
        return payload

    def load(
        self,
        *,
        policy: AccessPolicy = DEFAULT_POLICY,
        clock: Callable[[], date] = date.today,
    ) -> LedgerState:
        state = state_from_payload(self.load_payload(), policy=policy, clock=clock)
        LOGGER.debug("Loaded snapshot from %s", self.path)
        return state

    def save(self, state: LedgerState) -> Path:
        """Overwrite the snapshot with ``state`` and stamp the sync time."""

        state.last_sync = int(datetime.now(tz=timezone.utc).timestamp() * 1000)
        payload = state_to_payload(state)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temporary = self.path.with_suffix(self.path.suffix + ".tmp")
        with temporary.open("w", encoding="utf-8") as snapshot_file:
            json.dump(payload, snapshot_file, indent=2)
        os.replace(temporary, self.path)
        LOGGER.info("Saved snapshot to %s", self.path)
        return self.path
