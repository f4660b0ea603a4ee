"""Mini README: Fundraising campaigns with per-contributor pledges and payments.

Structure:
    * CampaignStatus - active versus resolved campaigns.
    * CampaignPledge - a contributor's pledged amount and what has been paid.
    * Campaign - target, running ``amount_raised`` and the pledges behind it.
    * CampaignProgress / CampaignStats - derived views for dashboards.
    * CampaignLedger - CRUD-like behaviour under the pledge invariants.

``amount_raised`` is maintained by deltas on every pledge add, edit and
removal rather than recomputed, so ``audit_totals`` can detect any drift
between the stored figure and the pledges. Each pledge keeps
``0 <= amount_paid <= pledged_amount``; writes that would break this are
rejected before any field changes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from ..access import DEFAULT_POLICY, AccessPolicy
from ..dates import parse_date
from ..errors import NotFoundError, OverpaymentError, ValidationError
from ..identifiers import IdentifierSequence, sequence_of
from ..logging_utils import get_logger
from ..validation import (
    round_money,
    validate_name,
    validate_non_negative_amount,
    validate_positive_amount,
    validate_text,
)

LOGGER = get_logger(__name__)


class CampaignStatus(str, Enum):
    """Lifecycle state of a campaign."""

    ACTIVE = "active"
    RESOLVED = "resolved"

    @classmethod
    def from_str(cls, value: str) -> "CampaignStatus":
        """Coerce arbitrary casing into a valid status."""

        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValidationError(f"Unsupported campaign status: {value}") from error


@dataclass(slots=True)
class CampaignPledge:
    """A contributor's commitment to a campaign."""

    pledge_id: str
    contributor_name: str
    pledged_amount: float
    amount_paid: float
    pledged_on: date
    notes: str = ""

    @property
    def outstanding(self) -> float:
        return self.pledged_amount - self.amount_paid

    def as_dict(self) -> Dict[str, object]:
        return {
            "pledge_id": self.pledge_id,
            "contributor_name": self.contributor_name,
            "pledged_amount": self.pledged_amount,
            "amount_paid": self.amount_paid,
            "pledged_on": self.pledged_on.isoformat(),
            "notes": self.notes,
        }


@dataclass(slots=True)
class Campaign:
    """A fundraising campaign and its pledges."""

    campaign_id: str
    purpose: str
    target_amount: float
    date_created: date
    amount_raised: float = 0.0
    target_date: Optional[date] = None
    reason: str = ""
    notes: str = ""
    status: CampaignStatus = CampaignStatus.ACTIVE
    pledges: Dict[str, CampaignPledge] = field(default_factory=dict)

    @property
    def total_paid(self) -> float:
        return round_money(sum(pledge.amount_paid for pledge in self.pledges.values()))

    def as_dict(self) -> Dict[str, object]:
        return {
            "campaign_id": self.campaign_id,
            "purpose": self.purpose,
            "target_amount": self.target_amount,
            "amount_raised": self.amount_raised,
            "date_created": self.date_created.isoformat(),
            "target_date": self.target_date.isoformat() if self.target_date else None,
            "reason": self.reason,
            "notes": self.notes,
            "status": self.status.value,
            "pledges": {
                pledge_id: pledge.as_dict() for pledge_id, pledge in self.pledges.items()
            },
        }


@dataclass(frozen=True, slots=True)
class CampaignProgress:
    """Pledge and payment progress for one campaign.

    ``pledged_progress`` and ``paid_progress`` are whole percentages clamped to
    0-100 for display; the ``*_ratio`` fields keep the raw, unclamped values.
    """

    campaign_id: str
    pledged_ratio: float
    paid_ratio: float
    pledged_progress: int
    paid_progress: int
    total_paid: float
    contributor_count: int
    outstanding_amount: float
    remaining: float

    def as_dict(self) -> Dict[str, object]:
        return {
            "campaign_id": self.campaign_id,
            "pledged_ratio": self.pledged_ratio,
            "paid_ratio": self.paid_ratio,
            "pledged_progress": self.pledged_progress,
            "paid_progress": self.paid_progress,
            "total_paid": self.total_paid,
            "contributor_count": self.contributor_count,
            "outstanding_amount": self.outstanding_amount,
            "remaining": self.remaining,
        }


@dataclass(frozen=True, slots=True)
class CampaignStats:
    total_target: float
    total_raised: float
    total_paid: float
    active_campaigns: int
    resolved_campaigns: int
    total_campaigns: int
    overall_ratio: float
    overall_progress: int


def round_percent(ratio: float) -> int:
    """Round ``ratio * 100`` half up, matching the figures operators expect."""

    return int(math.floor(ratio * 100 + 0.5))


def clamp_percent(percent: int) -> int:
    return max(0, min(100, percent))


_PLEDGE_FIELDS = {"contributor_name", "pledged_amount", "amount_paid", "notes"}
_CAMPAIGN_FIELDS = {"purpose", "target_amount", "target_date", "reason", "notes", "status"}


class CampaignLedger:
    """Manage fundraising campaigns and keep their totals consistent."""

    def __init__(
        self,
        campaigns: Optional[Iterable[Campaign]] = None,
        *,
        clock: Callable[[], date] = date.today,
        policy: AccessPolicy = DEFAULT_POLICY,
    ) -> None:
        self._campaigns: Dict[str, Campaign] = {}
        self._campaign_ids = IdentifierSequence("camp")
        self._pledge_ids = IdentifierSequence("pledge")
        self._clock = clock
        self.policy = policy
        for campaign in campaigns or ():
            self._register(campaign)
        LOGGER.debug("Campaign ledger initialised with %s campaigns", len(self._campaigns))

    def _register(self, campaign: Campaign) -> None:
        """Store a loaded campaign ensuring identifiers remain unique."""

        if campaign.campaign_id in self._campaigns:
            raise ValidationError(f"Campaign {campaign.campaign_id} already exists.")
        self._campaigns[campaign.campaign_id] = campaign
        self._campaign_ids.observe(campaign.campaign_id)
        for pledge_id in campaign.pledges:
            self._pledge_ids.observe(pledge_id)

    def get_campaign(self, campaign_id: str) -> Campaign:
        """Retrieve a campaign, raising informative errors when missing."""

        if campaign_id not in self._campaigns:
            raise NotFoundError(f"Campaign {campaign_id} not found")
        return self._campaigns[campaign_id]

    def get_pledge(self, campaign_id: str, pledge_id: str) -> CampaignPledge:
        campaign = self.get_campaign(campaign_id)
        if pledge_id not in campaign.pledges:
            raise NotFoundError(f"Pledge {pledge_id} not found in campaign {campaign_id}")
        return campaign.pledges[pledge_id]

    def list_campaigns(self) -> List[Campaign]:
        """Return campaigns newest first."""

        return sorted(
            self._campaigns.values(),
            key=lambda campaign: (campaign.date_created, sequence_of(campaign.campaign_id)),
            reverse=True,
        )

    def active_campaigns(self) -> List[Campaign]:
        return [c for c in self.list_campaigns() if c.status is CampaignStatus.ACTIVE]

    def pledges(self, campaign_id: str) -> List[CampaignPledge]:
        """Return a campaign's pledges newest first."""

        campaign = self.get_campaign(campaign_id)
        return sorted(
            campaign.pledges.values(),
            key=lambda pledge: (pledge.pledged_on, sequence_of(pledge.pledge_id)),
            reverse=True,
        )

    def create_campaign(
        self,
        purpose: str,
        target_amount: object,
        target_date: Optional[object] = None,
        reason: str = "",
        notes: str = "",
    ) -> str:
        """Open a new active campaign and return its identifier."""

        clean_purpose = validate_text(purpose, "Campaign purpose")
        clean_target = validate_positive_amount(target_amount, "Target amount")
        clean_target_date = parse_date(target_date) if target_date else None
        self.policy.require_write("create campaigns")

        campaign = Campaign(
            campaign_id=self._campaign_ids.next(),
            purpose=clean_purpose,
            target_amount=clean_target,
            date_created=self._clock(),
            target_date=clean_target_date,
            reason=reason or "",
            notes=notes or "",
        )
        self._campaigns[campaign.campaign_id] = campaign
        LOGGER.info(
            "Created campaign %s '%s' with target %s", campaign.campaign_id, clean_purpose, clean_target
        )
        return campaign.campaign_id

    def update_campaign(self, campaign_id: str, updates: Mapping[str, object]) -> Campaign:
        """Edit descriptive campaign fields; totals and pledges are not editable here."""

        campaign = self.get_campaign(campaign_id)
        unknown = set(updates) - _CAMPAIGN_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update campaign fields: {', '.join(sorted(unknown))}")

        coerced: Dict[str, object] = {}
        for key, value in updates.items():
            if key == "purpose":
                coerced[key] = validate_text(value, "Campaign purpose")
            elif key == "target_amount":
                coerced[key] = validate_positive_amount(value, "Target amount")
            elif key == "target_date":
                coerced[key] = parse_date(value) if value else None
            elif key == "status":
                coerced[key] = (
                    value if isinstance(value, CampaignStatus) else CampaignStatus.from_str(str(value))
                )
            else:
                coerced[key] = "" if value is None else str(value)
        self.policy.require_write("update campaigns")

        for key, value in coerced.items():
            setattr(campaign, key, value)
        LOGGER.info("Updated campaign %s fields %s", campaign_id, sorted(coerced))
        return campaign

    def resolve_campaign(self, campaign_id: str) -> Campaign:
        return self.update_campaign(campaign_id, {"status": CampaignStatus.RESOLVED})

    def remove_campaign(self, campaign_id: str) -> Campaign:
        """Delete a campaign together with all of its pledges."""

        self.get_campaign(campaign_id)
        self.policy.require_write("remove campaigns")

        campaign = self._campaigns.pop(campaign_id)
        for pledge in campaign.pledges.values():
            campaign.amount_raised = round_money(campaign.amount_raised - pledge.pledged_amount)
        discarded = len(campaign.pledges)
        campaign.pledges.clear()
        LOGGER.info("Removed campaign %s and %s pledges", campaign_id, discarded)
        return campaign

    def add_pledge(
        self,
        campaign_id: str,
        contributor_name: str,
        pledged_amount: object,
        amount_paid: object = 0,
        notes: str = "",
    ) -> str:
        """Record a pledge and grow ``amount_raised`` by the pledged amount."""

        campaign = self.get_campaign(campaign_id)
        clean_name = validate_name(contributor_name)
        pledged = validate_positive_amount(pledged_amount, "Pledged amount")
        paid = validate_non_negative_amount(amount_paid, "Amount paid")
        if paid > pledged:
            raise ValidationError("Amount paid cannot exceed the pledged amount")
        self.policy.require_write("add pledges")

        pledge = CampaignPledge(
            pledge_id=self._pledge_ids.next(),
            contributor_name=clean_name,
            pledged_amount=pledged,
            amount_paid=paid,
            pledged_on=self._clock(),
            notes=notes or "",
        )
        campaign.pledges[pledge.pledge_id] = pledge
        campaign.amount_raised = round_money(campaign.amount_raised + pledged)
        LOGGER.info(
            "Pledge %s: %s pledged %s (paid %s) to campaign %s",
            pledge.pledge_id,
            clean_name,
            pledged,
            paid,
            campaign_id,
        )
        return pledge.pledge_id

    def record_payment(self, campaign_id: str, pledge_id: str, payment_amount: object) -> float:
        """Add a payment towards a pledge and return the new amount paid."""

        pledge = self.get_pledge(campaign_id, pledge_id)
        payment = validate_positive_amount(payment_amount, "Payment amount")
        new_paid = round_money(pledge.amount_paid + payment)
        if new_paid > pledge.pledged_amount:
            raise OverpaymentError(
                f"Payment cannot exceed pledged amount: {new_paid} > {pledge.pledged_amount}"
            )
        self.policy.require_write("record payments")

        pledge.amount_paid = new_paid
        LOGGER.info("Recorded payment %s on pledge %s (now %s)", payment, pledge_id, new_paid)
        return new_paid

    def update_pledge(
        self, campaign_id: str, pledge_id: str, updates: Mapping[str, object]
    ) -> CampaignPledge:
        """Apply a partial update, adjusting ``amount_raised`` by the pledged delta."""

        campaign = self.get_campaign(campaign_id)
        pledge = self.get_pledge(campaign_id, pledge_id)
        unknown = set(updates) - _PLEDGE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update pledge fields: {', '.join(sorted(unknown))}")

        name = pledge.contributor_name
        pledged = pledge.pledged_amount
        paid = pledge.amount_paid
        notes = pledge.notes
        if updates.get("contributor_name") is not None:
            name = validate_name(updates["contributor_name"])
        if updates.get("pledged_amount") is not None:
            pledged = validate_positive_amount(updates["pledged_amount"], "Pledged amount")
        if updates.get("amount_paid") is not None:
            paid = validate_non_negative_amount(updates["amount_paid"], "Amount paid")
        if "notes" in updates:
            notes = "" if updates["notes"] is None else str(updates["notes"])
        if paid > pledged:
            raise ValidationError("Amount paid cannot exceed the pledged amount")
        self.policy.require_write("update pledges")

        delta = round_money(pledged - pledge.pledged_amount)
        pledge.contributor_name = name
        pledge.pledged_amount = pledged
        pledge.amount_paid = paid
        pledge.notes = notes
        if delta:
            campaign.amount_raised = round_money(campaign.amount_raised + delta)
        LOGGER.info("Updated pledge %s in campaign %s (delta %s)", pledge_id, campaign_id, delta)
        return pledge

    def remove_pledge(self, campaign_id: str, pledge_id: str) -> CampaignPledge:
        campaign = self.get_campaign(campaign_id)
        pledge = self.get_pledge(campaign_id, pledge_id)
        self.policy.require_write("remove pledges")

        campaign.amount_raised = round_money(campaign.amount_raised - pledge.pledged_amount)
        del campaign.pledges[pledge_id]
        LOGGER.info("Removed pledge %s from campaign %s", pledge_id, campaign_id)
        return pledge

    def progress(self, campaign_id: str) -> CampaignProgress:
        campaign = self.get_campaign(campaign_id)
        total_paid = campaign.total_paid
        pledged_ratio = (
            campaign.amount_raised / campaign.target_amount if campaign.target_amount > 0 else 0.0
        )
        paid_ratio = total_paid / campaign.amount_raised if campaign.amount_raised > 0 else 0.0
        return CampaignProgress(
            campaign_id=campaign_id,
            pledged_ratio=pledged_ratio,
            paid_ratio=paid_ratio,
            pledged_progress=clamp_percent(round_percent(pledged_ratio)),
            paid_progress=clamp_percent(round_percent(paid_ratio)),
            total_paid=total_paid,
            contributor_count=len(campaign.pledges),
            outstanding_amount=max(0.0, campaign.amount_raised - total_paid),
            remaining=max(0.0, campaign.target_amount - campaign.amount_raised),
        )

    def campaign_stats(self) -> CampaignStats:
        campaigns = self.list_campaigns()
        total_target = round_money(sum(c.target_amount for c in campaigns))
        total_raised = round_money(sum(c.amount_raised for c in campaigns))
        active = len(self.active_campaigns())
        overall_ratio = total_raised / total_target if total_target > 0 else 0.0
        return CampaignStats(
            total_target=total_target,
            total_raised=total_raised,
            total_paid=round_money(sum(c.total_paid for c in campaigns)),
            active_campaigns=active,
            resolved_campaigns=len(campaigns) - active,
            total_campaigns=len(campaigns),
            overall_ratio=overall_ratio,
            overall_progress=round_percent(overall_ratio),
        )

    def audit_totals(self) -> List[str]:
        """Identifiers of campaigns whose ``amount_raised`` drifted from their pledges."""

        drifted = [
            campaign.campaign_id
            for campaign in self.list_campaigns()
            if not math.isclose(
                campaign.amount_raised,
                sum(pledge.pledged_amount for pledge in campaign.pledges.values()),
                abs_tol=1e-6,
            )
        ]
        if drifted:
            LOGGER.warning("Campaign totals drifted for %s", drifted)
        return drifted
