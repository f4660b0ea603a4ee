"""Mini README: Tests covering campaign pledges, payments and progress views.

Structure:
    * pledge tests - amount_raised follows every add, edit and removal.
    * payment tests - overpayment is rejected without touching the pledge.
    * view tests - progress rounding, statistics and ordering.
"""

from __future__ import annotations

from datetime import date

import pytest

from fundledger.access import AccessPolicy, Role
from fundledger.campaigns import Campaign, CampaignLedger, CampaignPledge, CampaignStatus
from fundledger.errors import (
    LedgerPermissionError,
    NotFoundError,
    OverpaymentError,
    ValidationError,
)


@pytest.fixture()
def ledger() -> CampaignLedger:
    return CampaignLedger(clock=lambda: date(2024, 5, 1))


def test_create_campaign_assigns_sequential_ids(ledger: CampaignLedger) -> None:
    first = ledger.create_campaign("Roof repair", 10000, target_date="2024-12-31")
    second = ledger.create_campaign("Choir robes", 2500)

    assert (first, second) == ("camp_0001", "camp_0002")
    campaign = ledger.get_campaign(first)
    assert campaign.status is CampaignStatus.ACTIVE
    assert campaign.amount_raised == 0
    assert campaign.target_date == date(2024, 12, 31)
    assert [c.campaign_id for c in ledger.list_campaigns()] == ["camp_0002", "camp_0001"]


def test_create_campaign_validates_inputs(ledger: CampaignLedger) -> None:
    with pytest.raises(ValidationError):
        ledger.create_campaign("   ", 100)
    with pytest.raises(ValidationError):
        ledger.create_campaign("Roof", 0)


def test_pledges_drive_amount_raised(ledger: CampaignLedger) -> None:
    campaign_id = ledger.create_campaign("Roof repair", 1000)
    first = ledger.add_pledge(campaign_id, "Amina", 300, amount_paid=100)
    second = ledger.add_pledge(campaign_id, "Kofi", 200)

    assert ledger.get_campaign(campaign_id).amount_raised == pytest.approx(500)

    ledger.update_pledge(campaign_id, first, {"pledged_amount": 400})
    assert ledger.get_campaign(campaign_id).amount_raised == pytest.approx(600)

    ledger.remove_pledge(campaign_id, second)
    assert ledger.get_campaign(campaign_id).amount_raised == pytest.approx(400)
    assert ledger.audit_totals() == []


def test_pledge_cannot_start_overpaid(ledger: CampaignLedger) -> None:
    campaign_id = ledger.create_campaign("Roof repair", 1000)

    with pytest.raises(ValidationError):
        ledger.add_pledge(campaign_id, "Amina", 100, amount_paid=150)
    assert ledger.get_campaign(campaign_id).pledges == {}


def test_overpayment_is_rejected_and_pledge_unchanged(ledger: CampaignLedger) -> None:
    campaign_id = ledger.create_campaign("Roof repair", 1000)
    pledge_id = ledger.add_pledge(campaign_id, "Amina", 300, amount_paid=250)

    with pytest.raises(OverpaymentError):
        ledger.record_payment(campaign_id, pledge_id, 100)

    pledge = ledger.get_pledge(campaign_id, pledge_id)
    assert pledge.amount_paid == pytest.approx(250)
    assert ledger.record_payment(campaign_id, pledge_id, 50) == pytest.approx(300)


def test_partial_payments_settle_a_pledge_exactly(ledger: CampaignLedger) -> None:
    campaign_id = ledger.create_campaign("Hymn books", 1)
    pledge_id = ledger.add_pledge(campaign_id, "Amina", 0.3)
    ledger.add_pledge(campaign_id, "Kofi", 0.1)
    ledger.add_pledge(campaign_id, "Neema", 0.2)

    ledger.record_payment(campaign_id, pledge_id, 0.1)

    assert ledger.record_payment(campaign_id, pledge_id, 0.2) == 0.3
    assert ledger.get_campaign(campaign_id).amount_raised == 0.6
    assert ledger.progress(campaign_id).pledged_progress == 60
    assert ledger.audit_totals() == []
    with pytest.raises(OverpaymentError):
        ledger.record_payment(campaign_id, pledge_id, 0.01)


def test_update_pledge_rejects_paid_above_pledged(ledger: CampaignLedger) -> None:
    campaign_id = ledger.create_campaign("Roof repair", 1000)
    pledge_id = ledger.add_pledge(campaign_id, "Amina", 300, amount_paid=200)

    with pytest.raises(ValidationError):
        ledger.update_pledge(campaign_id, pledge_id, {"pledged_amount": 150})
    with pytest.raises(ValidationError):
        ledger.update_pledge(campaign_id, pledge_id, {"unknown": 1})

    assert ledger.get_pledge(campaign_id, pledge_id).pledged_amount == pytest.approx(300)
    assert ledger.get_campaign(campaign_id).amount_raised == pytest.approx(300)


def test_remove_campaign_discards_pledges(ledger: CampaignLedger) -> None:
    campaign_id = ledger.create_campaign("Roof repair", 1000)
    ledger.add_pledge(campaign_id, "Amina", 300)

    removed = ledger.remove_campaign(campaign_id)

    assert removed.pledges == {}
    with pytest.raises(NotFoundError):
        ledger.get_campaign(campaign_id)


def test_progress_rounds_half_up_and_clamps(ledger: CampaignLedger) -> None:
    campaign_id = ledger.create_campaign("Roof repair", 200)
    ledger.add_pledge(campaign_id, "Amina", 1, amount_paid=1)

    progress = ledger.progress(campaign_id)
    assert progress.pledged_progress == 1  # 0.5% rounds up
    assert progress.paid_progress == 100

    ledger.add_pledge(campaign_id, "Kofi", 399)
    progress = ledger.progress(campaign_id)
    assert progress.pledged_ratio == pytest.approx(2.0)
    assert progress.pledged_progress == 100
    assert progress.remaining == 0
    assert progress.outstanding_amount == pytest.approx(399)
    assert progress.contributor_count == 2


def test_campaign_stats_summarise_all_campaigns(ledger: CampaignLedger) -> None:
    roof = ledger.create_campaign("Roof repair", 1000)
    robes = ledger.create_campaign("Choir robes", 1000)
    ledger.add_pledge(roof, "Amina", 500, amount_paid=200)
    ledger.add_pledge(robes, "Kofi", 250)
    ledger.resolve_campaign(robes)

    stats = ledger.campaign_stats()

    assert stats.total_target == pytest.approx(2000)
    assert stats.total_raised == pytest.approx(750)
    assert stats.total_paid == pytest.approx(200)
    assert (stats.active_campaigns, stats.resolved_campaigns, stats.total_campaigns) == (1, 1, 2)
    assert stats.overall_progress == 38
    assert [c.campaign_id for c in ledger.active_campaigns()] == [roof]


def test_audit_detects_drift_in_loaded_campaigns() -> None:
    pledge = CampaignPledge("pledge_0007", "Amina", 300, 0, date(2024, 1, 2))
    drifted = Campaign(
        campaign_id="camp_0003",
        purpose="Legacy",
        target_amount=1000,
        date_created=date(2024, 1, 1),
        amount_raised=999,
        pledges={pledge.pledge_id: pledge},
    )
    ledger = CampaignLedger([drifted])

    assert ledger.audit_totals() == ["camp_0003"]
    assert ledger.create_campaign("Next", 10) == "camp_0004"
    assert ledger.add_pledge("camp_0004", "Kofi", 5) == "pledge_0008"


def test_viewer_cannot_create_campaigns() -> None:
    ledger = CampaignLedger(policy=AccessPolicy(role=Role.VIEWER))

    with pytest.raises(LedgerPermissionError):
        ledger.create_campaign("Roof repair", 100)
    assert ledger.list_campaigns() == []
