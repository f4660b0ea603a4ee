"""Mini README: Tests for snapshot ingestion, serialisation and the JSON store.

These tests confirm that malformed keys and records are dropped on the way
in, that the wire format survives a save/load cycle through the file store,
and that policies are applied across every ledger of a state.
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from fundledger.access import AccessPolicy, Role
from fundledger.campaigns import CampaignLedger
from fundledger.errors import LedgerPermissionError, ValidationError
from fundledger.snapshot import (
    LedgerState,
    SnapshotStore,
    state_from_payload,
    state_to_payload,
    validate_blacklist_payload,
    validate_contributions_payload,
)

JAN_2024_MS = 1704067200000


def test_validate_contributions_drops_bad_keys_and_records() -> None:
    cleaned = validate_contributions_payload(
        {
            "2024": {
                "January": {
                    "contributions": [
                        {"name": "Amina", "amount": 500, "paid": True},
                        {"name": "Kofi", "amount": "300", "paid": False},
                        {"name": "Neema", "amount": 200, "paid": "yes"},
                        None,
                    ],
                    "total": 99999,
                },
                "Janvier": {"contributions": []},
                "February": {"total": 5},
            },
            "24": {"January": {"contributions": []}},
            "abcd": {},
        }
    )

    assert list(cleaned) == ["2024"]
    assert list(cleaned["2024"]) == ["January", "February"]
    assert cleaned["2024"]["January"] == {
        "contributions": [{"name": "Amina", "amount": 500, "paid": True}],
        "total": 500,
    }
    assert cleaned["2024"]["February"] == {"contributions": [], "total": 0}


def test_validate_blacklist_keeps_non_blank_strings() -> None:
    assert validate_blacklist_payload({"blacklistedMembers": ["Jabari", "", " ", 7, None]}) == {
        "blacklistedMembers": ["Jabari"]
    }
    assert validate_blacklist_payload(None) == {"blacklistedMembers": []}


def test_state_from_payload_reads_every_section() -> None:
    payload = {
        "contributionsData": {"2024": {"January": {"contributions": [{"name": "Amina", "amount": 500, "paid": True}]}}},
        "blacklistData": {"blacklistedMembers": ["Jabari"]},
        "specialGiving": {
            "camp_0002": {
                "id": "camp_0002",
                "purpose": "Roof repair",
                "targetAmount": 1000,
                "amountRaised": 300,
                "dateCreated": JAN_2024_MS,
                "status": "active",
                "contributions": {
                    "pledge_0005": {
                        "id": "pledge_0005",
                        "contributorName": "Kofi",
                        "pledgedAmount": 300,
                        "amountPaid": 100,
                        "date": JAN_2024_MS,
                    }
                },
            },
            "broken": {"purpose": "Missing target"},
        },
        "budgets": {"treasurer": {"expenses": {"exp_0003": {"amount": 40, "category": "Rent", "date": JAN_2024_MS}}}},
        "expectedMembers": [{"name": "Amina", "monthlyAmount": 500}, {"name": "Bad", "monthlyAmount": 0}],
        "meta": {"lastSync": JAN_2024_MS},
    }

    state = state_from_payload(payload)

    assert state.contributions.get_bucket(2024, "January").total == 500
    assert "Jabari" in state.blacklist
    campaign = state.campaigns.get_campaign("camp_0002")
    assert campaign.date_created == date(2024, 1, 1)
    assert campaign.pledges["pledge_0005"].amount_paid == pytest.approx(100)
    assert [c.campaign_id for c in state.campaigns.list_campaigns()] == ["camp_0002"]
    assert state.budgets["treasurer"].get_expense("exp_0003").amount == pytest.approx(40)
    assert [m.name for m in state.expected_members.members()] == ["Amina"]
    assert state.last_sync == JAN_2024_MS


def test_payload_uses_camel_case_wire_keys() -> None:
    state = LedgerState(campaigns=CampaignLedger(clock=lambda: date(2024, 1, 1)))
    campaign_id = state.campaigns.create_campaign("Roof repair", 1000)
    state.campaigns.add_pledge(campaign_id, "Kofi", 250)

    payload = state_to_payload(state)

    wire = payload["specialGiving"][campaign_id]
    assert wire["targetAmount"] == 1000
    assert wire["amountRaised"] == 250
    assert wire["dateCreated"] == JAN_2024_MS
    assert wire["targetDate"] is None
    pledge = next(iter(wire["contributions"].values()))
    assert pledge["contributorName"] == "Kofi"
    assert set(payload) == {"contributionsData", "blacklistData", "specialGiving", "budgets", "expectedMembers"}


def test_store_save_then_load_restores_state(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path / "nested" / "ledger.json")
    state = store.load()
    state.contributions.add_contribution(2024, "March", "Amina", 500, paid=True)
    state.budget_for("treasurer").add_expense(120, "Utilities", "2024-03-02")
    state.expected_members.add("Amina", 500)

    store.save(state)
    reloaded = store.load()

    assert reloaded.contributions.export_snapshot() == state.contributions.export_snapshot()
    assert reloaded.budgets["treasurer"].list_expenses()[0].spent_on == date(2024, 3, 2)
    assert reloaded.expected_members.members() == state.expected_members.members()
    assert reloaded.last_sync is not None
    assert json.loads(store.path.read_text(encoding="utf-8"))["meta"]["lastSync"] == reloaded.last_sync


def test_store_rejects_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "ledger.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValidationError):
        SnapshotStore(path).load()


def test_apply_policy_reaches_every_ledger() -> None:
    state = state_from_payload({"budgets": {"treasurer": {"expenses": {}}}})
    state.apply_policy(AccessPolicy(role=Role.VIEWER))

    with pytest.raises(LedgerPermissionError):
        state.contributions.add_contribution(2024, "January", "Amina", 500)
    with pytest.raises(LedgerPermissionError):
        state.budgets["treasurer"].add_expense(10, "Rent")
    with pytest.raises(LedgerPermissionError):
        state.budget_for("someone-new").add_expense(10, "Rent")
    with pytest.raises(LedgerPermissionError):
        state.expected_members.add("Amina", 500)


def test_bad_pledge_is_skipped_without_losing_its_campaign(tmp_path: Path) -> None:
    store = SnapshotStore(tmp_path / "ledger.json")
    store.path.write_text(
        json.dumps(
            {
                "specialGiving": {
                    "camp_0001": {
                        "id": "camp_0001",
                        "purpose": "Roof repair",
                        "targetAmount": 1000,
                        "amountRaised": 700,
                        "dateCreated": JAN_2024_MS,
                        "contributions": {
                            "pledge_0001": {
                                "contributorName": "Amina",
                                "pledgedAmount": 400,
                                "date": JAN_2024_MS,
                            },
                            "pledge_0002": {"contributorName": "Kofi", "amount": 300, "date": JAN_2024_MS},
                            "pledge_0003": {"contributorName": "Neema", "pledgedAmount": 50, "date": "someday"},
                        },
                    }
                }
            }
        ),
        encoding="utf-8",
    )

    store.save(store.load())
    reloaded = store.load()

    campaign = reloaded.campaigns.get_campaign("camp_0001")
    assert sorted(campaign.pledges) == ["pledge_0001", "pledge_0002"]
    assert campaign.pledges["pledge_0002"].pledged_amount == 300
    assert campaign.amount_raised == 700
    assert reloaded.campaigns.audit_totals() == []


def test_duplicate_campaign_ids_keep_the_first_entry() -> None:
    entry = {"id": "camp_0001", "targetAmount": 1000, "dateCreated": JAN_2024_MS}

    state = state_from_payload(
        {
            "specialGiving": {
                "camp_0001": {**entry, "purpose": "Roof repair"},
                "camp_0002": {**entry, "purpose": "Choir robes"},
            },
            "contributionsData": {"2024": {"January": {"contributions": [{"name": "Amina", "amount": 500, "paid": True}]}}},
        }
    )

    assert [c.purpose for c in state.campaigns.list_campaigns()] == ["Roof repair"]
    assert state.contributions.get_bucket(2024, "January").total == 500
