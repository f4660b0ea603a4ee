"""Mini README: Tests for the FastAPI JSON interface.

These tests drive the application through ``TestClient`` against a snapshot
in a temporary directory, checking role handling, persistence after writes
and the mapping of domain errors onto HTTP status codes.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from fundledger.configuration import FundLedgerSettings
from fundledger.interface import create_application
from fundledger.snapshot import SnapshotStore

EDITOR = {"X-Ledger-Role": "editor"}
ADMIN = {"X-Ledger-Role": "admin"}


@pytest.fixture()
def store(tmp_path: Path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "ledger.json")


@pytest.fixture()
def client(tmp_path: Path, store: SnapshotStore) -> TestClient:
    settings = FundLedgerSettings(data_directory=tmp_path, default_role="viewer")
    return TestClient(create_application(store=store, settings=settings))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_contribution_writes_are_persisted(client: TestClient, store: SnapshotStore) -> None:
    response = client.post(
        "/contributions/2024/january",
        json={"name": "Amina", "amount": 500, "paid": True},
        headers=EDITOR,
    )

    assert response.status_code == 201
    assert response.json()["month"] == "January"
    assert response.json()["total"] == 500
    assert store.load().contributions.get_bucket(2024, "January").total == 500

    toggled = client.post("/contributions/2024/January/0/toggle", headers=EDITOR)
    assert toggled.json()["paid"] is False


def test_default_role_is_read_only(client: TestClient) -> None:
    response = client.post("/contributions/2024/January", json={"name": "Amina", "amount": 500})

    assert response.status_code == 403
    assert client.get("/contributions").json() == {"contributions": {}}


def test_unknown_role_is_forbidden(client: TestClient) -> None:
    response = client.get("/contributions", headers={"X-Ledger-Role": "owner"})

    assert response.status_code == 403


def test_domain_errors_map_to_status_codes(client: TestClient) -> None:
    bad_amount = client.post(
        "/contributions/2024/January", json={"name": "Amina", "amount": 0}, headers=EDITOR
    )
    bad_month = client.get("/contributions/2024/Smarch")
    missing = client.delete("/contributions/2024/January/0", headers=EDITOR)

    assert bad_amount.status_code == 400
    assert bad_month.status_code == 400
    assert missing.status_code == 404


def test_create_month_carries_previous_members(client: TestClient) -> None:
    client.post("/contributions/2024/January", json={"name": "Kofi", "amount": 300, "paid": True}, headers=EDITOR)

    response = client.post("/months/2024/February", json={}, headers=EDITOR)

    body = response.json()
    assert response.status_code == 200
    assert body["created"] is True
    assert body["seeded_from"] == [2024, "January"]
    assert body["bucket"]["contributions"] == [{"name": "Kofi", "amount": 300, "paid": False}]


def test_blacklist_requires_admin(client: TestClient) -> None:
    denied = client.post("/blacklist", json={"name": "Jabari"}, headers=EDITOR)
    allowed = client.post("/blacklist", json={"name": "Jabari"}, headers=ADMIN)

    assert denied.status_code == 403
    assert allowed.json() == {"added": True, "blacklisted_members": ["Jabari"]}
    rejected = client.post(
        "/contributions/2024/January", json={"name": "Jabari", "amount": 100}, headers=EDITOR
    )
    assert rejected.status_code == 400


def test_campaign_pledge_and_overpayment(client: TestClient) -> None:
    created = client.post("/campaigns", json={"purpose": "Roof repair", "target_amount": 1000}, headers=EDITOR)
    campaign_id = created.json()["campaign_id"]

    pledged = client.post(
        f"/campaigns/{campaign_id}/pledges",
        json={"contributor_name": "Amina", "pledged_amount": 300, "amount_paid": 100},
        headers=EDITOR,
    )
    pledge_id = pledged.json()["pledge_id"]
    overpaid = client.post(
        f"/campaigns/{campaign_id}/pledges/{pledge_id}/payments", json={"amount": 500}, headers=EDITOR
    )
    detail = client.get(f"/campaigns/{campaign_id}")

    assert pledged.status_code == 201
    assert overpaid.status_code == 400
    assert detail.json()["amount_raised"] == 300
    assert detail.json()["progress"]["pledged_progress"] == 30
    assert client.get("/campaigns/camp_9999").status_code == 404


def test_budget_expenses_and_balance(client: TestClient) -> None:
    client.post("/contributions/2024/January", json={"name": "Amina", "amount": 500, "paid": True}, headers=EDITOR)

    added = client.post(
        "/budgets/treasurer/expenses",
        json={"amount": 125, "category": "Utilities", "expense_date": "2024-01-10"},
        headers=EDITOR,
    )

    assert added.status_code == 201
    body = added.json()
    assert body["total_income"] == 500
    assert body["remaining"] == 375
    assert body["percentage_used"] == 25
    ranged = client.get(
        "/budgets/treasurer/expenses",
        params={"period": "date-range", "start": "2024-01-01", "end": "2024-01-31"},
    )
    assert ranged.json()["totals_by_category"] == {"Utilities": 125}


def test_reports_endpoint(client: TestClient) -> None:
    client.post("/contributions/2024/January", json={"name": "Amina", "amount": 500, "paid": True}, headers=EDITOR)
    client.post("/expected-members", json={"name": "Baraka", "monthly_amount": 200}, headers=EDITOR)

    individual = client.post(
        "/reports",
        json={
            "kind": "individual",
            "member_name": "Amina",
            "start_month": "January",
            "start_year": 2024,
            "end_month": "March",
            "end_year": 2024,
        },
    )
    expected = client.post(
        "/reports",
        json={"kind": "expected-members", "start_month": "January", "start_year": 2024, "end_month": "January", "end_year": 2024},
    )
    reversed_range = client.post(
        "/reports",
        json={"kind": "month-range", "start_month": "March", "start_year": 2024, "end_month": "January", "end_year": 2024},
    )

    assert individual.status_code == 200
    assert individual.json()["summary"]["total_paid"] == 500
    assert len(individual.json()["data"]) == 3
    assert expected.json()["data"][0]["never_contributed"] is True
    assert reversed_range.status_code == 400
