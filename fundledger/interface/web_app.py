"""Mini README: FastAPI JSON service for the FundLedger treasury.

Structure:
    * create_application - application factory wiring routes to the ledgers.
    * Request models - pydantic bodies for every write endpoint.
    * _ledger_errors - translates domain errors into HTTP status codes.

Each request loads the snapshot, applies the role named by the
``X-Ledger-Role`` header (or the configured default), performs one operation
and, for writes, saves the whole snapshot back. Business rules live in the
ledgers; this module only adapts them to HTTP.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Any, Dict, Iterator, Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..access import AccessPolicy, Role
from ..budget import ExpensePeriod
from ..configuration import FundLedgerSettings, get_settings
from ..dates import DateRange, parse_month
from ..errors import (
    InvalidRangeError,
    LedgerError,
    LedgerPermissionError,
    NotFoundError,
    ValidationError,
)
from ..logging_utils import configure_root_logger, get_logger
from ..reports import generate_report, to_plain
from ..snapshot import LedgerState, SnapshotStore

LOGGER = get_logger(__name__)


class ContributionIn(BaseModel):
    name: str
    amount: int
    paid: bool = False


class MonthCreateIn(BaseModel):
    overwrite: bool = False


class MemberNameIn(BaseModel):
    name: str


class CampaignIn(BaseModel):
    purpose: str
    target_amount: float
    target_date: Optional[date] = None
    reason: str = ""
    notes: str = ""


class CampaignUpdateIn(BaseModel):
    purpose: Optional[str] = None
    target_amount: Optional[float] = None
    target_date: Optional[date] = None
    reason: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None


class PledgeIn(BaseModel):
    contributor_name: str
    pledged_amount: float
    amount_paid: float = 0
    notes: str = ""


class PledgeUpdateIn(BaseModel):
    contributor_name: Optional[str] = None
    pledged_amount: Optional[float] = None
    amount_paid: Optional[float] = None
    notes: Optional[str] = None


class PaymentIn(BaseModel):
    amount: float


class ExpenseIn(BaseModel):
    amount: float
    category: str
    expense_date: Optional[date] = None
    description: str = ""


class ExpectedMemberIn(BaseModel):
    name: str
    monthly_amount: float


class ReportRequest(BaseModel):
    kind: str
    start_month: Optional[str] = None
    start_year: Optional[int] = None
    end_month: Optional[str] = None
    end_year: Optional[int] = None
    member_name: Optional[str] = None
    status_filter: str = "all"
    owner: Optional[str] = None
    expense_period: str = Field("all", description="Expense window for budget summaries.")


@contextmanager
def _ledger_errors() -> Iterator[None]:
    """Map domain errors onto HTTP responses."""

    try:
        yield
    except LedgerPermissionError as error:
        raise HTTPException(status_code=403, detail=str(error)) from error
    except NotFoundError as error:
        raise HTTPException(status_code=404, detail=str(error)) from error
    except (ValidationError, InvalidRangeError) as error:
        raise HTTPException(status_code=400, detail=str(error)) from error
    except LedgerError as error:
        LOGGER.exception("Unhandled ledger error")
        raise HTTPException(status_code=500, detail=str(error)) from error


def _bucket_view(state: LedgerState, year: int, month: str) -> Dict[str, Any]:
    bucket = state.contributions.get_bucket(year, month)
    totals = state.contributions.calculate_totals(year, month)
    return {
        "year": year,
        "month": parse_month(month).value,
        "contributions": [record.as_dict() for record in bucket.contributions] if bucket else [],
        "total": totals.total_amount,
        "total_paid": totals.total_paid,
        "total_unpaid": totals.total_unpaid,
    }


def _campaign_view(state: LedgerState, campaign_id: str) -> Dict[str, Any]:
    campaign = state.campaigns.get_campaign(campaign_id)
    payload = campaign.as_dict()
    payload["pledges"] = [pledge.as_dict() for pledge in state.campaigns.pledges(campaign_id)]
    payload["progress"] = state.campaigns.progress(campaign_id).as_dict()
    return payload


def _budget_view(state: LedgerState, owner: str) -> Dict[str, Any]:
    budget = state.budget_for(owner)
    balance = budget.calculate_from_income(state.contributions)
    return {
        "owner": owner,
        "total_income": balance.total_income,
        "total_expenses": balance.total_expenses,
        "remaining": balance.remaining,
        "percentage_used": balance.percentage_used,
        "expenses": [expense.as_dict() for expense in budget.list_expenses()],
    }


def create_application(
    store: Optional[SnapshotStore] = None,
    settings: Optional[FundLedgerSettings] = None,
) -> FastAPI:
    """Create the FastAPI application with routes and dependencies."""

    settings = settings or get_settings()
    configure_root_logger(settings.log_level)
    store = store or SnapshotStore.from_settings(settings)
    app = FastAPI(title="FundLedger Treasury", version="0.1.0")
    LOGGER.info("Serving ledger snapshot at %s", store.path)

    def load_state(x_ledger_role: Optional[str] = Header(None)) -> LedgerState:
        with _ledger_errors():
            role = Role.from_str(x_ledger_role or settings.default_role)
            return store.load(policy=AccessPolicy(role=role))

    def commit(state: LedgerState) -> None:
        store.save(state)

    @app.get("/health")
    async def health() -> JSONResponse:
        return JSONResponse({"status": "ok", "environment": settings.environment})

    @app.get("/contributions")
    async def list_contributions(state: LedgerState = Depends(load_state)) -> JSONResponse:
        """Return the whole year -> month -> bucket hierarchy."""

        return JSONResponse({"contributions": state.contributions.export_snapshot()})

    @app.get("/contributions/{year}/{month}")
    async def month_detail(year: int, month: str, state: LedgerState = Depends(load_state)) -> JSONResponse:
        with _ledger_errors():
            return JSONResponse(_bucket_view(state, year, month))

    @app.post("/contributions/{year}/{month}")
    async def add_contribution(
        year: int, month: str, body: ContributionIn, state: LedgerState = Depends(load_state)
    ) -> JSONResponse:
        with _ledger_errors():
            state.contributions.add_contribution(year, month, body.name, body.amount, body.paid)
            commit(state)
            return JSONResponse(_bucket_view(state, year, month), status_code=201)

    @app.put("/contributions/{year}/{month}/{index}")
    async def edit_contribution(
        year: int,
        month: str,
        index: int,
        body: ContributionIn,
        state: LedgerState = Depends(load_state),
    ) -> JSONResponse:
        with _ledger_errors():
            state.contributions.edit_contribution(year, month, index, body.name, body.amount, body.paid)
            commit(state)
            return JSONResponse(_bucket_view(state, year, month))

    @app.delete("/contributions/{year}/{month}/{index}")
    async def remove_contribution(
        year: int, month: str, index: int, state: LedgerState = Depends(load_state)
    ) -> JSONResponse:
        with _ledger_errors():
            removed = state.contributions.remove_contribution(year, month, index)
            commit(state)
            LOGGER.debug("Removed %s via API", removed.name)
            return JSONResponse(_bucket_view(state, year, month))

    @app.post("/contributions/{year}/{month}/{index}/toggle")
    async def toggle_payment(
        year: int, month: str, index: int, state: LedgerState = Depends(load_state)
    ) -> JSONResponse:
        with _ledger_errors():
            paid = state.contributions.toggle_payment_status(year, month, index)
            commit(state)
            return JSONResponse({"paid": paid, **_bucket_view(state, year, month)})

    @app.post("/months/{year}/{month}")
    async def create_month(
        year: int, month: str, body: MonthCreateIn, state: LedgerState = Depends(load_state)
    ) -> JSONResponse:
        """Seed a month from the latest earlier month holding contributions."""

        with _ledger_errors():
            outcome = state.contributions.create_month(year, month, overwrite=body.overwrite)
            commit(state)
            payload = to_plain(outcome)
            payload["bucket"] = _bucket_view(state, year, month)
            return JSONResponse(payload)

    @app.get("/totals/{year}")
    async def yearly_totals(year: int, state: LedgerState = Depends(load_state)) -> JSONResponse:
        with _ledger_errors():
            return JSONResponse(to_plain(state.contributions.calculate_yearly_totals(year)))

    @app.get("/blacklist")
    async def list_blacklist(state: LedgerState = Depends(load_state)) -> JSONResponse:
        return JSONResponse({"blacklisted_members": state.blacklist.names()})

    @app.post("/blacklist")
    async def blacklist_member(body: MemberNameIn, state: LedgerState = Depends(load_state)) -> JSONResponse:
        with _ledger_errors():
            added = state.blacklist.add(body.name)
            commit(state)
            return JSONResponse({"added": added, "blacklisted_members": state.blacklist.names()})

    @app.delete("/blacklist/{name}")
    async def unblacklist_member(name: str, state: LedgerState = Depends(load_state)) -> JSONResponse:
        with _ledger_errors():
            state.blacklist.remove(name)
            commit(state)
            return JSONResponse({"blacklisted_members": state.blacklist.names()})

    @app.get("/campaigns")
    async def list_campaigns(state: LedgerState = Depends(load_state)) -> JSONResponse:
        campaigns = [_campaign_view(state, c.campaign_id) for c in state.campaigns.list_campaigns()]
        return JSONResponse(
            {"campaigns": campaigns, "stats": to_plain(state.campaigns.campaign_stats())}
        )

    @app.post("/campaigns")
    async def create_campaign(body: CampaignIn, state: LedgerState = Depends(load_state)) -> JSONResponse:
        with _ledger_errors():
            campaign_id = state.campaigns.create_campaign(
                body.purpose, body.target_amount, body.target_date, body.reason, body.notes
            )
            commit(state)
            return JSONResponse(_campaign_view(state, campaign_id), status_code=201)

    @app.get("/campaigns/{campaign_id}")
    async def campaign_detail(campaign_id: str, state: LedgerState = Depends(load_state)) -> JSONResponse:
        with _ledger_errors():
            return JSONResponse(_campaign_view(state, campaign_id))

    @app.patch("/campaigns/{campaign_id}")
    async def update_campaign(
        campaign_id: str, body: CampaignUpdateIn, state: LedgerState = Depends(load_state)
    ) -> JSONResponse:
        with _ledger_errors():
            state.campaigns.update_campaign(campaign_id, body.model_dump(exclude_unset=True))
            commit(state)
            return JSONResponse(_campaign_view(state, campaign_id))

    @app.post("/campaigns/{campaign_id}/resolve")
    async def resolve_campaign(campaign_id: str, state: LedgerState = Depends(load_state)) -> JSONResponse:
        with _ledger_errors():
            state.campaigns.resolve_campaign(campaign_id)
            commit(state)
            return JSONResponse(_campaign_view(state, campaign_id))

    @app.delete("/campaigns/{campaign_id}")
    async def remove_campaign(campaign_id: str, state: LedgerState = Depends(load_state)) -> JSONResponse:
        with _ledger_errors():
            campaign = state.campaigns.remove_campaign(campaign_id)
            commit(state)
            return JSONResponse({"removed": campaign.campaign_id})

    @app.post("/campaigns/{campaign_id}/pledges")
    async def add_pledge(
        campaign_id: str, body: PledgeIn, state: LedgerState = Depends(load_state)
    ) -> JSONResponse:
        with _ledger_errors():
            pledge_id = state.campaigns.add_pledge(
                campaign_id, body.contributor_name, body.pledged_amount, body.amount_paid, body.notes
            )
            commit(state)
            payload = _campaign_view(state, campaign_id)
            payload["pledge_id"] = pledge_id
            return JSONResponse(payload, status_code=201)

    @app.patch("/campaigns/{campaign_id}/pledges/{pledge_id}")
    async def update_pledge(
        campaign_id: str,
        pledge_id: str,
        body: PledgeUpdateIn,
        state: LedgerState = Depends(load_state),
    ) -> JSONResponse:
        with _ledger_errors():
            state.campaigns.update_pledge(campaign_id, pledge_id, body.model_dump(exclude_unset=True))
            commit(state)
            return JSONResponse(_campaign_view(state, campaign_id))

    @app.post("/campaigns/{campaign_id}/pledges/{pledge_id}/payments")
    async def record_payment(
        campaign_id: str,
        pledge_id: str,
        body: PaymentIn,
        state: LedgerState = Depends(load_state),
    ) -> JSONResponse:
        with _ledger_errors():
            amount_paid = state.campaigns.record_payment(campaign_id, pledge_id, body.amount)
            commit(state)
            return JSONResponse({"pledge_id": pledge_id, "amount_paid": amount_paid})

    @app.delete("/campaigns/{campaign_id}/pledges/{pledge_id}")
    async def remove_pledge(
        campaign_id: str, pledge_id: str, state: LedgerState = Depends(load_state)
    ) -> JSONResponse:
        with _ledger_errors():
            state.campaigns.remove_pledge(campaign_id, pledge_id)
            commit(state)
            return JSONResponse(_campaign_view(state, campaign_id))

    @app.get("/budgets/{owner}")
    async def budget_detail(owner: str, state: LedgerState = Depends(load_state)) -> JSONResponse:
        return JSONResponse(_budget_view(state, owner))

    @app.get("/budgets/{owner}/expenses")
    async def filter_expenses(
        owner: str,
        period: str = "all",
        category: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        state: LedgerState = Depends(load_state),
    ) -> JSONResponse:
        with _ledger_errors():
            budget = state.budget_for(owner)
            expenses = budget.filter_expenses(
                ExpensePeriod.from_str(period), category=category, start=start, end=end
            )
            return JSONResponse(
                {
                    "expenses": [expense.as_dict() for expense in expenses],
                    "totals_by_category": budget.totals_by_category(expenses),
                }
            )

    @app.post("/budgets/{owner}/expenses")
    async def add_expense(owner: str, body: ExpenseIn, state: LedgerState = Depends(load_state)) -> JSONResponse:
        with _ledger_errors():
            expense_id = state.budget_for(owner).add_expense(
                body.amount, body.category, body.expense_date, body.description
            )
            commit(state)
            payload = _budget_view(state, owner)
            payload["expense_id"] = expense_id
            return JSONResponse(payload, status_code=201)

    @app.put("/budgets/{owner}/expenses/{expense_id}")
    async def update_expense(
        owner: str,
        expense_id: str,
        body: ExpenseIn,
        state: LedgerState = Depends(load_state),
    ) -> JSONResponse:
        with _ledger_errors():
            state.budget_for(owner).update_expense(
                expense_id, body.amount, body.category, body.expense_date, body.description
            )
            commit(state)
            return JSONResponse(_budget_view(state, owner))

    @app.delete("/budgets/{owner}/expenses/{expense_id}")
    async def remove_expense(
        owner: str, expense_id: str, state: LedgerState = Depends(load_state)
    ) -> JSONResponse:
        with _ledger_errors():
            state.budget_for(owner).remove_expense(expense_id)
            commit(state)
            return JSONResponse(_budget_view(state, owner))

    @app.get("/expected-members")
    async def list_expected(state: LedgerState = Depends(load_state)) -> JSONResponse:
        return JSONResponse(
            {"expected_members": [m.as_dict() for m in state.expected_members.members()]}
        )

    @app.post("/expected-members")
    async def add_expected(body: ExpectedMemberIn, state: LedgerState = Depends(load_state)) -> JSONResponse:
        with _ledger_errors():
            member = state.expected_members.add(body.name, body.monthly_amount)
            commit(state)
            return JSONResponse(member.as_dict(), status_code=201)

    @app.put("/expected-members/{name}")
    async def edit_expected(
        name: str, body: ExpectedMemberIn, state: LedgerState = Depends(load_state)
    ) -> JSONResponse:
        with _ledger_errors():
            member = state.expected_members.edit(name, body.name, body.monthly_amount)
            commit(state)
            return JSONResponse(member.as_dict())

    @app.delete("/expected-members/{name}")
    async def remove_expected(name: str, state: LedgerState = Depends(load_state)) -> JSONResponse:
        with _ledger_errors():
            member = state.expected_members.remove(name)
            commit(state)
            return JSONResponse({"removed": member.name})

    @app.post("/reports")
    async def build_report(body: ReportRequest, state: LedgerState = Depends(load_state)) -> JSONResponse:
        """Generate any report kind; date-ranged kinds need all four range fields."""

        with _ledger_errors():
            bounds = (body.start_month, body.start_year, body.end_month, body.end_year)
            date_range = DateRange.of(*bounds) if all(b is not None for b in bounds) else None
            report = generate_report(
                body.kind,
                contributions=state.contributions,
                date_range=date_range,
                member_name=body.member_name,
                status_filter=body.status_filter,
                expected_members=state.expected_members,
                campaigns=state.campaigns,
                budget=state.budget_for(body.owner) if body.owner else None,
                expense_period=body.expense_period,
            )
            return JSONResponse(report.as_dict())

    return app
