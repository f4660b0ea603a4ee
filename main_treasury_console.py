"""Mini README: Entry point CLI for the FundLedger treasury service.

This script exposes a Typer CLI that allows operators to start the FastAPI
JSON service, print any report straight from the snapshot file, and audit
campaign totals. Settings come from ``FUNDLEDGER_*`` environment variables or
a local ``.env`` file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from fundledger.configuration import get_settings
from fundledger.dates import DateRange
from fundledger.errors import LedgerError
from fundledger.logging_utils import configure_root_logger
from fundledger.reports import generate_report
from fundledger.snapshot import SnapshotStore

cli = typer.Typer(help="Run and query the FundLedger treasury.")


def _store(snapshot: Optional[Path]) -> SnapshotStore:
    return SnapshotStore(snapshot) if snapshot else SnapshotStore.from_settings()


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # Browsers cannot open the 0.0.0.0 / :: wildcard, so point at localhost.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting FundLedger on {effective_host}:{effective_port}.\n"
        f"API docs at http://{browser_host}:{effective_port}/docs"
    )
    uvicorn.run(
        "fundledger.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def report(
    kind: str = typer.Argument(..., help="Report type, e.g. individual or month-range."),
    start_month: Optional[str] = typer.Option(None, help="First month of the range."),
    start_year: Optional[int] = typer.Option(None, help="Year of the first month."),
    end_month: Optional[str] = typer.Option(None, help="Last month of the range."),
    end_year: Optional[int] = typer.Option(None, help="Year of the last month."),
    member: Optional[str] = typer.Option(None, help="Member name for individual reports."),
    status: str = typer.Option("all", help="all, paid, unpaid or no-record."),
    owner: Optional[str] = typer.Option(None, help="Budget owner for budget summaries."),
    period: str = typer.Option("all", help="Expense period for budget summaries."),
    snapshot: Optional[Path] = typer.Option(None, help="Snapshot file to read."),
) -> None:
    """Print a report as JSON."""

    configure_root_logger(get_settings().log_level)
    try:
        state = _store(snapshot).load()
        bounds = (start_month, start_year, end_month, end_year)
        date_range = DateRange.of(*bounds) if all(b is not None for b in bounds) else None
        built = generate_report(
            kind,
            contributions=state.contributions,
            date_range=date_range,
            member_name=member,
            status_filter=status,
            expected_members=state.expected_members,
            campaigns=state.campaigns,
            budget=state.budget_for(owner) if owner else None,
            expense_period=period,
        )
    except LedgerError as error:
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=1) from error
    typer.echo(json.dumps(built.as_dict(), indent=2))


@cli.command()
def audit(
    snapshot: Optional[Path] = typer.Option(None, help="Snapshot file to read."),
) -> None:
    """Check that every campaign's amount raised matches its pledges."""

    configure_root_logger(get_settings().log_level)
    try:
        state = _store(snapshot).load()
    except LedgerError as error:
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=1) from error
    drifted = state.campaigns.audit_totals()
    if drifted:
        typer.echo(f"Totals drifted for: {', '.join(drifted)}", err=True)
        raise typer.Exit(code=1)
    typer.echo("All campaign totals match their pledges.")


if __name__ == "__main__":
    cli()
