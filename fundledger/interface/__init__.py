"""Mini README: Interfaces (web/CLI) for FundLedger.

Exports the FastAPI application factory that serves the JSON API. The Typer
console in ``main_treasury_console.py`` at the repository root launches it.
"""

from .web_app import create_application

__all__ = ["create_application"]
