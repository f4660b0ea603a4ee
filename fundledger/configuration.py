"""Mini README: Centralised configuration models and helpers for FundLedger.

Structure:
    * FundLedgerSettings - Pydantic settings model describing runtime options.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to locate the snapshot file, pick the default actor
    role for the HTTP interface, and choose the service port. Values come from
    ``FUNDLEDGER_*`` environment variables or a local ``.env`` file and are
    validated once per process.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FundLedgerSettings(BaseSettings):
    """Runtime configuration for the FundLedger service and CLI."""

    model_config = SettingsConfigDict(
        env_prefix="FUNDLEDGER_",
        env_file=".env",
        case_sensitive=False,
    )

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding the ledger snapshot file.",
    )
    snapshot_filename: str = Field(
        "ledger_snapshot.json",
        description="Name of the whole-ledger JSON snapshot inside the data directory.",
    )
    interface_host: str = Field(
        "127.0.0.1",
        description="Network interface for the JSON API to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Port the JSON API exposes.",
        ge=1,
        le=65535,
    )
    default_role: str = Field(
        "viewer",
        description="Role assumed for API requests that omit the X-Ledger-Role header.",
    )
    log_level: str = Field("INFO", description="Root logging level.")

    @field_validator("data_directory", mode="before")
    @classmethod
    def _expand_path(cls, value: Union[str, Path]) -> Path:
        """Ensure configured paths expand user directories and exist."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("default_role")
    @classmethod
    def _known_role(cls, value: str) -> str:
        normalised = value.strip().lower()
        if normalised not in {"viewer", "editor", "admin"}:
            raise ValueError(f"Unsupported default role: {value}")
        return normalised

    @property
    def snapshot_path(self) -> Path:
        """Full path of the snapshot file."""

        return self.data_directory / self.snapshot_filename


@lru_cache()
def get_settings() -> FundLedgerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return FundLedgerSettings()
