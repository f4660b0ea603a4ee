"""Mini README: Tests for the blacklist registry and its admin-only writes."""

from __future__ import annotations

import pytest

from fundledger.access import AccessPolicy, Role
from fundledger.contributions import BlacklistRegistry
from fundledger.errors import LedgerPermissionError, NotFoundError, ValidationError


def test_registry_trims_and_deduplicates_loaded_names() -> None:
    registry = BlacklistRegistry([" Jabari ", "Jabari", "", 42, "Neema"])

    assert registry.names() == ["Jabari", "Neema"]
    assert "Jabari" in registry
    assert registry.contains(" Neema")
    assert len(registry) == 2


def test_admin_can_add_and_remove_members() -> None:
    registry = BlacklistRegistry(policy=AccessPolicy(role=Role.ADMIN))

    assert registry.add("Jabari") is True
    assert registry.add(" Jabari ") is False
    registry.remove("Jabari")

    assert list(registry) == []
    with pytest.raises(NotFoundError):
        registry.remove("Jabari")


def test_blank_names_are_rejected() -> None:
    registry = BlacklistRegistry(policy=AccessPolicy(role=Role.ADMIN))

    with pytest.raises(ValidationError):
        registry.add("   ")


@pytest.mark.parametrize("role", [Role.VIEWER, Role.EDITOR])
def test_only_admins_change_the_blacklist(role: Role) -> None:
    registry = BlacklistRegistry(["Jabari"], policy=AccessPolicy(role=role))

    with pytest.raises(LedgerPermissionError):
        registry.add("Neema")
    with pytest.raises(LedgerPermissionError):
        registry.remove("Jabari")
    assert registry.names() == ["Jabari"]
