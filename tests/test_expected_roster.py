"""Mini README: Tests for the expected-member roster."""

from __future__ import annotations

import pytest

from fundledger.access import AccessPolicy, Role
from fundledger.errors import LedgerPermissionError, NotFoundError, ValidationError
from fundledger.members import ExpectedMember, ExpectedMemberRoster


def test_add_edit_remove_members_in_order() -> None:
    roster = ExpectedMemberRoster()
    roster.add(" Amina ", 500)
    roster.add("Kofi", "300")

    roster.edit("Kofi", "Kofi Mensah", 350)

    assert roster.members() == [
        ExpectedMember("Amina", 500.0),
        ExpectedMember("Kofi Mensah", 350.0),
    ]
    assert roster.remove("Amina").name == "Amina"
    assert len(roster) == 1


def test_duplicates_and_bad_amounts_are_rejected() -> None:
    roster = ExpectedMemberRoster([ExpectedMember("Amina", 500)])

    with pytest.raises(ValidationError):
        roster.add("Amina", 200)
    with pytest.raises(ValidationError):
        roster.add("Kofi", 0)
    roster.add("Kofi", 100)
    with pytest.raises(ValidationError):
        roster.edit("Kofi", "Amina", 100)


def test_missing_members_raise_not_found() -> None:
    roster = ExpectedMemberRoster()

    with pytest.raises(NotFoundError):
        roster.edit("Ghost", "Ghost", 10)
    with pytest.raises(NotFoundError):
        roster.remove("Ghost")


def test_viewer_cannot_edit_roster() -> None:
    roster = ExpectedMemberRoster(policy=AccessPolicy(role=Role.VIEWER))

    with pytest.raises(LedgerPermissionError):
        roster.add("Amina", 500)
