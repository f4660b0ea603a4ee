"""Mini README: Expected-member baseline used by the expected-members report."""

from .roster import ExpectedMember, ExpectedMemberRoster

__all__ = ["ExpectedMember", "ExpectedMemberRoster"]
