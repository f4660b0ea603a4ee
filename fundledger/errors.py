"""Mini README: Exception taxonomy shared by every FundLedger component.

Structure:
    * LedgerError - common base so callers can catch any core failure.
    * ValidationError / OverpaymentError - rejected input shapes or amounts.
    * NotFoundError - unknown campaign, pledge, expense or contribution index.
    * InvalidRangeError / InvalidMonthError - malformed date-range arguments.
    * LedgerPermissionError - role-gated write attempted by a read-only actor.

Core operations raise immediately and never retry. Interfaces translate these
errors into their own vocabulary (HTTP status codes, CLI exit codes).
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all FundLedger domain errors."""


class ValidationError(LedgerError):
    """Raised when input fails shape, length or amount bounds."""


class OverpaymentError(ValidationError):
    """Raised when a payment would push a pledge beyond its pledged amount."""


class NotFoundError(LedgerError):
    """Raised when a referenced entity does not exist."""


class InvalidRangeError(LedgerError):
    """Raised when a date range cannot be resolved or ends before it starts."""


class InvalidMonthError(InvalidRangeError):
    """Raised when a month name is not one of the twelve calendar names."""


class LedgerPermissionError(LedgerError):
    """Raised when the acting role may not perform a write."""
