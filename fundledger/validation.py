"""Mini README: Shared input validation for member names and money amounts.

Structure:
    * validate_name - trims and enforces the 2-50 character member name bounds.
    * validate_contribution_amount - whole amounts between 1 and 1,000,000.
    * validate_positive_amount - campaign and expense amounts greater than zero.
    * validate_non_negative_amount - pledge payments already made.
    * round_money - keeps money at cent precision so running sums settle exactly.

Every helper returns the normalised value or raises ``ValidationError`` with a
message suitable for showing to an operator.
"""

from __future__ import annotations

import math

from .errors import ValidationError

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
CONTRIBUTION_MIN_AMOUNT = 1
CONTRIBUTION_MAX_AMOUNT = 1_000_000
MONEY_PLACES = 2


def validate_name(name: object) -> str:
    """Return the trimmed name or raise when outside the length bounds."""

    if not isinstance(name, str):
        raise ValidationError("Name must be text")
    trimmed = name.strip()
    if not NAME_MIN_LENGTH <= len(trimmed) <= NAME_MAX_LENGTH:
        raise ValidationError(
            f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
        )
    return trimmed


def validate_contribution_amount(amount: object) -> int:
    """Accept whole numbers (or digit strings) within the contribution bounds."""

    if isinstance(amount, bool):
        raise ValidationError("Please enter a valid number for amount")
    if isinstance(amount, int):
        value = amount
    elif isinstance(amount, float) and amount.is_integer():
        value = int(amount)
    elif isinstance(amount, str) and amount.strip().isdigit():
        value = int(amount.strip())
    else:
        raise ValidationError("Please enter a valid number for amount")
    if not CONTRIBUTION_MIN_AMOUNT <= value <= CONTRIBUTION_MAX_AMOUNT:
        raise ValidationError(
            f"Amount must be between {CONTRIBUTION_MIN_AMOUNT:,} and {CONTRIBUTION_MAX_AMOUNT:,}"
        )
    return value


def _as_number(amount: object, label: str) -> float:
    if isinstance(amount, bool):
        raise ValidationError(f"{label} must be a number")
    try:
        value = float(amount)  # type: ignore[arg-type]
    except (TypeError, ValueError) as error:
        raise ValidationError(f"{label} must be a number") from error
    if not math.isfinite(value):
        raise ValidationError(f"{label} must be a finite number")
    return round_money(value)


def round_money(value: float) -> float:
    """Round to whole cents; applied to every stored amount and running total."""

    return round(value, MONEY_PLACES)


def validate_positive_amount(amount: object, label: str = "Amount") -> float:
    value = _as_number(amount, label)
    if value <= 0:
        raise ValidationError(f"{label} must be greater than zero")
    return value


def validate_non_negative_amount(amount: object, label: str = "Amount") -> float:
    value = _as_number(amount, label)
    if value < 0:
        raise ValidationError(f"{label} cannot be negative")
    return value


def validate_text(value: object, label: str) -> str:
    """Require a non-blank string, returning it trimmed."""

    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    return value.strip()
