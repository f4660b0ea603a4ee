"""Mini README: Calendar-day parsing shared by campaigns and budgets.

Accepts the shapes that arrive from snapshots and callers: ``date`` and
``datetime`` objects, ISO strings, and epoch-millisecond timestamps written by
older browser clients.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from ..errors import ValidationError


def parse_date(value: object) -> date:
    """Parse ISO strings, epoch milliseconds or date/datetime instances."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date()
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return parse_date(int(text))
        try:
            return date.fromisoformat(text[:10])
        except ValueError as error:
            raise ValidationError(f"Invalid date: {value!r}") from error
    raise ValidationError("Dates must be provided as ISO strings or date/datetime instances.")
