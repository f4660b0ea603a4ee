"""Mini README: Calendar month helpers and the inclusive month-range walker.

Structure:
    * MonthName - enum of the twelve canonical English month names.
    * parse_month / parse_year - validate loosely typed keys at ingestion.
    * walk_months - inclusive, chronological (year, month) sequence.
    * DateRange - value object wrapping a start/end pair for report callers.

Ledger keys are validated here so the rest of the package only ever sees
``int`` years and ``MonthName`` members. Walking returns tuples rather than
live iterators, so a range can be re-walked any number of times.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from ..errors import InvalidMonthError, InvalidRangeError


class MonthName(str, Enum):
    """Canonical month names used as ledger keys."""

    JANUARY = "January"
    FEBRUARY = "February"
    MARCH = "March"
    APRIL = "April"
    MAY = "May"
    JUNE = "June"
    JULY = "July"
    AUGUST = "August"
    SEPTEMBER = "September"
    OCTOBER = "October"
    NOVEMBER = "November"
    DECEMBER = "December"

    @property
    def position(self) -> int:
        """Zero-based calendar position."""

        return _MONTH_ORDER.index(self)


_MONTH_ORDER: Tuple[MonthName, ...] = tuple(MonthName)
MONTH_NAMES: Tuple[str, ...] = tuple(month.value for month in _MONTH_ORDER)
_LOOKUP = {month.value.lower(): month for month in _MONTH_ORDER}

YearLike = Union[int, str]
MonthLike = Union[MonthName, str]
MonthKey = Tuple[int, MonthName]


def parse_month(value: MonthLike) -> MonthName:
    """Return the ``MonthName`` for a full month name (case-insensitive)."""

    if isinstance(value, MonthName):
        return value
    if not isinstance(value, str):
        raise InvalidMonthError(f"Unrecognised month: {value!r}")
    month = _LOOKUP.get(value.strip().lower())
    if month is None:
        raise InvalidMonthError(f"Unrecognised month: {value!r}")
    return month


def parse_year(value: YearLike) -> int:
    """Return a four-digit year from an ``int`` or a digit string."""

    if isinstance(value, bool):
        raise InvalidRangeError(f"Invalid year: {value!r}")
    if isinstance(value, int):
        text = str(value)
    elif isinstance(value, str):
        text = value.strip()
    else:
        raise InvalidRangeError(f"Invalid year: {value!r}")
    if len(text) != 4 or not text.isdigit():
        raise InvalidRangeError(f"Year must have exactly four digits: {value!r}")
    return int(text)


def is_valid_year_key(value: object) -> bool:
    try:
        parse_year(value)  # type: ignore[arg-type]
    except InvalidRangeError:
        return False
    return True


def month_ordinal(year: int, month: MonthName) -> int:
    """Linear month counter used for comparisons across years."""

    return year * 12 + month.position


def walk_months(
    start_month: MonthLike,
    start_year: YearLike,
    end_month: MonthLike,
    end_year: YearLike,
) -> Tuple[MonthKey, ...]:
    """Return every ``(year, month)`` from start to end, both inclusive."""

    first_month = parse_month(start_month)
    last_month = parse_month(end_month)
    first = month_ordinal(parse_year(start_year), first_month)
    last = month_ordinal(parse_year(end_year), last_month)
    if last < first:
        raise InvalidRangeError(
            f"Range end {last_month.value} {end_year} precedes start "
            f"{first_month.value} {start_year}"
        )
    return tuple((ordinal // 12, _MONTH_ORDER[ordinal % 12]) for ordinal in range(first, last + 1))


@dataclass(frozen=True, slots=True)
class DateRange:
    """Validated inclusive month range used by the report functions."""

    start_month: MonthName
    start_year: int
    end_month: MonthName
    end_year: int

    @classmethod
    def of(
        cls,
        start_month: MonthLike,
        start_year: YearLike,
        end_month: MonthLike,
        end_year: YearLike,
    ) -> "DateRange":
        """Parse loose inputs and reject reversed ranges up front."""

        date_range = cls(
            start_month=parse_month(start_month),
            start_year=parse_year(start_year),
            end_month=parse_month(end_month),
            end_year=parse_year(end_year),
        )
        date_range.months()
        return date_range

    def months(self) -> Tuple[MonthKey, ...]:
        return walk_months(self.start_month, self.start_year, self.end_month, self.end_year)

    def contains(self, year: int, month: MonthName) -> bool:
        ordinal = month_ordinal(year, month)
        return (
            month_ordinal(self.start_year, self.start_month)
            <= ordinal
            <= month_ordinal(self.end_year, self.end_month)
        )

    @property
    def label(self) -> str:
        return (
            f"{self.start_month.value} {self.start_year} to "
            f"{self.end_month.value} {self.end_year}"
        )
