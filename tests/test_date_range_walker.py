"""Mini README: Tests for month parsing and the inclusive month walker.

Structure:
    * walker tests - inclusive ranges, year boundaries and reversed ranges.
    * parsing tests - month names, four-digit years and calendar dates.
"""

from __future__ import annotations

from datetime import date

import pytest

from fundledger.dates import (
    DateRange,
    MonthName,
    parse_date,
    parse_month,
    parse_year,
    walk_months,
)
from fundledger.errors import InvalidMonthError, InvalidRangeError, ValidationError


def test_walk_months_is_inclusive_on_both_ends() -> None:
    """January to March 2024 yields exactly three months in order."""

    walked = walk_months("January", 2024, "March", 2024)

    assert walked == (
        (2024, MonthName.JANUARY),
        (2024, MonthName.FEBRUARY),
        (2024, MonthName.MARCH),
    )


def test_walk_months_crosses_year_boundary() -> None:
    walked = walk_months("November", "2023", "February", "2024")

    assert [(year, month.value) for year, month in walked] == [
        (2023, "November"),
        (2023, "December"),
        (2024, "January"),
        (2024, "February"),
    ]


def test_single_month_range_walks_once() -> None:
    assert walk_months("June", 2024, "June", 2024) == ((2024, MonthName.JUNE),)


def test_reversed_range_is_rejected() -> None:
    with pytest.raises(InvalidRangeError):
        walk_months("March", 2024, "January", 2024)
    with pytest.raises(InvalidRangeError):
        DateRange.of("January", 2025, "December", 2024)


def test_unknown_month_raises_invalid_month() -> None:
    with pytest.raises(InvalidMonthError):
        walk_months("Smarch", 2024, "March", 2024)


def test_parse_month_ignores_case_and_whitespace() -> None:
    assert parse_month(" february ") is MonthName.FEBRUARY
    assert parse_month(MonthName.MAY) is MonthName.MAY


@pytest.mark.parametrize("value", ["24", "20245", "abcd", True, 3.5])
def test_parse_year_requires_four_digits(value) -> None:
    with pytest.raises(InvalidRangeError):
        parse_year(value)


def test_date_range_label_and_contains() -> None:
    date_range = DateRange.of("january", "2024", "March", 2024)

    assert date_range.label == "January 2024 to March 2024"
    assert date_range.contains(2024, MonthName.FEBRUARY)
    assert not date_range.contains(2024, MonthName.APRIL)
    assert len(date_range.months()) == 3


def test_parse_date_accepts_iso_and_epoch_millis() -> None:
    assert parse_date("2024-03-15") == date(2024, 3, 15)
    assert parse_date("2024-03-15T10:30:00Z") == date(2024, 3, 15)
    assert parse_date(1704067200000) == date(2024, 1, 1)
    with pytest.raises(ValidationError):
        parse_date("next tuesday")
