"""Mini README: Year -> month -> bucket ledger of periodic member contributions.

Structure:
    * ContributionRecord - one member's amount and paid flag for a month.
    * MonthBucket - the records of one month plus their running total.
    * MonthTotals / YearTotals - read-only paid/unpaid breakdowns.
    * MonthCreation - outcome of the carry-forward workflow.
    * ContributionLedger - mutation primitives, carry-forward and aggregation.

Every mutation recomputes the bucket total before returning, so
``bucket.total == sum(record.amount)`` holds whenever control leaves the
ledger. Admission consults the ``BlacklistRegistry``; mutations consult the
``AccessPolicy`` last, after input validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Set, Tuple

from ..access import DEFAULT_POLICY, AccessPolicy
from ..dates import MonthKey, MonthName, month_ordinal, parse_month, parse_year
from ..dates.months import MonthLike, YearLike
from ..errors import NotFoundError, ValidationError
from ..logging_utils import get_logger
from ..validation import validate_contribution_amount, validate_name
from .blacklist import BlacklistRegistry

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class ContributionRecord:
    """A member's contribution for one month."""

    name: str
    amount: int
    paid: bool = False

    def carried_forward(self) -> "ContributionRecord":
        """Copy for a new month: same member and amount, not yet paid."""

        return ContributionRecord(name=self.name, amount=self.amount, paid=False)

    def as_dict(self) -> Dict[str, object]:
        return {"name": self.name, "amount": self.amount, "paid": self.paid}


@dataclass(slots=True)
class MonthBucket:
    """Contributions recorded for a single month."""

    contributions: List[ContributionRecord] = field(default_factory=list)
    total: int = 0

    def recompute_total(self) -> int:
        self.total = sum(record.amount for record in self.contributions)
        return self.total

    def member_names(self) -> Set[str]:
        return {record.name for record in self.contributions}

    def find(self, name: str) -> Optional[ContributionRecord]:
        """Return the first record for ``name``, if any."""

        for record in self.contributions:
            if record.name == name:
                return record
        return None

    def as_dict(self) -> Dict[str, object]:
        return {
            "contributions": [record.as_dict() for record in self.contributions],
            "total": self.total,
        }


@dataclass(frozen=True, slots=True)
class MonthTotals:
    total_amount: int
    total_paid: int
    total_unpaid: int


@dataclass(frozen=True, slots=True)
class YearTotals:
    year: int
    total_amount: int
    total_paid: int
    total_unpaid: int
    months_recorded: int


@dataclass(frozen=True, slots=True)
class MonthCreation:
    """Result of ``ContributionLedger.create_month``."""

    year: int
    month: MonthName
    created: bool
    overwritten: bool
    new_members_added: int
    seeded_from: Optional[MonthKey] = None


def _split_paid(records: List[ContributionRecord]) -> Tuple[int, int]:
    paid = sum(record.amount for record in records if record.paid)
    unpaid = sum(record.amount for record in records if not record.paid)
    return paid, unpaid


class ContributionLedger:
    """Own the contribution hierarchy and enforce its invariants."""

    def __init__(
        self,
        data: Optional[Mapping[YearLike, Mapping[MonthLike, MonthBucket]]] = None,
        *,
        blacklist: Optional[BlacklistRegistry] = None,
        policy: AccessPolicy = DEFAULT_POLICY,
    ) -> None:
        self._data: Dict[int, Dict[MonthName, MonthBucket]] = {}
        self.blacklist = blacklist if blacklist is not None else BlacklistRegistry()
        self.policy = policy
        for year, months in (data or {}).items():
            year_key = parse_year(year)
            for month, bucket in months.items():
                bucket.recompute_total()
                self._data.setdefault(year_key, {})[parse_month(month)] = bucket
        LOGGER.debug("Contribution ledger initialised with %s months", sum(1 for _ in self.iter_buckets()))

    def get_bucket(self, year: YearLike, month: MonthLike) -> Optional[MonthBucket]:
        return self._data.get(parse_year(year), {}).get(parse_month(month))

    def month_exists(self, year: YearLike, month: MonthLike) -> bool:
        return self.get_bucket(year, month) is not None

    def years(self) -> List[int]:
        return sorted(self._data)

    def months(self, year: YearLike) -> List[MonthName]:
        """Months recorded for ``year`` in calendar order."""

        return sorted(self._data.get(parse_year(year), {}), key=lambda month: month.position)

    def iter_buckets(self) -> Iterator[Tuple[int, MonthName, MonthBucket]]:
        """Yield ``(year, month, bucket)`` chronologically."""

        for year in self.years():
            for month in self.months(year):
                yield year, month, self._data[year][month]

    def total_paid_income(self) -> int:
        """Sum of every paid contribution across the whole ledger."""

        return sum(
            record.amount
            for _, _, bucket in self.iter_buckets()
            for record in bucket.contributions
            if record.paid
        )

    def _require_bucket(self, year: int, month: MonthName) -> MonthBucket:
        bucket = self._data.get(year, {}).get(month)
        if bucket is None:
            raise NotFoundError(f"No contributions recorded for {month.value} {year}")
        return bucket

    @staticmethod
    def _require_index(bucket: MonthBucket, index: int, year: int, month: MonthName) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise NotFoundError(f"Contribution index must be an integer, got {index!r}")
        if not 0 <= index < len(bucket.contributions):
            raise NotFoundError(
                f"No contribution at position {index} for {month.value} {year}"
            )
        return index

    def _admit(self, name: str) -> None:
        if name in self.blacklist:
            raise ValidationError(f"{name} is blacklisted and cannot make contributions")

    def add_contribution(
        self,
        year: YearLike,
        month: MonthLike,
        name: str,
        amount: object,
        paid: bool = False,
    ) -> ContributionRecord:
        """Append a contribution, creating the month on demand."""

        year_key, month_key = parse_year(year), parse_month(month)
        clean_name = validate_name(name)
        clean_amount = validate_contribution_amount(amount)
        self._admit(clean_name)
        self.policy.require_write("add contributions")

        bucket = self._data.setdefault(year_key, {}).setdefault(month_key, MonthBucket())
        record = ContributionRecord(name=clean_name, amount=clean_amount, paid=bool(paid))
        bucket.contributions.append(record)
        bucket.recompute_total()
        LOGGER.info(
            "Added contribution %s=%s (paid=%s) to %s %s",
            clean_name,
            clean_amount,
            record.paid,
            month_key.value,
            year_key,
        )
        return record

    def edit_contribution(
        self,
        year: YearLike,
        month: MonthLike,
        index: int,
        name: str,
        amount: object,
        paid: bool,
    ) -> ContributionRecord:
        """Replace the fields of an existing record."""

        year_key, month_key = parse_year(year), parse_month(month)
        bucket = self._require_bucket(year_key, month_key)
        position = self._require_index(bucket, index, year_key, month_key)
        clean_name = validate_name(name)
        clean_amount = validate_contribution_amount(amount)
        record = bucket.contributions[position]
        if clean_name != record.name:
            self._admit(clean_name)
        self.policy.require_write("edit contributions")

        record.name = clean_name
        record.amount = clean_amount
        record.paid = bool(paid)
        bucket.recompute_total()
        LOGGER.info("Edited contribution #%s in %s %s", position, month_key.value, year_key)
        return record

    def remove_contribution(self, year: YearLike, month: MonthLike, index: int) -> ContributionRecord:
        year_key, month_key = parse_year(year), parse_month(month)
        bucket = self._require_bucket(year_key, month_key)
        position = self._require_index(bucket, index, year_key, month_key)
        self.policy.require_write("remove contributions")

        removed = bucket.contributions.pop(position)
        bucket.recompute_total()
        LOGGER.info("Removed contribution %s from %s %s", removed.name, month_key.value, year_key)
        return removed

    def toggle_payment_status(self, year: YearLike, month: MonthLike, index: int) -> bool:
        """Flip the paid flag and return the new value."""

        year_key, month_key = parse_year(year), parse_month(month)
        bucket = self._require_bucket(year_key, month_key)
        position = self._require_index(bucket, index, year_key, month_key)
        self.policy.require_write("change payment status")

        record = bucket.contributions[position]
        record.paid = not record.paid
        bucket.recompute_total()
        LOGGER.debug("Toggled %s to paid=%s in %s %s", record.name, record.paid, month_key.value, year_key)
        return record.paid

    def find_previous_month(self, year: YearLike, month: MonthLike) -> Optional[MonthKey]:
        """Key of the latest earlier month holding at least one contribution."""

        target = month_ordinal(parse_year(year), parse_month(month))
        best: Optional[MonthKey] = None
        for year_key, month_key, bucket in self.iter_buckets():
            if month_ordinal(year_key, month_key) >= target:
                break
            if bucket.contributions:
                best = (year_key, month_key)
        return best

    def find_previous_month_data(self, year: YearLike, month: MonthLike) -> Optional[MonthBucket]:
        key = self.find_previous_month(year, month)
        if key is None:
            return None
        return self._data[key[0]][key[1]]

    def _carry(self, source: Optional[MonthBucket], exclude: Set[str]) -> List[ContributionRecord]:
        carried: List[ContributionRecord] = []
        if source is None:
            return carried
        for record in source.contributions:
            if record.name in self.blacklist or record.name in exclude:
                continue
            carried.append(record.carried_forward())
            exclude.add(record.name)
        return carried

    def create_month(
        self,
        year: YearLike,
        month: MonthLike,
        *,
        overwrite: bool = False,
        source: Optional[MonthBucket] = None,
    ) -> MonthCreation:
        """Seed a month from the most recent prior month with data.

        A missing month, or an existing one with ``overwrite=True``, is
        replaced by the carried-forward members (minus blacklisted names, all
        unpaid). An existing month without ``overwrite`` only gains source
        members it does not already list; recorded payments are untouched.
        """

        year_key, month_key = parse_year(year), parse_month(month)
        seeded_from: Optional[MonthKey] = None
        if source is None:
            seeded_from = self.find_previous_month(year_key, month_key)
            if seeded_from is not None:
                source = self._data[seeded_from[0]][seeded_from[1]]
        self.policy.require_write("create months")

        existing = self._data.get(year_key, {}).get(month_key)
        if existing is not None and not overwrite:
            additions = self._carry(source, existing.member_names())
            existing.contributions.extend(additions)
            existing.recompute_total()
            LOGGER.info(
                "Merged %s new members into %s %s", len(additions), month_key.value, year_key
            )
            return MonthCreation(
                year=year_key,
                month=month_key,
                created=False,
                overwritten=False,
                new_members_added=len(additions),
                seeded_from=seeded_from,
            )

        bucket = MonthBucket(contributions=self._carry(source, set()))
        bucket.recompute_total()
        self._data.setdefault(year_key, {})[month_key] = bucket
        LOGGER.info(
            "%s %s %s with %s members",
            "Overwrote" if existing is not None else "Created",
            month_key.value,
            year_key,
            len(bucket.contributions),
        )
        return MonthCreation(
            year=year_key,
            month=month_key,
            created=existing is None,
            overwritten=existing is not None,
            new_members_added=len(bucket.contributions),
            seeded_from=seeded_from,
        )

    def calculate_totals(self, year: YearLike, month: MonthLike) -> MonthTotals:
        bucket = self.get_bucket(year, month)
        if bucket is None:
            return MonthTotals(total_amount=0, total_paid=0, total_unpaid=0)
        paid, unpaid = _split_paid(bucket.contributions)
        return MonthTotals(total_amount=bucket.total, total_paid=paid, total_unpaid=unpaid)

    def calculate_yearly_totals(self, year: YearLike) -> YearTotals:
        year_key = parse_year(year)
        total_paid = total_unpaid = months_recorded = 0
        for month in self.months(year_key):
            paid, unpaid = _split_paid(self._data[year_key][month].contributions)
            total_paid += paid
            total_unpaid += unpaid
            months_recorded += 1
        return YearTotals(
            year=year_key,
            total_amount=total_paid + total_unpaid,
            total_paid=total_paid,
            total_unpaid=total_unpaid,
            months_recorded=months_recorded,
        )

    def export_snapshot(self) -> Dict[str, Dict[str, Dict[str, object]]]:
        """Nested plain-data view keyed by year string and month name."""

        exported: Dict[str, Dict[str, Dict[str, object]]] = {}
        for year, month, bucket in self.iter_buckets():
            exported.setdefault(str(year), {})[month.value] = bucket.as_dict()
        return exported
