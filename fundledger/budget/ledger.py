"""Mini README: Per-user expense ledger and the income-based balance.

Structure:
    * ExpensePeriod - filter presets (all, current month, current year, range).
    * Expense - dataclass storing an expense and its serialisable view.
    * BudgetBalance - income, expenses and what remains.
    * BudgetLedger - CRUD over expenses plus pure read-side filters.

The budget is not a separate allocation: income is the sum of every paid
contribution in the whole contribution ledger (not date-scoped), and the
balance is that income minus all recorded expenses.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional

from ..access import DEFAULT_POLICY, AccessPolicy
from ..dates import parse_date
from ..errors import NotFoundError, ValidationError
from ..identifiers import IdentifierSequence, sequence_of
from ..logging_utils import get_logger
from ..validation import round_money, validate_positive_amount, validate_text

if TYPE_CHECKING:
    from ..contributions import ContributionLedger

LOGGER = get_logger(__name__)


class ExpensePeriod(str, Enum):
    """Preset windows for expense filtering."""

    ALL = "all"
    CURRENT_MONTH = "current-month"
    CURRENT_YEAR = "current-year"
    DATE_RANGE = "date-range"

    @classmethod
    def from_str(cls, value: str) -> "ExpensePeriod":
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError) as error:
            raise ValidationError(f"Unsupported expense period: {value}") from error


@dataclass(slots=True)
class Expense:
    """A single expense owned by one user's budget."""

    expense_id: str
    amount: float
    category: str
    spent_on: date
    description: str = ""

    def as_dict(self) -> Dict[str, object]:
        return {
            "expense_id": self.expense_id,
            "amount": self.amount,
            "category": self.category,
            "spent_on": self.spent_on.isoformat(),
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class BudgetBalance:
    total_income: float
    total_expenses: float
    remaining: float

    @property
    def percentage_used(self) -> float:
        """Share of income spent, capped at 100 for display."""

        if self.total_income <= 0:
            return 0.0
        return min(self.total_expenses / self.total_income * 100, 100.0)


class BudgetLedger:
    """Manage one user's expenses."""

    def __init__(
        self,
        owner: str,
        expenses: Optional[Iterable[Expense]] = None,
        *,
        clock: Callable[[], date] = date.today,
        policy: AccessPolicy = DEFAULT_POLICY,
    ) -> None:
        self.owner = owner
        self._expenses: Dict[str, Expense] = {}
        self._ids = IdentifierSequence("exp")
        self._clock = clock
        self.policy = policy
        for expense in expenses or ():
            self._register(expense)
        LOGGER.debug("Budget ledger for %s initialised with %s expenses", owner, len(self._expenses))

    def _register(self, expense: Expense) -> None:
        if expense.expense_id in self._expenses:
            raise ValidationError(f"Expense {expense.expense_id} already exists.")
        self._expenses[expense.expense_id] = expense
        self._ids.observe(expense.expense_id)

    def _clean(self, amount: object, category: str, expense_date: Optional[object]):
        clean_amount = validate_positive_amount(amount, "Expense amount")
        clean_category = validate_text(category, "Expense category")
        spent_on = parse_date(expense_date) if expense_date else self._clock()
        return clean_amount, clean_category, spent_on

    def add_expense(
        self,
        amount: object,
        category: str,
        expense_date: Optional[object] = None,
        description: str = "",
    ) -> str:
        """Record an expense (dated today when no date is given)."""

        clean_amount, clean_category, spent_on = self._clean(amount, category, expense_date)
        self.policy.require_write("add expenses")

        expense = Expense(
            expense_id=self._ids.next(),
            amount=clean_amount,
            category=clean_category,
            spent_on=spent_on,
            description=description or "",
        )
        self._expenses[expense.expense_id] = expense
        LOGGER.info(
            "Added expense %s for %s: %s in %s", expense.expense_id, self.owner, clean_amount, clean_category
        )
        return expense.expense_id

    def update_expense(
        self,
        expense_id: str,
        amount: object,
        category: str,
        expense_date: Optional[object] = None,
        description: str = "",
    ) -> Expense:
        expense = self.get_expense(expense_id)
        clean_amount, clean_category, spent_on = self._clean(amount, category, expense_date)
        self.policy.require_write("update expenses")

        expense.amount = clean_amount
        expense.category = clean_category
        expense.spent_on = spent_on
        expense.description = description or ""
        LOGGER.info("Updated expense %s for %s", expense_id, self.owner)
        return expense

    def remove_expense(self, expense_id: str) -> Expense:
        self.get_expense(expense_id)
        self.policy.require_write("remove expenses")
        LOGGER.info("Removed expense %s for %s", expense_id, self.owner)
        return self._expenses.pop(expense_id)

    def get_expense(self, expense_id: str) -> Expense:
        if expense_id not in self._expenses:
            raise NotFoundError(f"Expense {expense_id} not found")
        return self._expenses[expense_id]

    def list_expenses(self) -> List[Expense]:
        """Return expenses ordered by most recent date first."""

        return sorted(
            self._expenses.values(),
            key=lambda expense: (expense.spent_on, sequence_of(expense.expense_id)),
            reverse=True,
        )

    def total_expenses(self) -> float:
        return round_money(sum(expense.amount for expense in self._expenses.values()))

    def calculate_from_income(self, contributions: "ContributionLedger") -> BudgetBalance:
        total_income = contributions.total_paid_income()
        total_expenses = self.total_expenses()
        return BudgetBalance(
            total_income=total_income,
            total_expenses=total_expenses,
            remaining=round_money(total_income - total_expenses),
        )

    def filter_expenses(
        self,
        period: ExpensePeriod = ExpensePeriod.ALL,
        *,
        category: Optional[str] = None,
        start: Optional[object] = None,
        end: Optional[object] = None,
        today: Optional[date] = None,
    ) -> List[Expense]:
        """Filter expenses by period and optional category, newest first."""

        if not isinstance(period, ExpensePeriod):
            period = ExpensePeriod.from_str(str(period))
        reference = today or self._clock()
        expenses = self.list_expenses()

        if period is ExpensePeriod.CURRENT_MONTH:
            expenses = [
                e
                for e in expenses
                if (e.spent_on.year, e.spent_on.month) == (reference.year, reference.month)
            ]
        elif period is ExpensePeriod.CURRENT_YEAR:
            expenses = [e for e in expenses if e.spent_on.year == reference.year]
        elif period is ExpensePeriod.DATE_RANGE:
            if start is None or end is None:
                raise ValidationError("A date-range filter needs both start and end dates")
            start_day, end_day = parse_date(start), parse_date(end)
            if end_day < start_day:
                raise ValidationError("End date must not be before start date")
            expenses = [e for e in expenses if start_day <= e.spent_on <= end_day]

        if category:
            expenses = [e for e in expenses if e.category == category]
        return expenses

    @staticmethod
    def totals_by_category(expenses: Iterable[Expense]) -> Dict[str, float]:
        """Sum amounts per category, categories in alphabetical order."""

        totals: Dict[str, float] = {}
        for expense in expenses:
            totals[expense.category] = round_money(totals.get(expense.category, 0.0) + expense.amount)
        return dict(sorted(totals.items()))
