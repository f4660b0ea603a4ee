"""Mini README: Expense budgets balanced against paid contributions."""

from .ledger import BudgetBalance, BudgetLedger, Expense, ExpensePeriod

__all__ = ["BudgetBalance", "BudgetLedger", "Expense", "ExpensePeriod"]
