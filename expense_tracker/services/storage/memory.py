"""
In-Memory Storage

Keeps expenses in process memory and reproduces what the remote API does
server-side: filtering, newest-first ordering and the per-category
monthly totals behind the analytics endpoint.

Used by the test suite and by the app when STORAGE_BACKEND=memory.
"""

from collections import defaultdict
from datetime import date
from typing import Callable, Optional
from uuid import uuid4

from expense_tracker.models.analytics import RawAggregate
from expense_tracker.models.expense import Expense, ExpenseFilters
from expense_tracker.services.storage.interface import (
    ExpenseStorageInterface,
    NotFoundError,
)


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """Expense storage held in a dict keyed by expense id."""

    def __init__(
        self,
        expenses: Optional[list[Expense]] = None,
        today: Callable[[], date] = date.today,
    ):
        self._expenses: dict[str, Expense] = {}
        self._today = today
        for expense in expenses or []:
            self._store(expense)

    def _store(self, expense: Expense) -> Expense:
        stored = expense.model_copy(update={"id": expense.id or uuid4().hex})
        self._expenses[stored.id] = stored
        return stored

    def _matches(self, expense: Expense, filters: ExpenseFilters) -> bool:
        if filters.date_range:
            start = filters.date_range.start_date(self._today())
            if start and expense.expense_date < start:
                return False
        if filters.categories and expense.category not in filters.categories:
            return False
        if filters.payment_modes and expense.payment_mode not in filters.payment_modes:
            return False
        return True

    async def create_expense(self, expense: Expense) -> Expense:
        return self._store(expense.model_copy(update={"id": None}))

    async def list_expenses(
        self,
        filters: Optional[ExpenseFilters] = None,
    ) -> list[Expense]:
        filters = filters or ExpenseFilters()
        matching = [e for e in self._expenses.values() if self._matches(e, filters)]
        return sorted(matching, key=lambda e: e.expense_date, reverse=True)

    async def delete_expense(self, expense_id: str) -> None:
        if expense_id not in self._expenses:
            raise NotFoundError(f"Expense not found: {expense_id}")
        del self._expenses[expense_id]

    async def get_monthly_category_totals(self) -> list[RawAggregate]:
        totals = defaultdict(float)
        for expense in self._expenses.values():
            key = (
                expense.expense_date.year,
                expense.expense_date.month,
                expense.category.value,
            )
            totals[key] += float(expense.amount)

        return [
            RawAggregate(year=year, month=month, category=category, total_amount=amount)
            for (year, month, category), amount in sorted(totals.items())
        ]
