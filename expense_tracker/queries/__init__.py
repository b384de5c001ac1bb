"""Expense list querying package."""

from expense_tracker.queries.search import DebouncedCall, filter_expenses

__all__ = ["DebouncedCall", "filter_expenses"]
