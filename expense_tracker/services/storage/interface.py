"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the expense store.
This allows us to:
1. Talk to the remote expenses API in production
2. Use in-memory storage for testing and offline use
3. Keep flows and analytics decoupled from the transport

The interface is intentionally small - just the operations the
expense form, the expense list and the analytics page need.
"""

from abc import ABC, abstractmethod
from typing import Optional

from expense_tracker.models.analytics import RawAggregate
from expense_tracker.models.expense import Expense, ExpenseFilters


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation (remote API, in-memory, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def create_expense(self, expense: Expense) -> Expense:
        """
        Save a new expense.

        Args:
            expense: The expense to save (its id is ignored)

        Returns:
            The stored expense, with the id assigned by storage

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def list_expenses(
        self,
        filters: Optional[ExpenseFilters] = None,
    ) -> list[Expense]:
        """
        List expenses matching the storage-side filters.

        Only date_range, categories and payment_modes are applied here;
        search_term is a client-side concern.

        Args:
            filters: Filters to apply (None means everything)

        Returns:
            Matching expenses, newest first
        """
        pass

    @abstractmethod
    async def delete_expense(self, expense_id: str) -> None:
        """
        Delete an expense by ID.

        Raises:
            NotFoundError: If no expense has that ID
            StorageError: If delete fails
        """
        pass

    @abstractmethod
    async def get_monthly_category_totals(self) -> list[RawAggregate]:
        """
        Per-category spending totals for every month with expenses.

        Returns:
            One RawAggregate per (year, month, category) reported by storage
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class StorageConnectionError(StorageError):
    """Storage backend could not be reached or did not answer."""
    pass
