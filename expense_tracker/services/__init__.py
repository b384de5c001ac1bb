"""Services package."""

from expense_tracker.services.storage import (
    ExpenseApiStorage,
    ExpenseStorageInterface,
    InMemoryExpenseStorage,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "ExpenseApiStorage",
    "ExpenseStorageInterface",
    "InMemoryExpenseStorage",
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
]
