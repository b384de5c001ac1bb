"""
Storage Services Package

Provides the abstract expense store and its implementations:
the remote expenses API and an in-memory store.
"""

from expense_tracker.services.storage.interface import (
    ExpenseStorageInterface,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)
from expense_tracker.services.storage.http_api import ExpenseApiStorage
from expense_tracker.services.storage.memory import InMemoryExpenseStorage

__all__ = [
    # Interfaces
    "ExpenseStorageInterface",
    # Exceptions
    "NotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "ExpenseApiStorage",
    "InMemoryExpenseStorage",
]
