"""
Expense List Search

The search box filters the fetched list client-side. Refetches triggered
by typing are debounced: each keystroke cancels the pending fetch and
schedules a new one, so only the last settled query reaches the list.
"""

import asyncio
from typing import Any, Awaitable, Callable, Generic, Iterable, Optional, TypeVar

from expense_tracker.models.expense import Expense


T = TypeVar("T")


def filter_expenses(expenses: Iterable[Expense], term: str) -> list[Expense]:
    """Keep the expenses whose notes, category or payment mode contain ``term``."""
    return [expense for expense in expenses if expense.matches_search(term)]


class DebouncedCall(Generic[T]):
    """
    Cancellable, delayed call of an async function.

    Usage:
        debounced = DebouncedCall(storage_search, delay_seconds=0.5)
        debounced.schedule("gro")
        debounced.schedule("groceries")   # cancels the "gro" call
        result = await debounced.settled()
    """

    def __init__(
        self,
        func: Callable[..., Awaitable[T]],
        delay_seconds: float,
    ):
        self._func = func
        self._delay = delay_seconds
        self._pending: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def _fire(self, args: tuple, kwargs: dict) -> T:
        await asyncio.sleep(self._delay)
        return await self._func(*args, **kwargs)

    def schedule(self, *args: Any, **kwargs: Any) -> asyncio.Task:
        """
        Schedule a call after the quiet period, cancelling any pending one.

        Must be called from inside a running event loop.
        """
        self.cancel()
        self._pending = asyncio.ensure_future(self._fire(args, kwargs))
        return self._pending

    def cancel(self) -> None:
        if self.pending:
            self._pending.cancel()

    async def settled(self) -> Optional[T]:
        """
        Wait for the most recently scheduled call and return its result.

        Calls scheduled while waiting replace the one being awaited.
        Returns None if nothing was scheduled or the last call was cancelled.
        Exceptions raised by the call propagate.
        """
        while self._pending is not None:
            task = self._pending
            await asyncio.wait({task})
            if task is not self._pending:
                continue
            if task.cancelled():
                return None
            return task.result()
        return None
