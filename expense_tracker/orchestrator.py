"""
Main Orchestrator for Expense Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Expense entry (form → validate → save)
2. Expense list (filters → fetch → search → delete)
3. Analytics (fetch monthly totals → aggregate → summarize)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is saved unless the whole form validates
- Analytics are recomputed from fetched data, never cached
- Every user action is audited

Failures from storage are audited and re-raised; turning them into
messages for the user is the UI's job.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union
from uuid import UUID

from expense_tracker.analytics import aggregate, summarize
from expense_tracker.audit import AuditLogger, configure_logging, create_correlation_id
from expense_tracker.config import get_settings
from expense_tracker.models.analytics import AnalyticsSummary, MonthBucket, Timeframe
from expense_tracker.models.expense import Expense, ExpenseCategory, ExpenseFilters
from expense_tracker.queries import DebouncedCall, filter_expenses
from expense_tracker.services.storage import (
    ExpenseApiStorage,
    ExpenseStorageInterface,
    InMemoryExpenseStorage,
)
from expense_tracker.validation import ExpenseFormState, ExpenseValidator


FORM_HAS_ERRORS_MESSAGE = "Please fix the errors in the form"
EXPENSE_ADDED_MESSAGE = "Expense added successfully!"


class ExpenseEntryFlow:
    """
    Orchestrates the add-expense form.

    Flow:
    1. new_form() → initial form state
    2. UI applies change()/blur() as the user edits
    3. submit() → touch every field, validate, save
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self.validator = validator or ExpenseValidator()
        self._audit_logger = audit_logger

    def new_form(self, today: Optional[date] = None) -> ExpenseFormState:
        return ExpenseFormState.initial(self.validator, today)

    async def submit(
        self,
        form: ExpenseFormState,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[ExpenseFormState, Optional[Expense], str]:
        """
        Validate and save the form.

        Returns:
            (next_form_state, saved_expense_or_None, message)

        An invalid form comes back with every field touched so all
        errors become visible. A saved expense comes back with a fresh form.

        Raises:
            StorageError: If the expense could not be saved
        """
        correlation_id = correlation_id or create_correlation_id()
        form = form.touch_all()

        if not form.is_valid:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    errors=form.errors(self.validator),
                    correlation_id=correlation_id,
                )
            return form, None, FORM_HAS_ERRORS_MESSAGE

        try:
            saved = await self._storage.create_expense(form.to_expense())
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_expense_create_failed(
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_expense_created(
                expense_id=saved.id,
                category=saved.category.value,
                amount=str(saved.amount),
                correlation_id=correlation_id,
            )

        return self.new_form(), saved, EXPENSE_ADDED_MESSAGE


class ExpenseListFlow:
    """
    Orchestrates the expense list.

    Storage applies date range, category and payment mode filters;
    the search term is applied here on the fetched records.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        if debounce_seconds is None:
            debounce_seconds = get_settings().app.search_debounce_seconds
        self._debounced_list = DebouncedCall(self.list_expenses, debounce_seconds)

    async def list_expenses(
        self,
        filters: Optional[ExpenseFilters] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[Expense]:
        """Fetch expenses matching the filters, then apply the search term."""
        filters = filters or ExpenseFilters()

        try:
            fetched = await self._storage.list_expenses(filters)
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_expenses_list_failed(
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        expenses = filter_expenses(fetched, filters.search_term)

        if self._audit_logger:
            await self._audit_logger.log_expenses_listed(
                result_count=len(expenses),
                filters=filters.model_dump(mode="json"),
                correlation_id=correlation_id,
            )
        return expenses

    async def search(self, filters: ExpenseFilters) -> Optional[list[Expense]]:
        """
        Debounced list_expenses().

        A newer search issued during the quiet period supersedes this one;
        every caller then receives the newest settled result.
        """
        self._debounced_list.schedule(filters)
        return await self._debounced_list.settled()

    def cancel_search(self) -> None:
        self._debounced_list.cancel()

    async def delete_expense(
        self,
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Delete an expense.

        Raises:
            NotFoundError: If storage has no such expense
            StorageError: If the delete failed
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            await self._storage.delete_expense(expense_id)
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_expense_delete_failed(
                    expense_id=expense_id,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_expense_deleted(
                expense_id=expense_id,
                correlation_id=correlation_id,
            )

    @staticmethod
    def total_amount(expenses: Iterable[Expense]) -> Decimal:
        """Sum of the listed expenses."""
        return sum((expense.amount for expense in expenses), Decimal("0"))


class AnalyticsFlow:
    """
    Orchestrates the analytics page.

    The monthly series is fetched once per page load; switching the
    timeframe only re-runs summarize() on that series.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        categories: Optional[Sequence[Union[ExpenseCategory, str]]] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        if categories is None:
            categories = list(ExpenseCategory)
        self.categories = [getattr(category, "value", category) for category in categories]

    async def fetch_series(
        self,
        correlation_id: Optional[UUID] = None,
    ) -> list[MonthBucket]:
        """
        Fetch per-category monthly totals and aggregate them.

        Raises:
            StorageError: If the totals could not be fetched
            InvalidAggregateError: If a total is malformed
        """
        try:
            records = await self._storage.get_monthly_category_totals()
            return aggregate(records)
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_analytics_failed(
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

    def summarize(
        self,
        series: Sequence[MonthBucket],
        timeframe: Union[Timeframe, str],
    ) -> AnalyticsSummary:
        return summarize(series, timeframe, self.categories)

    async def load(
        self,
        timeframe: Union[Timeframe, str],
        correlation_id: Optional[UUID] = None,
    ) -> AnalyticsSummary:
        """Fetch, aggregate and summarize in one step."""
        correlation_id = correlation_id or create_correlation_id()
        series = await self.fetch_series(correlation_id)
        result = self.summarize(series, timeframe)

        if self._audit_logger:
            await self._audit_logger.log_analytics_computed(
                timeframe=result.timeframe.value,
                bucket_count=result.stats.bucket_count,
                grand_total=result.stats.grand_total,
                correlation_id=correlation_id,
            )
        return result


def create_storage(backend: Optional[str] = None) -> ExpenseStorageInterface:
    """Build the storage selected by configuration (``api`` or ``memory``)."""
    backend = backend or get_settings().app.storage_backend
    if backend == "memory":
        return InMemoryExpenseStorage()
    if backend == "api":
        return ExpenseApiStorage()
    raise ValueError(f"Unknown storage backend: {backend!r}")


def create_app_components(
    storage: Optional[ExpenseStorageInterface] = None,
) -> tuple[ExpenseEntryFlow, ExpenseListFlow, AnalyticsFlow]:
    """
    Factory function to create all application components.

    Args:
        storage: Storage to use; defaults to the configured backend

    Returns:
        (entry_flow, list_flow, analytics_flow)
    """
    app_settings = get_settings().app
    configure_logging(app_settings.log_level)

    storage = storage or create_storage(app_settings.storage_backend)
    audit_logger = AuditLogger()

    entry_flow = ExpenseEntryFlow(storage=storage, audit_logger=audit_logger)
    list_flow = ExpenseListFlow(
        storage=storage,
        audit_logger=audit_logger,
        debounce_seconds=app_settings.search_debounce_seconds,
    )
    analytics_flow = AnalyticsFlow(storage=storage, audit_logger=audit_logger)

    return entry_flow, list_flow, analytics_flow
