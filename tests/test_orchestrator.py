"""
Flow tests against in-memory storage.

Audit logging is captured with a mock logger.
"""

import asyncio
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.models.analytics import Timeframe
from expense_tracker.models.expense import (
    Expense,
    ExpenseCategory,
    ExpenseFilters,
    PaymentMode,
)
from expense_tracker.orchestrator import (
    EXPENSE_ADDED_MESSAGE,
    FORM_HAS_ERRORS_MESSAGE,
    AnalyticsFlow,
    ExpenseEntryFlow,
    ExpenseListFlow,
    create_app_components,
    create_storage,
)
from expense_tracker.services.storage import (
    InMemoryExpenseStorage,
    NotFoundError,
    StorageError,
)
from expense_tracker.validation import ExpenseValidator, FormField


TODAY = date(2024, 5, 17)


def make_expense(amount, category, day, notes="", mode=PaymentMode.UPI):
    return Expense(
        amount=Decimal(str(amount)),
        category=category,
        notes=notes,
        expense_date=day,
        payment_mode=mode,
    )


def logged_event_types(mock_logger):
    calls = (
        mock_logger.debug.call_args_list
        + mock_logger.info.call_args_list
        + mock_logger.warning.call_args_list
        + mock_logger.error.call_args_list
    )
    return [call.kwargs["event_type"] for call in calls]


@pytest.fixture
def mock_logger():
    return MagicMock()


@pytest.fixture
def audit_logger(mock_logger):
    return AuditLogger(logger=mock_logger)


@pytest.fixture
def storage():
    return InMemoryExpenseStorage(
        expenses=[
            make_expense(100, ExpenseCategory.GROCERIES, date(2024, 1, 10), "Vegetables"),
            make_expense(50, ExpenseCategory.TRAVEL, date(2024, 1, 20), "Bus pass"),
            make_expense(200, ExpenseCategory.GROCERIES, date(2024, 2, 5), "Monthly stock-up"),
        ],
        today=lambda: TODAY,
    )


@pytest.fixture
def validator():
    return ExpenseValidator(max_amount=100000, max_notes_length=500, currency_symbol="₹")


class TestExpenseEntryFlow:
    """Tests for the add-expense flow."""

    def test_submit_valid_form(self, storage, validator, audit_logger, mock_logger):
        flow = ExpenseEntryFlow(storage, validator, audit_logger)
        form = (
            flow.new_form(TODAY)
            .change(FormField.AMOUNT, "75", validator)
            .change(FormField.CATEGORY, "Entertainment", validator)
            .change(FormField.NOTES, "Cinema", validator)
        )

        next_form, saved, message = asyncio.run(flow.submit(form))

        assert message == EXPENSE_ADDED_MESSAGE
        assert saved.id
        assert saved.amount == Decimal("75")
        assert next_form.value(FormField.AMOUNT) == ""
        stored = asyncio.run(storage.list_expenses())
        assert saved.id in [e.id for e in stored]
        assert logged_event_types(mock_logger) == ["expense_created"]

    def test_submit_invalid_form_saves_nothing(self, storage, validator, audit_logger, mock_logger):
        flow = ExpenseEntryFlow(storage, validator, audit_logger)
        form = flow.new_form(TODAY).change(FormField.AMOUNT, "150000", validator)

        next_form, saved, message = asyncio.run(flow.submit(form))

        assert saved is None
        assert message == FORM_HAS_ERRORS_MESSAGE
        assert next_form.visible_error(FormField.AMOUNT, validator) == "Amount cannot exceed ₹100,000"
        assert len(asyncio.run(storage.list_expenses())) == 3
        assert logged_event_types(mock_logger) == ["expense_validation_failed"]

    def test_storage_failure_is_audited_and_raised(self, validator, audit_logger, mock_logger):
        storage = MagicMock()
        storage.create_expense = AsyncMock(side_effect=StorageError("server down"))
        flow = ExpenseEntryFlow(storage, validator, audit_logger)
        form = flow.new_form(TODAY).change(FormField.AMOUNT, "10", validator)

        with pytest.raises(StorageError):
            asyncio.run(flow.submit(form))
        assert logged_event_types(mock_logger) == ["expense_create_failed"]

    def test_works_without_audit_logger(self, storage, validator):
        flow = ExpenseEntryFlow(storage, validator)
        form = flow.new_form(TODAY).change(FormField.AMOUNT, "10", validator)
        _, saved, _ = asyncio.run(flow.submit(form))
        assert saved is not None


class TestExpenseListFlow:
    """Tests for listing, searching and deleting."""

    def test_list_applies_search_term(self, storage, audit_logger):
        flow = ExpenseListFlow(storage, audit_logger, debounce_seconds=0)
        listed = asyncio.run(flow.list_expenses(ExpenseFilters(search_term="groceries")))
        assert [e.notes for e in listed] == ["Monthly stock-up", "Vegetables"]

    def test_list_passes_filters_to_storage(self, storage):
        flow = ExpenseListFlow(storage, debounce_seconds=0)
        listed = asyncio.run(flow.list_expenses(
            ExpenseFilters(categories=[ExpenseCategory.TRAVEL])
        ))
        assert [e.notes for e in listed] == ["Bus pass"]

    def test_total_amount(self, storage):
        flow = ExpenseListFlow(storage, debounce_seconds=0)
        listed = asyncio.run(flow.list_expenses())
        assert flow.total_amount(listed) == Decimal("350")
        assert ExpenseListFlow.total_amount([]) == Decimal("0")

    def test_search_is_debounced(self, storage):
        flow = ExpenseListFlow(storage, debounce_seconds=0.01)

        async def scenario():
            first = asyncio.ensure_future(flow.search(ExpenseFilters(search_term="veg")))
            await asyncio.sleep(0)
            second = await flow.search(ExpenseFilters(search_term="bus"))
            return await first, second

        first, second = asyncio.run(scenario())
        assert [e.notes for e in second] == ["Bus pass"]
        assert first == second

    def test_delete(self, storage, audit_logger, mock_logger):
        flow = ExpenseListFlow(storage, audit_logger, debounce_seconds=0)
        target = asyncio.run(storage.list_expenses())[0]
        asyncio.run(flow.delete_expense(target.id))
        remaining = asyncio.run(storage.list_expenses())
        assert target.id not in [e.id for e in remaining]
        assert logged_event_types(mock_logger) == ["expense_deleted"]

    def test_delete_unknown(self, storage, audit_logger, mock_logger):
        flow = ExpenseListFlow(storage, audit_logger, debounce_seconds=0)
        with pytest.raises(NotFoundError):
            asyncio.run(flow.delete_expense("missing"))
        assert logged_event_types(mock_logger) == ["expense_delete_failed"]


class TestAnalyticsFlow:
    """Tests for the analytics flow."""

    def test_load_end_to_end(self, storage, audit_logger, mock_logger):
        flow = AnalyticsFlow(storage, audit_logger)
        result = asyncio.run(flow.load(Timeframe.ALL_TIME))

        assert [b.label for b in result.windowed_series] == ["Jan 2024", "Feb 2024"]
        assert result.stats.grand_total == 350.0
        assert result.stats.average_monthly == 175.0
        assert result.stats.top_category == "Groceries"
        assert result.rankings[0].share_of_total == pytest.approx(300 / 350)
        assert logged_event_types(mock_logger) == ["analytics_computed"]

    def test_switching_timeframe_reuses_series(self, storage):
        flow = AnalyticsFlow(storage)
        series = asyncio.run(flow.fetch_series())
        assert flow.summarize(series, Timeframe.LAST_3_MONTHS).stats.bucket_count == 2
        assert flow.summarize(series, "all").stats.grand_total == 350.0

    def test_empty_store(self):
        flow = AnalyticsFlow(InMemoryExpenseStorage())
        result = asyncio.run(flow.load(Timeframe.LAST_6_MONTHS))
        assert result.has_data is False
        assert result.stats.top_category is None

    def test_custom_categories(self, storage):
        flow = AnalyticsFlow(storage, categories=[ExpenseCategory.TRAVEL, "Groceries"])
        assert flow.categories == ["Travel", "Groceries"]
        result = asyncio.run(flow.load(Timeframe.ALL_TIME))
        assert [r.category for r in result.rankings] == ["Groceries", "Travel"]

    def test_empty_category_list_is_kept(self, storage):
        flow = AnalyticsFlow(storage, categories=[])
        assert flow.categories == []
        result = asyncio.run(flow.load(Timeframe.ALL_TIME))
        assert result.rankings == []
        assert result.stats.top_category is None

    def test_fetch_failure_is_audited_and_raised(self, audit_logger, mock_logger):
        storage = MagicMock()
        storage.get_monthly_category_totals = AsyncMock(side_effect=StorageError("offline"))
        flow = AnalyticsFlow(storage, audit_logger)
        with pytest.raises(StorageError):
            asyncio.run(flow.fetch_series())
        assert logged_event_types(mock_logger) == ["analytics_failed"]


class TestFactories:

    def test_create_storage(self):
        assert isinstance(create_storage("memory"), InMemoryExpenseStorage)
        with pytest.raises(ValueError):
            create_storage("sheets")

    def test_create_app_components(self):
        entry, listing, analytics = create_app_components(storage=InMemoryExpenseStorage())
        assert isinstance(entry, ExpenseEntryFlow)
        assert isinstance(listing, ExpenseListFlow)
        assert isinstance(analytics, AnalyticsFlow)
