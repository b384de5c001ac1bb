"""
Streamlit Frontend for Expense Tracker

Pages:
1. Add Expense - validated entry form
2. Expenses - filter, search and delete recorded expenses
3. Analytics - monthly spending, category breakdown, summary tiles
4. Settings - connection status

The UI only binds fields and renders results; validation, storage and
analytics all live in the expense_tracker package.
"""

import asyncio
from datetime import date

import streamlit as st

from expense_tracker.analytics import (
    AnalyticsError,
    breakdown_rows,
    format_amount,
    series_chart_rows,
)
from expense_tracker.audit import create_correlation_id
from expense_tracker.config import get_settings
from expense_tracker.models.analytics import Timeframe
from expense_tracker.models.expense import (
    DateRange,
    ExpenseCategory,
    ExpenseFilters,
    PaymentMode,
)
from expense_tracker.orchestrator import (
    AnalyticsFlow,
    ExpenseEntryFlow,
    ExpenseListFlow,
    create_app_components,
)
from expense_tracker.services.storage import StorageError
from expense_tracker.validation import FormField


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def main():
    """Main application entry point."""
    entry_flow, list_flow, analytics_flow = get_components()

    st.sidebar.title("💸 Expense Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["➕ Add Expense", "📋 Expenses", "📊 Analytics", "⚙️ Settings"],
        index=0,
    )

    if page == "➕ Add Expense":
        render_add_expense_page(entry_flow)
    elif page == "📋 Expenses":
        render_expenses_page(list_flow)
    elif page == "📊 Analytics":
        render_analytics_page(analytics_flow)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_add_expense_page(entry_flow: ExpenseEntryFlow):
    """Render the add-expense form."""
    st.title("➕ Add Expense")
    validator = entry_flow.validator
    currency = get_settings().app.currency_symbol

    if "expense_form" not in st.session_state:
        st.session_state.expense_form = entry_flow.new_form()
    form = st.session_state.expense_form

    col1, col2 = st.columns(2)

    with col1:
        amount = st.text_input(
            f"Amount ({currency}) *",
            value=str(form.value(FormField.AMOUNT)),
            placeholder="0.00",
        )
        categories = list(ExpenseCategory)
        category = st.selectbox(
            "Category *",
            options=categories,
            index=categories.index(ExpenseCategory(form.value(FormField.CATEGORY))),
            format_func=lambda c: c.value,
        )
        modes = list(PaymentMode)
        payment_mode = st.selectbox(
            "Payment Mode *",
            options=modes,
            index=modes.index(PaymentMode(form.value(FormField.PAYMENT_MODE))),
            format_func=lambda m: m.value,
        )

    with col2:
        expense_date = st.date_input(
            "Date *",
            value=form.value(FormField.DATE) or date.today(),
            max_value=date.today(),
        )
        notes = st.text_area(
            "Notes",
            value=form.value(FormField.NOTES),
            max_chars=validator.max_notes_length,
        )

    edited = {
        FormField.AMOUNT: amount,
        FormField.CATEGORY: category,
        FormField.PAYMENT_MODE: payment_mode,
        FormField.DATE: expense_date,
        FormField.NOTES: notes,
    }
    for field, value in edited.items():
        if value != form.value(field):
            form = form.change(field, value, validator).blur(field)
    st.session_state.expense_form = form

    for field in FormField:
        error = form.visible_error(field, validator)
        if error:
            st.error(error)

    if st.button("Add Expense", type="primary"):
        try:
            form, saved, message = run_async(
                entry_flow.submit(form, correlation_id=create_correlation_id())
            )
        except (StorageError, ValueError) as e:
            st.error(f"Failed to add expense. Please try again. ({e})")
            return
        st.session_state.expense_form = form
        if saved:
            st.success(message)
        else:
            st.warning(message)


def render_expenses_page(list_flow: ExpenseListFlow):
    """Render the expense list with filters, search and delete."""
    st.title("📋 Expenses")
    currency = get_settings().app.currency_symbol

    search_term = st.text_input("Search", placeholder="Search notes, category, payment mode")

    with st.expander("Filters"):
        date_range = st.selectbox(
            "Date Range",
            options=[None] + list(DateRange),
            format_func=lambda r: "All Dates" if r is None else r.value,
        )
        categories = st.multiselect(
            "Categories",
            options=list(ExpenseCategory),
            format_func=lambda c: c.value,
        )
        payment_modes = st.multiselect(
            "Payment Modes",
            options=list(PaymentMode),
            format_func=lambda m: m.value,
        )

    filters = ExpenseFilters(
        date_range=date_range,
        categories=categories,
        payment_modes=payment_modes,
        search_term=search_term,
    )

    try:
        expenses = run_async(list_flow.list_expenses(filters, create_correlation_id()))
    except StorageError as e:
        st.error(f"Failed to load expenses ({e})")
        return

    if not expenses:
        st.info("No expenses found. Try adjusting your filters or add new expenses.")
        return

    st.markdown(
        f"**{len(expenses)} expenses** totalling "
        f"**{format_amount(float(list_flow.total_amount(expenses)), currency)}**"
    )

    for expense in expenses:
        col1, col2, col3, col4 = st.columns([2, 2, 4, 1])
        col1.markdown(f"**{format_amount(float(expense.amount), currency)}**")
        col2.markdown(f"{expense.category.value} · {expense.payment_mode.value}")
        col3.markdown(f"{expense.expense_date.strftime('%d %b %Y')} · {expense.notes}")
        if expense.id and col4.button("🗑️", key=f"delete-{expense.id}"):
            try:
                run_async(list_flow.delete_expense(expense.id))
                st.success("Expense deleted successfully")
                st.rerun()
            except StorageError as e:
                st.error(f"Failed to delete expense ({e})")


def render_analytics_page(analytics_flow: AnalyticsFlow):
    """Render the analytics page."""
    st.title("📊 Expense Analytics")
    st.markdown("Visualize your spending patterns")
    app_settings = get_settings().app
    currency = app_settings.currency_symbol

    timeframes = [Timeframe.LAST_3_MONTHS, Timeframe.LAST_6_MONTHS, Timeframe.ALL_TIME]
    timeframe = st.selectbox(
        "Timeframe",
        options=timeframes,
        index=timeframes.index(Timeframe(app_settings.default_timeframe)),
        format_func=lambda t: t.display_name,
    )

    try:
        series = run_async(analytics_flow.fetch_series(create_correlation_id()))
    except (StorageError, AnalyticsError) as e:
        st.error(f"Failed to load analytics ({e})")
        return

    result = analytics_flow.summarize(series, timeframe)

    if not result.has_data:
        st.info("No data available. Start adding some expenses to see your analytics.")
        return

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("📅 Monthly Expenses")
        rows = series_chart_rows(result.windowed_series, analytics_flow.categories)
        st.bar_chart(
            rows,
            x="label",
            y=analytics_flow.categories,
        )

    with col2:
        st.subheader("Category Breakdown")
        st.markdown(f"**Total: {format_amount(result.stats.grand_total, currency)}**")
        for row in breakdown_rows(result.rankings):
            st.markdown(
                f"{row['category']}: {format_amount(row['total'], currency)} "
                f"({row['percent']:.1f}%)"
            )

    tile1, tile2, tile3 = st.columns(3)
    tile1.metric("Average Monthly", format_amount(result.stats.average_monthly, currency, 0))
    tile2.metric("Highest Category", result.stats.top_category or "None")
    tile3.metric("Total Expenses", format_amount(result.stats.grand_total, currency))


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    from expense_tracker.config import validate_all_settings

    status = validate_all_settings()

    for name, key in [("Expenses API", "api"), ("Application", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Not configured')}")

    settings = get_settings()
    st.markdown(f"**Storage backend:** {settings.app.storage_backend}")
    st.markdown(f"**API URL:** {settings.api.base_url}")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "API settings use the `EXPENSE_API_` prefix."
    )


if __name__ == "__main__":
    main()
