"""
Streamlit Frontend for Expense Tracker

The screen users interact with daily: totals at the top, the expense
list below, and a form to add a new expense.

DESIGN PRINCIPLES:
1. The UI owns no business logic; the store validates authoritatively
2. Deleting always asks for confirmation
3. Every store error is shown, none are swallowed
4. Refresh re-reads storage
"""

import asyncio
import html
from datetime import date

import streamlit as st

from expense_tracker.audit import create_correlation_id
from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.models.expense import ExpenseCategory, ExpenseInput
from expense_tracker.orchestrator import create_app_components
from expense_tracker.presentation import (
    auto_format_date_input,
    category_color,
    category_emoji,
    format_amount,
    format_date,
    today_input_date,
)
from expense_tracker.services.storage import StorageReadError, StorageWriteError
from expense_tracker.store import ExpenseStore
from expense_tracker.validation import ExpenseValidationError


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💰",
    layout="centered",
)

st.markdown("""
<style>
    .stat-card {
        padding: 16px;
        background-color: #4F46E5;
        border-radius: 16px;
        color: #FFFFFF;
        margin-bottom: 10px;
    }
    .stat-label { font-size: 0.9em; color: #C7D2FE; }
    .stat-amount { font-size: 1.6em; font-weight: 700; }
    .stat-count { font-size: 0.8em; color: #C7D2FE; }
    .expense-card {
        padding: 12px 16px;
        background-color: #FFFFFF;
        border-radius: 16px;
        border-left: 5px solid var(--accent);
        margin: 6px 0;
    }
</style>
""", unsafe_allow_html=True)


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


def load_expenses(store: ExpenseStore) -> None:
    """Re-read storage, reporting unreadable data as a non-fatal notice."""
    try:
        run_async(store.load(correlation_id=create_correlation_id()))
    except StorageReadError as e:
        st.warning(f"Saved expenses could not be read, starting with an empty list. ({e})")


def check_settings() -> None:
    """Stop with a readable message if configuration is invalid."""
    status = validate_all_settings()

    failed = False
    for name, key in (("Storage settings", "storage"), ("App settings", "app")):
        if not status.get(key, False):
            st.error(f"❌ {name}: {status.get(f'{key}_error', 'invalid')}")
            failed = True
    if failed:
        st.stop()


def main():
    """Main application entry point."""
    check_settings()

    store, audit_logger = get_components()
    symbol = get_settings().app.currency_symbol

    if "loaded" not in st.session_state:
        load_expenses(store)
        st.session_state.loaded = True
    if "pending_delete" not in st.session_state:
        st.session_state.pending_delete = None

    header, refresh = st.columns([4, 1])
    with header:
        st.title("Expense Tracker")
    with refresh:
        if st.button("🔄 Refresh"):
            load_expenses(store)

    delete_error = st.session_state.pop("delete_error", None)
    if delete_error:
        st.error(delete_error)

    render_stats(store, symbol)
    render_add_form(store)
    render_expense_list(store, symbol)

    with st.sidebar:
        st.markdown("### Recent activity")
        for event in audit_logger.recent_events[:10]:
            st.caption(f"{event.timestamp:%H:%M:%S} · {event.description}")


def render_stats(store: ExpenseStore, symbol: str):
    """Render the total / this-month cards."""
    if len(store) == 0:
        return

    stats = store.stats()
    col1, col2 = st.columns(2)
    with col1:
        st.markdown(f"""
        <div class="stat-card">
            <div class="stat-label">Total Spent</div>
            <div class="stat-amount">{format_amount(stats.total, symbol)}</div>
            <div class="stat-count">{stats.count} expenses</div>
        </div>
        """, unsafe_allow_html=True)
    with col2:
        st.markdown(f"""
        <div class="stat-card">
            <div class="stat-label">This Month</div>
            <div class="stat-amount">{format_amount(stats.monthly_total, symbol)}</div>
            <div class="stat-count">{stats.monthly_count} expenses</div>
        </div>
        """, unsafe_allow_html=True)

    with st.expander("📊 By category"):
        for item in store.category_breakdown():
            st.markdown(
                f"{category_emoji(item.category)} **{item.category}**: "
                f"{format_amount(item.total, symbol)} ({item.count})"
            )


def render_add_form(store: ExpenseStore):
    """Render the add-expense form."""
    categories = [c.value for c in ExpenseCategory]

    if "form_date" not in st.session_state:
        st.session_state.form_date = ""

    with st.expander("➕ Add New Expense", expanded=len(store) == 0):
        if st.button("📅 Today"):
            st.session_state.form_date = today_input_date()

        with st.form("add_expense", clear_on_submit=True):
            amount = st.text_input("Amount *", placeholder="0.00")
            category = st.selectbox(
                "Category *",
                options=categories,
                format_func=lambda c: f"{category_emoji(c)} {c}",
            )
            custom_category = st.text_input(
                "Custom Category",
                placeholder="Enter custom category (used with Other)",
            )
            date_text = st.text_input(
                "Date *",
                key="form_date",
                placeholder="MM/DD/YYYY",
            )
            description = st.text_area("Description", placeholder="Optional note")

            submitted = st.form_submit_button("Save Expense", type="primary")

        if submitted:
            if category == ExpenseCategory.OTHER.value and custom_category.strip():
                category = custom_category

            candidate = ExpenseInput(
                amount=amount,
                category=category,
                date=auto_format_date_input(date_text),
                description=description,
            )
            try:
                expense = run_async(
                    store.append(candidate, correlation_id=create_correlation_id())
                )
                st.success(f"Saved {expense.category} expense.")
            except ExpenseValidationError as e:
                st.error("\n".join(issue.message for issue in e.issues))
            except StorageWriteError as e:
                st.error(f"Failed to save expenses: {e}")


def render_expense_list(store: ExpenseStore, symbol: str):
    """Render the expense list with confirmed delete."""
    expenses = store.snapshot()

    if not expenses:
        st.markdown("### 👛 No expenses yet")
        st.markdown("Start tracking your expenses by adding your first entry.")
        return

    today = date.today()
    for expense in expenses:
        info, amount_col = st.columns([4, 1])
        with info:
            # Category, date and description are free text from the user
            description = (
                f"<br><small>{html.escape(expense.description)}</small>"
                if expense.description else ""
            )
            st.markdown(f"""
            <div class="expense-card" style="--accent: {category_color(expense.category)}">
                {category_emoji(expense.category)} <strong>{html.escape(expense.category)}</strong>
                <br><small>{html.escape(format_date(expense.date, today))}</small>{description}
            </div>
            """, unsafe_allow_html=True)
        with amount_col:
            st.markdown(f"**{format_amount(expense.amount, symbol)}**")
            if st.button("🗑️", key=f"delete_{expense.id}"):
                st.session_state.pending_delete = expense.id

        if st.session_state.pending_delete == expense.id:
            st.warning("Are you sure you want to delete this expense?")
            confirm, cancel = st.columns(2)
            with confirm:
                if st.button("Delete", key=f"confirm_{expense.id}", type="primary"):
                    try:
                        run_async(
                            store.remove(expense.id, correlation_id=create_correlation_id())
                        )
                    except StorageWriteError as e:
                        # Shown after the rerun below
                        st.session_state.delete_error = f"Failed to save expenses: {e}"
                    st.session_state.pending_delete = None
                    st.rerun()
            with cancel:
                if st.button("Cancel", key=f"cancel_{expense.id}"):
                    st.session_state.pending_delete = None
                    st.rerun()


if __name__ == "__main__":
    main()
