"""
Streamlit Frontend for the Expense Ledger

One screen, mirroring how people actually use an expense tracker:
1. Add an expense (or edit one picked from the list)
2. Pick a time window and, optionally, a category
3. See the total, the category breakdown and the matching expenses

The UI holds no ledger logic: every render asks LedgerFlow for a view.
"""

import asyncio

import plotly.express as px
import streamlit as st

from expense_ledger.config import get_settings
from expense_ledger.errors import ExpenseLedgerError, ExpenseValidationError
from expense_ledger.ledger.dates import format_record_date
from expense_ledger.models.audit import AuditEvent
from expense_ledger.models.expense import (
    ALL_CATEGORIES,
    OTHER_CATEGORY,
    ExpenseRecord,
    LedgerView,
    TimeWindow,
)
from expense_ledger.orchestrator import ExpenseFlow, LedgerFlow, create_app_components


# Page configuration
st.set_page_config(
    page_title="Expense Ledger",
    page_icon="💸",
    layout="centered",
)

FORM_KEYS = ("form_amount", "form_category", "form_note", "form_date")


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
    return create_app_components(use_storage=True)


def init_state():
    settings = get_settings().app
    st.session_state.setdefault("editing_id", None)
    st.session_state.setdefault("time_window", settings.default_time_window.value)
    st.session_state.setdefault("category_filter", ALL_CATEGORIES)
    for key in FORM_KEYS:
        st.session_state.setdefault(key, "")


def apply_pending_form():
    """Copy queued form values into the widgets, before they are drawn."""
    pending = st.session_state.pop("pending_form", None)
    if pending is not None:
        for key, value in zip(FORM_KEYS, pending):
            st.session_state[key] = value


def reset_form():
    st.session_state["editing_id"] = None
    st.session_state["pending_form"] = ("", "", "", "")


def start_editing(record: ExpenseRecord):
    st.session_state["editing_id"] = record.id
    st.session_state["pending_form"] = (
        str(record.amount),
        record.category,
        record.note or "",
        format_record_date(record.date),
    )


def format_amount(amount) -> str:
    symbol = get_settings().app.currency_symbol
    return f"{symbol}{float(amount):,.2f}"


def main():
    """Main application entry point."""
    expense_flow, ledger_flow, _ = get_components()
    init_state()
    apply_pending_form()

    st.title("💸 Expense Ledger")

    render_form(expense_flow)
    st.markdown("---")

    view = render_filters(ledger_flow)
    render_summary(view)
    render_expense_list(expense_flow, view)
    render_activity(expense_flow)


def render_form(expense_flow: ExpenseFlow):
    """Render the add / edit form."""
    editing_id = st.session_state["editing_id"]

    with st.form("expense_form", clear_on_submit=False):
        st.text_input("Amount", key="form_amount", placeholder="e.g. 12.50")
        st.text_input("Category", key="form_category", placeholder="Food, Books, Rent...")
        st.text_input("Note (optional)", key="form_note")
        st.text_input("Date (YYYY-MM-DD)", key="form_date", placeholder="optional")

        col1, col2 = st.columns(2)
        with col1:
            submitted = st.form_submit_button(
                "Save changes" if editing_id is not None else "Add Expense"
            )
        with col2:
            cancelled = st.form_submit_button(
                "Cancel", disabled=editing_id is None
            )

    if editing_id is not None:
        render_history(expense_flow, editing_id)

    if cancelled:
        reset_form()
        st.rerun()

    if submitted:
        try:
            run_async(expense_flow.save_expense(
                raw_amount=st.session_state["form_amount"],
                raw_category=st.session_state["form_category"],
                raw_note=st.session_state["form_note"],
                raw_date=st.session_state["form_date"],
                editing_id=editing_id,
            ))
        except ExpenseValidationError as e:
            st.error(f"❌ {e.issue.message}")
            return
        except ExpenseLedgerError as e:
            st.error(f"❌ Could not save expense: {e}")
            return
        reset_form()
        st.rerun()


def render_filters(ledger_flow: LedgerFlow) -> LedgerView:
    """Render the time window and category selectors, return the view."""
    windows = list(TimeWindow)
    st.radio(
        "Show",
        options=[w.value for w in windows],
        format_func=lambda v: TimeWindow(v).label,
        key="time_window",
        horizontal=True,
    )

    # Categories come from the time-filtered view, not the category-filtered one
    window_view = run_async(ledger_flow.load_view(
        time_window=st.session_state["time_window"],
    ))
    options = [ALL_CATEGORIES] + list(window_view.categories)
    if st.session_state["category_filter"] not in options:
        st.session_state["category_filter"] = ALL_CATEGORIES

    st.selectbox(
        "Category",
        options=options,
        format_func=lambda c: "All categories" if c == ALL_CATEGORIES else c,
        key="category_filter",
    )

    return run_async(ledger_flow.load_view(
        time_window=st.session_state["time_window"],
        category_filter=st.session_state["category_filter"],
    ))


def render_summary(view: LedgerView):
    """Render the total, pie chart and category legend."""
    st.metric(f"Total ({view.window_label})", format_amount(view.visible_total))

    if not view.category_breakdown or view.window_total <= 0:
        st.info("No expenses in this period yet.")
        return

    rows = [row for row in view.category_breakdown if row.total > 0]
    fig = px.pie(
        names=[row.category for row in rows],
        values=[float(row.total) for row in rows],
        hole=0.0,
    )
    fig.update_traces(textinfo="label+percent")
    fig.update_layout(showlegend=False, margin=dict(l=0, r=0, t=0, b=0))
    st.plotly_chart(fig, use_container_width=True)

    st.markdown(f"**By Category ({view.window_label}):**")
    for row in view.category_breakdown:
        st.markdown(f"- {row.category}: {format_amount(row.total)} ({row.share:.1f}%)")


def render_expense_list(expense_flow: ExpenseFlow, view: LedgerView):
    """Render the visible expenses with edit / delete buttons."""
    if not view.records:
        return

    st.markdown("### Expenses")
    for record in view.records:
        col1, col2, col3 = st.columns([6, 1, 1])
        with col1:
            details = f"**{format_amount(record.amount)}** · {record.category or OTHER_CATEGORY}"
            if record.date:
                details += f" · {record.date}"
            if record.note:
                details += f"  \n{record.note}"
            st.markdown(details)
        with col2:
            if st.button("Edit", key=f"edit_{record.id}"):
                start_editing(record)
                st.rerun()
        with col3:
            if st.button("Delete", key=f"delete_{record.id}"):
                run_async(expense_flow.delete_expense(record.id))
                if st.session_state["editing_id"] == record.id:
                    reset_form()
                st.rerun()


def format_event(event: AuditEvent) -> str:
    return f"`{event.timestamp:%Y-%m-%d %H:%M}` {event.description}"


def render_history(expense_flow: ExpenseFlow, expense_id: int):
    """Audit trail of the expense being edited."""
    events = run_async(expense_flow.get_history(expense_id))
    if not events:
        return
    with st.expander("History"):
        for event in events:
            st.markdown(f"- {format_event(event)}")


def render_activity(expense_flow: ExpenseFlow):
    """Most recent adds, edits, deletes and rejected submissions."""
    events = run_async(expense_flow.recent_activity(limit=20))
    if not events:
        return
    with st.expander("Recent activity"):
        for event in events:
            st.markdown(f"- {format_event(event)}")


if __name__ == "__main__":
    main()
