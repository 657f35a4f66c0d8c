"""Streamlit budget dashboard for ClearCents.

Shows the budget overview for one user and period, and lets the user add
categories, set budgets and delete custom categories.  Plan limits and
protected categories surface as warnings instead of failing the page.

To run the dashboard from the command line::

    streamlit run clearcents/dashboard.py
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import date
from typing import Callable, Optional

import streamlit as st

# Support both ``streamlit run clearcents/dashboard.py`` and package imports.
if __package__:
    from . import config
    from . import visualization as viz
    from .errors import ClearCentsError, LimitReachedError
    from .formatting import escape_dollar_for_markdown, format_currency, format_percentage
    from .limits import PLAN_TIERS
    from .models import Period
    from .service import BudgetService
    from .transactions import (
        KIND_ALL, KIND_EXPENSE, KIND_INCOME, filter_transactions, sort_transactions, transaction_summary,
    )
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from clearcents import config  # type: ignore
    from clearcents import visualization as viz  # type: ignore
    from clearcents.errors import ClearCentsError, LimitReachedError  # type: ignore
    from clearcents.formatting import escape_dollar_for_markdown, format_currency, format_percentage  # type: ignore
    from clearcents.limits import PLAN_TIERS  # type: ignore
    from clearcents.models import Period  # type: ignore
    from clearcents.service import BudgetService  # type: ignore
    from clearcents.transactions import (  # type: ignore
        KIND_ALL, KIND_EXPENSE, KIND_INCOME, filter_transactions, sort_transactions, transaction_summary,
    )


@st.cache_resource
def get_service(tier: str) -> BudgetService:
    service = BudgetService(tier=tier)
    service.store.init_db()
    return service


def _done(message: str) -> None:
    """Remember a success message and redraw the page with fresh data."""
    st.session_state['flash'] = message
    st.rerun()


def _apply(action: Callable[[], object], success: str) -> None:
    """Run a write; plan limits show as a warning and other errors as an error."""
    try:
        action()
    except LimitReachedError as exc:
        st.warning(f"⚠️ {exc.limit.message}")
    except ClearCentsError as exc:
        st.error(str(exc))
    else:
        _done(success)


def _submit_transaction(
    service: BudgetService,
    user_id: str,
    kind: str,
    amount: float,
    when: date,
    category_id: Optional[int],
    description: str,
) -> None:
    if amount <= 0:
        st.error("Amount must be greater than zero")
        return
    signed = -amount if kind == KIND_EXPENSE else amount
    _apply(
        lambda: service.add_transaction(
            user_id, signed, when, category_id=category_id, description=description
        ),
        f"Added {format_currency(signed)} on {when.isoformat()}",
    )


def _render_summary(overview) -> None:
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Budgeted", format_currency(overview.total_budgeted))
    col2.metric("Spent", format_currency(overview.total_spent))
    col3.metric("Remaining", format_currency(overview.remaining))
    col4.metric("Used", format_percentage(overview.overall_percentage))
    period_name = overview.period.value if overview.period is not None else Period.MONTHLY.value
    st.caption(
        f"All budgets expressed {period_name}: {escape_dollar_for_markdown(overview.budgeted_in_period)}"
    )
    if overview.remaining < 0:
        st.warning(f"Over budget by {escape_dollar_for_markdown(-overview.remaining)}")


def _render_category_forms(service: BudgetService, user_id: str, categories) -> None:
    with st.expander("Add category"):
        with st.form("add_category", clear_on_submit=True):
            name = st.text_input("Name")
            icon = st.text_input("Icon", value="smile")
            color = st.color_picker("Colour", value="#4ECDC4")
            if st.form_submit_button("Create"):
                _apply(
                    lambda: service.add_category(user_id, name, icon=icon, color=color),
                    f"Category '{name.strip()}' created",
                )

    if not categories:
        return

    by_name = {c.name: c for c in categories}
    with st.expander("Set budget"):
        with st.form("set_budget"):
            choice = st.selectbox("Category", list(by_name))
            amount = st.number_input("Amount", min_value=0.0, step=10.0)
            period = st.selectbox("Period", [p.value for p in Period], index=1)
            if st.form_submit_button("Save budget"):
                _apply(
                    lambda: service.set_budget(user_id, by_name[choice].id, amount, period),
                    f"Budget saved for '{choice}'",
                )

    custom = [c.name for c in categories if c.is_custom]
    with st.expander("Delete category"):
        if not custom:
            st.info("Predefined categories cannot be deleted.")
            return
        choice = st.selectbox("Custom category", custom, key="delete_choice")
        st.caption("Deleting a category also deletes its budget and all of its transactions.")
        if st.button("Delete", type="primary"):
            _apply(lambda: service.remove_category(by_name[choice].id), f"Deleted '{choice}'")


def _render_transaction_form(service: BudgetService, user_id: str, categories) -> None:
    uncategorised = "Uncategorised"
    by_name = {c.name: c for c in categories}
    with st.expander("Add transaction"):
        with st.form("add_transaction", clear_on_submit=True):
            col1, col2 = st.columns(2)
            kind = col1.radio("Type", [KIND_EXPENSE, KIND_INCOME], horizontal=True)
            when = col2.date_input("Date", value=date.today())
            amount = col1.number_input("Amount", min_value=0.0, step=5.0)
            choice = col2.selectbox("Category", [uncategorised] + list(by_name))
            description = st.text_input("Description")
            if st.form_submit_button("Add"):
                category = by_name.get(choice)
                _submit_transaction(
                    service,
                    user_id,
                    kind,
                    amount,
                    when,
                    category.id if category is not None else None,
                    description,
                )

def _render_transactions(service: BudgetService, user_id: str) -> None:
    st.subheader("Transactions")
    search = st.text_input("Search descriptions")
    kind = st.radio("Show", [KIND_ALL, KIND_INCOME, KIND_EXPENSE], horizontal=True)
    matches = sort_transactions(
        filter_transactions(service.store.list_transactions(user_id), search=search, kind=kind)
    )
    summary = transaction_summary(matches)
    col1, col2, col3 = st.columns(3)
    col1.metric("Income", format_currency(summary["income"]))
    col2.metric("Expenses", format_currency(summary["expenses"]))
    col3.metric("Net", format_currency(summary["net"]))
    if not matches:
        st.info("No transactions found matching your filters")
        return
    st.dataframe(
        [
            {
                "Date": t.transaction_date.isoformat(),
                "Description": t.description or "",
                "Amount": format_currency(t.amount),
            }
            for t in matches
        ],
        use_container_width=True,
        hide_index=True,
    )

    labels = {
        f"{t.transaction_date.isoformat()}  {format_currency(t.amount)}  {t.description or ''} (#{t.id})": t.id
        for t in matches
    }
    with st.expander("Delete transaction"):
        choice = st.selectbox("Transaction", list(labels), key="delete_transaction_choice")
        if st.button("Delete transaction"):
            _apply(lambda: service.store.delete_transaction(labels[choice]), "Transaction deleted")


def main() -> None:
    """Entry point for the Streamlit app."""
    logging.basicConfig(level=logging.INFO)
    st.set_page_config(page_title="ClearCents Budgets", layout="wide")
    st.title("Budgets")

    flash = st.session_state.pop('flash', None)
    if flash:
        st.success(flash)

    user_id = st.sidebar.text_input("User", value="demo")
    tiers = list(PLAN_TIERS)
    default_index = tiers.index(config.DEFAULT_PLAN) if config.DEFAULT_PLAN in tiers else 0
    tier = st.sidebar.selectbox("Plan", tiers, index=default_index)
    period = st.sidebar.selectbox("Period", [p.value for p in Period], index=1)

    service = get_service(tier)
    if st.sidebar.button("Add default categories"):
        try:
            created = service.seed_default_categories(user_id)
        except LimitReachedError as exc:
            st.sidebar.warning(f"⚠️ {exc.limit.message}")
        else:
            _done(f"Added {len(created)} categories")

    overview = service.overview(user_id, period)
    _render_summary(overview)

    left, right = st.columns(2)
    left.plotly_chart(viz.create_budget_progress_chart(overview.progress), use_container_width=True)
    right.plotly_chart(viz.create_spending_pie_chart(overview.progress), use_container_width=True)

    if not overview.progress.empty:
        st.dataframe(
            overview.progress.drop(columns=["Category ID", "Color"]),
            use_container_width=True,
            hide_index=True,
        )

    history = service.store.transactions_frame(user_id)
    st.plotly_chart(viz.create_monthly_flow_chart(history), use_container_width=True)

    categories = service.store.list_categories(user_id)
    _render_transaction_form(service, user_id, categories)
    _render_transactions(service, user_id)

    _render_category_forms(service, user_id, categories)


if __name__ == "__main__":
    main()
