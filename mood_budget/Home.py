"""Main entry point for Streamlit multi-page app.

This file enables Streamlit's automatic page discovery.
Pages in the pages/ directory will automatically appear in the sidebar.
The home page itself is the budget overview: set the monthly budget,
top it up and move money in and out of savings.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import streamlit as st

from mood_budget import config
from mood_budget.exceptions import MoodBudgetError
from mood_budget.formatting import format_currency
from mood_budget.session import UserSession
from mood_budget.shared_sidebar import render_shared_sidebar, show_error


def main():
    st.set_page_config(page_title="Mood Budget", page_icon="💸", layout="wide")
    session = render_shared_sidebar()

    st.header("💸 Budget Overview")
    st.markdown("Track how much is left this month and how you felt about what you spent.")

    _render_budget_metrics(session)
    st.divider()

    col1, col2 = st.columns(2)
    with col1:
        _render_budget_forms(session)
    with col2:
        _render_savings_forms(session)


def _render_budget_metrics(session: UserSession) -> None:
    state = session.ledger.state
    symbol = config.CURRENCY_SYMBOL
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Monthly Budget", format_currency(state.total_budget, symbol))
    col2.metric("Spent", format_currency(state.spent, symbol))
    col3.metric("Remaining", format_currency(state.remaining_budget, symbol))
    col4.metric("Savings", format_currency(state.savings, symbol))

    if state.total_budget > 0:
        used = min(max(state.spent / state.total_budget, 0.0), 1.0)
        st.progress(used, text=f"{used:.0%} of this month's budget used")
    else:
        st.info("No budget set for this month yet. Set one below to start tracking.")


def _render_budget_forms(session: UserSession) -> None:
    st.subheader("🎯 Monthly budget")
    with st.form("set_budget_form", clear_on_submit=True):
        amount = st.number_input("New monthly budget", min_value=0.0, step=100.0)
        submitted = st.form_submit_button("Set budget", type="primary")
    if submitted:
        _apply(lambda: session.ledger.set_total_budget(amount), "Budget updated")

    with st.form("add_budget_form", clear_on_submit=True):
        amount = st.number_input("Add to budget", min_value=0.0, step=50.0)
        submitted = st.form_submit_button("Add funds")
    if submitted:
        _apply(lambda: session.ledger.add_to_budget(amount), "Funds added to budget")


def _render_savings_forms(session: UserSession) -> None:
    st.subheader("🏦 Savings")
    with st.form("to_savings_form", clear_on_submit=True):
        amount = st.number_input("Move from budget to savings", min_value=0.0, step=50.0)
        submitted = st.form_submit_button("Transfer to savings")
    if submitted:
        _apply(lambda: session.ledger.add_to_savings(amount), "Moved to savings")

    with st.form("from_savings_form", clear_on_submit=True):
        amount = st.number_input("Move from savings to budget", min_value=0.0, step=50.0)
        submitted = st.form_submit_button("Transfer from savings")
    if submitted:
        _apply(lambda: session.ledger.transfer_from_savings(amount), "Moved from savings")


def _apply(action, success_message: str) -> None:
    try:
        action()
    except MoodBudgetError as e:
        show_error(e)
        return
    st.toast(success_message, icon="✅")
    st.rerun()


if __name__ == "__main__":
    main()
