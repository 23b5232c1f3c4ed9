"""Shared sidebar components for multi-page dashboard.

Every page calls :func:`render_shared_sidebar` first.  It owns the
per-browser :class:`~mood_budget.session.UserSession` in
``st.session_state``, lets the user pick a profile and shows the budget
at a glance.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

import streamlit as st

from . import config, db
from .exceptions import MoodBudgetError
from .formatting import format_currency
from .persistent_cache import load_cache as load_persistent_cache, save_cache as save_persistent_cache
from .session import UserSession

logger = logging.getLogger(__name__)

SESSION_KEY = 'mood_budget_session'


def render_shared_sidebar() -> UserSession:
    """Render shared sidebar elements available on all pages.

    Returns:
        The open session for the selected profile.
    """
    config.configure_logging()
    cache = _get_persistent_cache()

    st.sidebar.title("💸 Mood Budget")
    user_id = _render_profile_picker(cache)
    session = get_session(user_id)

    state = session.ledger.state
    symbol = config.CURRENCY_SYMBOL
    st.sidebar.subheader("💰 This month")
    st.sidebar.metric("Remaining", format_currency(state.remaining_budget, symbol))
    col1, col2 = st.sidebar.columns(2)
    col1.metric("Budget", format_currency(state.total_budget, symbol))
    col2.metric("Savings", format_currency(state.savings, symbol))

    unread = len(session.notifications.list())
    if unread:
        st.sidebar.info(f"🔔 {unread} notification(s)")
    if session.advisor is None:
        st.sidebar.caption("Advisor disabled: set GEMINI_API_KEY to chat with the advisor.")
    return session


def get_session(user_id: str) -> UserSession:
    """Return the open session for ``user_id``, replacing one for another profile."""
    session = st.session_state.get(SESSION_KEY)
    if session is not None and session.user_id == user_id and session.is_open:
        return session
    if session is not None:
        session.close()
    session = UserSession(user_id).open()
    st.session_state[SESSION_KEY] = session
    return session


def _render_profile_picker(cache: Dict[str, Any]) -> str:
    db.init_db()
    known = db.fetch_user_ids()
    default = cache.get('user_id') or config.DEFAULT_USER_ID
    options = sorted(set(known) | {default})
    user_id = st.sidebar.selectbox(
        "Profile",
        options=options,
        index=options.index(default),
        help="Each profile has its own budget, transactions and chats",
    )
    with st.sidebar.expander("➕ New profile"):
        new_id = st.text_input("Profile name", key="new_profile_name").strip()
        if st.button("Create profile", key="create_profile_btn") and new_id:
            db.ensure_user(new_id)
            user_id = new_id
    if cache.get('user_id') != user_id:
        cache['user_id'] = user_id
        _persist_cache(cache)
    return user_id


def show_error(error: MoodBudgetError) -> None:
    """Surface a domain error as a Streamlit warning."""
    logger.info("User-facing error: %s", error)
    st.warning(str(error))


def _get_persistent_cache() -> Dict[str, Any]:
    cache = st.session_state.get('_persistent_cache_store')
    if cache is None:
        cache = load_persistent_cache()
        st.session_state['_persistent_cache_store'] = cache
    return cache


def persist_preference(key: str, value: Any) -> None:
    """Store a UI preference (filters, sort order) across reloads."""
    cache = _get_persistent_cache()
    if cache.get(key) != value:
        cache[key] = value
        _persist_cache(cache)


def get_preference(key: str, default: Any = None) -> Any:
    return _get_persistent_cache().get(key, default)


def _persist_cache(cache: Dict[str, Any]) -> None:
    try:  # pragma: no cover - disk IO
        save_persistent_cache(cache)
    except OSError as e:
        logger.warning("Could not save preferences: %s", e)
