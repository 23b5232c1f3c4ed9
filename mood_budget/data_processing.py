"""Data processing helpers for transactions.

Functions here work on plain sequences of :class:`~mood_budget.models.Transaction`
objects (or anything exposing the same attributes) and return new lists or
DataFrames; the inputs are never modified.  The Streamlit pages use them to
build the transaction table, the mood filters and the advisor summary.

Date handling lives here as well so that every part of the app agrees on
what "the day of a transaction" means: timestamps are parsed with pandas,
timezone-aware values are converted to local time, and the calendar day is
the local date.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .moods import MOOD_LABELS, Mood, parse_mood

SORT_ORDERS = ("asc", "desc")


def _local_tz():
    return datetime.now().astimezone().tzinfo


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a date/time value into a naive local ``datetime``.

    Accepts ISO-8601 strings, ``datetime``/``date`` objects and pandas
    timestamps.  Returns ``None`` when the value cannot be parsed.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    ts = pd.to_datetime(value, errors='coerce')
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(_local_tz()).tz_localize(None)
    return ts.to_pydatetime()


def local_day(value: Any) -> Optional[date]:
    """Calendar day of a timestamp in local time."""
    parsed = parse_timestamp(value)
    return parsed.date() if parsed is not None else None


def epoch_millis(value: Any) -> float:
    """Milliseconds since the epoch for a parseable timestamp (0.0 otherwise)."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return 0.0
    return parsed.timestamp() * 1000.0


def format_day(value: Any) -> str:
    day = local_day(value)
    return day.isoformat() if day is not None else ''


def filter_transactions(
    transactions: Iterable[Any],
    query: str = "",
    moods: Optional[Sequence[Any]] = None,
    sort_order: str = "desc",
) -> List[Any]:
    """Search, mood-filter and date-sort a list of transactions.

    ``query`` matches title or description case-insensitively.  An empty or
    ``None`` ``moods`` selection keeps every mood.  ``sort_order`` is
    ``"desc"`` (newest first) or ``"asc"``.
    """
    if sort_order not in SORT_ORDERS:
        raise ValueError(f"sort_order must be one of {SORT_ORDERS}, got {sort_order!r}")
    needle = (query or "").strip().lower()
    wanted = {parse_mood(m) for m in moods} if moods else set()

    matched = []
    for txn in transactions:
        if needle:
            haystack = f"{txn.title or ''}\n{txn.description or ''}".lower()
            if needle not in haystack:
                continue
        if wanted and parse_mood(txn.mood) not in wanted:
            continue
        matched.append(txn)

    return sorted(matched, key=lambda t: epoch_millis(t.date), reverse=(sort_order == "desc"))


def total_amount(transactions: Iterable[Any]) -> float:
    return float(sum(float(t.amount) for t in transactions))


def mood_spending_patterns(transactions: Iterable[Any]) -> Dict[str, float]:
    """Sum of amounts per mood tag, only for moods that occur."""
    patterns: Dict[str, float] = {}
    for txn in transactions:
        key = parse_mood(txn.mood).value
        patterns[key] = patterns.get(key, 0.0) + float(txn.amount)
    return patterns


def transactions_to_frame(transactions: Iterable[Any]) -> pd.DataFrame:
    """Tabular view used by the transaction list and CSV export."""
    rows = []
    for txn in transactions:
        mood = parse_mood(txn.mood)
        rows.append({
            'id': txn.id,
            'Date': parse_timestamp(txn.date),
            'Title': txn.title,
            'Description': txn.description,
            'Amount': float(txn.amount),
            'Mood': MOOD_LABELS[mood],
        })
    df = pd.DataFrame(rows, columns=['id', 'Date', 'Title', 'Description', 'Amount', 'Mood'])
    if not df.empty:
        df['Date'] = pd.to_datetime(df['Date'])
    return df


def mood_spending_series(transactions: Iterable[Any]) -> pd.Series:
    """Spending per mood in enumeration order, zero-filled."""
    patterns = mood_spending_patterns(transactions)
    return pd.Series(
        {MOOD_LABELS[m]: patterns.get(m.value, 0.0) for m in Mood},
        name='Amount',
    )
