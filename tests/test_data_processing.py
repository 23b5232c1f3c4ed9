"""Unit tests for mood_budget.data_processing.

These tests exercise the listing helpers on small, controlled inputs:
search, mood filtering, sorting and the tabular views.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pandas as pd
import pytest

from mood_budget import data_processing as dp
from mood_budget.models import Transaction


def _txn(txn_id, when, mood, amount, title="", description=""):
    return Transaction.from_record({
        "id": txn_id, "date": when, "amount": amount, "mood": mood,
        "title": title, "description": description,
    })


@pytest.fixture
def transactions():
    return [
        _txn("a", "2024-02-01T09:00:00", "happy", 120.0, "Groceries", "weekly shop"),
        _txn("b", "2024-02-03T19:30:00", "regret", 60.0, "Takeout", "late night pizza"),
        _txn("c", "2024-02-02T12:00:00", "excited", 300.0, "Concert", "front row"),
        _txn("d", "2024-02-03T08:00:00", "happy", 4.5, "Coffee", "Pizza-flavoured latte"),
    ]


def test_parse_timestamp_variants() -> None:
    assert dp.parse_timestamp("2024-02-01T09:00:00") == datetime(2024, 2, 1, 9, 0)
    assert dp.parse_timestamp(date(2024, 2, 1)) == datetime(2024, 2, 1)
    assert dp.parse_timestamp("") is None
    assert dp.parse_timestamp(None) is None
    assert dp.parse_timestamp("not a date") is None


def test_aware_timestamps_become_naive_local() -> None:
    aware = datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)
    parsed = dp.parse_timestamp(aware.isoformat())
    assert parsed.tzinfo is None
    assert parsed == aware.astimezone().replace(tzinfo=None)


def test_local_day_and_format_day() -> None:
    assert dp.local_day("2024-02-03T23:59:59") == date(2024, 2, 3)
    assert dp.format_day("2024-02-03T08:00:00") == "2024-02-03"
    assert dp.format_day("garbage") == ""
    assert dp.epoch_millis("garbage") == 0.0


def test_filter_by_query_matches_title_or_description(transactions) -> None:
    result = dp.filter_transactions(transactions, query="PIZZA")
    assert [t.id for t in result] == ["b", "d"]


def test_filter_by_moods_accepts_legacy_tags(transactions) -> None:
    result = dp.filter_transactions(transactions, moods=["good"])
    assert {t.id for t in result} == {"a", "d"}
    assert len(dp.filter_transactions(transactions, moods=[])) == 4


def test_sort_orders(transactions) -> None:
    newest = dp.filter_transactions(transactions)
    oldest = dp.filter_transactions(transactions, sort_order="asc")
    assert [t.id for t in newest] == ["b", "d", "c", "a"]
    assert [t.id for t in oldest] == ["a", "c", "d", "b"]
    with pytest.raises(ValueError):
        dp.filter_transactions(transactions, sort_order="sideways")


def test_totals_and_patterns(transactions) -> None:
    assert dp.total_amount(transactions) == pytest.approx(484.5)
    assert dp.mood_spending_patterns(transactions) == {"happy": 124.5, "regret": 60.0, "excited": 300.0}
    series = dp.mood_spending_series(transactions)
    assert list(series.index) == ["Excited", "Happy", "Neutral", "Unhappy", "Regret"]
    assert series["Neutral"] == 0.0


def test_transactions_to_frame(transactions) -> None:
    df = dp.transactions_to_frame(transactions)
    assert list(df.columns) == ["id", "Date", "Title", "Description", "Amount", "Mood"]
    assert pd.api.types.is_datetime64_any_dtype(df["Date"])
    assert df.loc[df["id"] == "b", "Mood"].item() == "Regret"
    assert dp.transactions_to_frame([]).empty
