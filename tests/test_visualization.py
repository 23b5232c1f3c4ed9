from __future__ import annotations

import plotly.graph_objects as go

from mood_budget.models import Transaction
from mood_budget.mood_aggregation import aggregate_daily_moods
from mood_budget.moods import MOOD_COLORS, MOOD_ICONS, Mood
from mood_budget.visualization import create_expense_mood_chart, create_mood_spending_chart


def _txn(when, mood, amount):
    return Transaction.from_record({"id": f"{when}{mood}", "date": when, "amount": amount, "mood": mood})


def test_expense_mood_chart() -> None:
    aggregates = aggregate_daily_moods([
        _txn("2024-01-01", "happy", 30),
        _txn("2024-01-02", "regret", 90),
    ])
    fig = create_expense_mood_chart(aggregates, currency_symbol="₱")

    assert isinstance(fig, go.Figure)
    [trace] = fig.data
    assert list(trace.y) == [30, 90]
    assert list(trace.text) == [MOOD_ICONS[Mood.HAPPY], MOOD_ICONS[Mood.REGRET]]
    assert list(trace.marker.color) == [MOOD_COLORS[Mood.HAPPY], MOOD_COLORS[Mood.REGRET]]
    assert "Total Spent: ₱30.00" in trace.hovertext[0]
    assert fig.layout.shapes[0].y0 == 60
    assert fig.layout.title.text == "Spending & Mood Trends"


def test_empty_charts() -> None:
    assert create_expense_mood_chart([]).layout.title.text == "No data to display"
    assert create_mood_spending_chart({}).layout.title.text == "No data to display"


def test_mood_spending_chart_has_every_mood() -> None:
    fig = create_mood_spending_chart({"happy": 12.0, "regret": 3.0})
    moods = [trace.x[0] for trace in fig.data]
    assert moods == ["Excited", "Happy", "Neutral", "Unhappy", "Regret"]
    amounts = {trace.x[0]: trace.y[0] for trace in fig.data}
    assert amounts["Happy"] == 12.0
    assert amounts["Neutral"] == 0.0
