"""Plotly visualisation helpers for the mood budget app.

Each function takes the output of :mod:`mood_aggregation` or
:mod:`data_processing` and returns a ``plotly.graph_objects.Figure`` that
Streamlit renders with ``st.plotly_chart``.  Empty inputs produce an empty
figure titled "No data to display" rather than raising.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .formatting import format_currency
from .models import DailyAggregate
from .mood_aggregation import daily_aggregates_frame
from .moods import MOOD_COLORS, MOOD_ICONS, MOOD_LABELS, Mood


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_expense_mood_chart(
    aggregates: Iterable[DailyAggregate],
    title: Optional[str] = None,
    currency_symbol: str = "$",
) -> go.Figure:
    """Daily spending line with a mood-coloured marker per day.

    Each marker shows the day's dominant mood icon; hovering shows the total
    spent and the average mood.  A dashed reference line marks the mean
    daily spending.
    """
    df = daily_aggregates_frame(aggregates)
    if df.empty:
        return _empty_figure()

    moods = [Mood(value) for value in df['Dominant Mood']]
    hover = [
        f"{day:%b %d, %Y}<br>Total Spent: {format_currency(amount, currency_symbol)}"
        f"<br>Average Mood: {MOOD_ICONS[mood]} {MOOD_LABELS[mood]} ({score:.2f})"
        for day, amount, mood, score in zip(df['Date'], df['Amount'], moods, df['Mood Score'])
    ]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=df['Date'],
        y=df['Amount'],
        mode='lines+markers+text',
        line=dict(color='#2563eb', width=2, shape='spline'),
        marker=dict(size=14, color=[MOOD_COLORS[m] for m in moods], line=dict(width=1, color='white')),
        text=[MOOD_ICONS[m] for m in moods],
        textposition='top center',
        hovertext=hover,
        hoverinfo='text',
        name='Spending',
    ))

    average = float(df['Amount'].mean())
    fig.add_hline(
        y=average,
        line_dash='dash',
        line_color='#888888',
        annotation_text='Avg Spending',
        annotation_position='right',
    )
    fig.update_layout(
        title=title or "Spending & Mood Trends",
        xaxis_title="Date",
        yaxis_title="Amount",
        yaxis_tickprefix=currency_symbol,
        xaxis_tickformat='%b %d',
        showlegend=False,
        margin=dict(t=60, r=30, l=20, b=20),
    )
    return fig


def create_mood_spending_chart(patterns: Dict[str, float], title: Optional[str] = None) -> go.Figure:
    """Bar chart of total spending per mood, in mood order."""
    if not patterns:
        return _empty_figure()
    rows = [
        {'Mood': MOOD_LABELS[mood], 'Amount': float(patterns.get(mood.value, 0.0)), 'color': mood.value}
        for mood in Mood
    ]
    df = pd.DataFrame(rows)
    fig = px.bar(
        df,
        x='Mood',
        y='Amount',
        color='color',
        color_discrete_map={m.value: MOOD_COLORS[m] for m in Mood},
    )
    fig.update_layout(
        title=title or "Spending by mood",
        xaxis_title="Mood",
        yaxis_title="Amount",
        showlegend=False,
    )
    return fig
