"""Mood-weighted daily aggregation for the spending/mood trend chart.

Transactions are grouped by local calendar day.  Each day gets a plain
spending total and a mood score: the average of ``base score * mood
weight`` over the day's transactions, where the most recent purchase
counts fully and each earlier one is discounted by ``exp(-0.2)``
relative to the next.  Scores are clamped to ``[1, 5]`` because the mood
weights can push a day slightly outside the base-score range (a day of
only ``excited`` purchases would otherwise score 6).

Everything here is a pure function of its input.
"""

from __future__ import annotations

from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List

import numpy as np
import pandas as pd

from .data_processing import epoch_millis, local_day
from .exceptions import InvalidTransactionError
from .models import DailyAggregate, Transaction
from .moods import MOOD_LABELS, MOOD_SCORES, MOOD_WEIGHTS, Mood

RECENCY_DECAY = 0.2
MIN_SCORE = 1.0
MAX_SCORE = 5.0


def recency_weight(position: int) -> float:
    """Weight of the transaction at ``position`` (0 = most recent)."""
    return float(np.exp(-RECENCY_DECAY * position))


def _recency_key(txn: Transaction) -> float:
    if txn.timestamp:
        return float(txn.timestamp)
    return epoch_millis(txn.date)


def day_mood_score(transactions: List[Transaction]) -> float:
    """Recency- and mood-weighted mood score for one day's transactions."""
    ordered = sorted(transactions, key=_recency_key, reverse=True)
    weights = np.exp(-RECENCY_DECAY * np.arange(len(ordered)))
    values = np.array([MOOD_SCORES[t.mood] * MOOD_WEIGHTS[t.mood] for t in ordered], dtype=float)
    score = float(np.dot(values, weights) / weights.sum())
    return float(np.clip(score, MIN_SCORE, MAX_SCORE))


def aggregate_daily_moods(transactions: Iterable[Transaction]) -> List[DailyAggregate]:
    """Group transactions by day and score each day's mood.

    Returns one :class:`DailyAggregate` per day that has at least one
    transaction, sorted by date ascending.
    """
    buckets: Dict[date, List[Transaction]] = OrderedDict()
    for txn in transactions:
        day = local_day(txn.date)
        if day is None:
            raise InvalidTransactionError(
                f"Unparseable transaction date: {txn.date!r}", details={"id": txn.id}
            )
        buckets.setdefault(day, []).append(txn)

    return [
        DailyAggregate(
            date=day,
            total_amount=float(sum(t.amount for t in bucket)),
            mood_score=day_mood_score(bucket),
            transactions=list(bucket),
        )
        for day, bucket in sorted(buckets.items(), key=lambda item: item[0])
    ]


def dominant_mood(score: float) -> Mood:
    """Mood whose base score is closest to ``score``.

    The search starts from ``neutral`` and walks :class:`Mood` in order,
    only switching on a strictly closer match, so a tie keeps whichever
    candidate was held first.
    """
    closest = Mood.NEUTRAL
    for mood in Mood:
        if abs(MOOD_SCORES[mood] - score) < abs(MOOD_SCORES[closest] - score):
            closest = mood
    return closest


def daily_aggregates_frame(aggregates: Iterable[DailyAggregate]) -> pd.DataFrame:
    """Tabular form of the aggregates for charts and tables."""
    rows = []
    for agg in aggregates:
        mood = dominant_mood(agg.mood_score)
        rows.append({
            'Date': pd.Timestamp(agg.date),
            'Amount': agg.total_amount,
            'Mood Score': agg.mood_score,
            'Dominant Mood': mood.value,
            'Mood Label': MOOD_LABELS[mood],
            'Transactions': len(agg.transactions),
        })
    return pd.DataFrame(
        rows,
        columns=['Date', 'Amount', 'Mood Score', 'Dominant Mood', 'Mood Label', 'Transactions'],
    )
