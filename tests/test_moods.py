from __future__ import annotations

import pytest

from mood_budget.exceptions import InvalidMoodError, ValidationError
from mood_budget.moods import MOOD_SCORES, MOOD_WEIGHTS, Mood, mood_label, parse_mood


def test_scores_and_weights_cover_every_mood() -> None:
    assert [MOOD_SCORES[m] for m in Mood] == [5, 4, 3, 2, 1]
    assert [MOOD_WEIGHTS[m] for m in Mood] == [1.2, 1.1, 1.0, 0.9, 0.8]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("excited", Mood.EXCITED),
        (" Happy ", Mood.HAPPY),
        (Mood.REGRET, Mood.REGRET),
        ("rad", Mood.EXCITED),
        ("good", Mood.HAPPY),
        ("MEH", Mood.NEUTRAL),
        ("bad", Mood.UNHAPPY),
        ("awful", Mood.REGRET),
    ],
)
def test_parse_mood(raw, expected) -> None:
    assert parse_mood(raw) is expected


@pytest.mark.parametrize("raw", ["ecstatic", "", None, 3])
def test_parse_mood_rejects_unknown(raw) -> None:
    with pytest.raises(InvalidMoodError) as excinfo:
        parse_mood(raw)
    assert isinstance(excinfo.value, ValidationError)


def test_mood_is_a_string_enum() -> None:
    assert Mood.HAPPY == "happy"
    assert str(Mood.HAPPY) == "happy"
    assert mood_label("good") == "❤️ Happy"
