"""Mood vocabulary shared by the ledger, the aggregator and the UI."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Union

from .exceptions import InvalidMoodError


class Mood(str, Enum):
    """Ordered from most positive to most negative."""

    EXCITED = "excited"
    HAPPY = "happy"
    NEUTRAL = "neutral"
    UNHAPPY = "unhappy"
    REGRET = "regret"

    def __str__(self) -> str:
        return self.value


MOOD_SCORES: Dict[Mood, int] = {
    Mood.EXCITED: 5,
    Mood.HAPPY: 4,
    Mood.NEUTRAL: 3,
    Mood.UNHAPPY: 2,
    Mood.REGRET: 1,
}

# Amplifies the extreme ends of the scale
MOOD_WEIGHTS: Dict[Mood, float] = {
    Mood.EXCITED: 1.2,
    Mood.HAPPY: 1.1,
    Mood.NEUTRAL: 1.0,
    Mood.UNHAPPY: 0.9,
    Mood.REGRET: 0.8,
}

MOOD_LABELS: Dict[Mood, str] = {
    Mood.EXCITED: "Excited",
    Mood.HAPPY: "Happy",
    Mood.NEUTRAL: "Neutral",
    Mood.UNHAPPY: "Unhappy",
    Mood.REGRET: "Regret",
}

MOOD_ICONS: Dict[Mood, str] = {
    Mood.EXCITED: "🎉",
    Mood.HAPPY: "❤️",
    Mood.NEUTRAL: "⚪",
    Mood.UNHAPPY: "☁️",
    Mood.REGRET: "🌧️",
}

MOOD_COLORS: Dict[Mood, str] = {
    Mood.EXCITED: "#22c55e",
    Mood.HAPPY: "#3b82f6",
    Mood.NEUTRAL: "#eab308",
    Mood.UNHAPPY: "#f97316",
    Mood.REGRET: "#ef4444",
}

# Tags written by older versions of the app
LEGACY_MOOD_ALIASES: Dict[str, Mood] = {
    "rad": Mood.EXCITED,
    "good": Mood.HAPPY,
    "meh": Mood.NEUTRAL,
    "bad": Mood.UNHAPPY,
    "awful": Mood.REGRET,
}


def parse_mood(value: Union[Mood, str, None]) -> Mood:
    """Resolve a canonical tag or legacy alias to a :class:`Mood`."""
    if isinstance(value, Mood):
        return value
    if not isinstance(value, str):
        raise InvalidMoodError(f"Unrecognized mood: {value!r}", details={"mood": value})
    key = value.strip().lower()
    if key in LEGACY_MOOD_ALIASES:
        return LEGACY_MOOD_ALIASES[key]
    try:
        return Mood(key)
    except ValueError:
        raise InvalidMoodError(f"Unrecognized mood: {value!r}", details={"mood": value}) from None


def mood_label(mood: Union[Mood, str]) -> str:
    """Label with icon, e.g. ``"🎉 Excited"``."""
    parsed = parse_mood(mood)
    return f"{MOOD_ICONS[parsed]} {MOOD_LABELS[parsed]}"
