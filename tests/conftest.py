"""Shared fixtures: a throwaway SQLite store and a stub Gemini client."""

from __future__ import annotations

import sys
import types
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mood_budget import config
from mood_budget import db as db_mod


@pytest.fixture
def temp_db(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "DATA_DIR", tmp_path)
    monkeypatch.setattr(config, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(db_mod, "DB_PATH", tmp_path / "test.db")
    db_mod.init_db()
    return tmp_path / "test.db"


class FakeGenAIClient:
    """Mimics ``genai.Client`` closely enough for the advisor.

    ``responses`` are returned in order; an ``Exception`` instance in the
    list is raised instead.  Every call is recorded in ``calls``.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.models = types.SimpleNamespace(generate_content=self._generate_content)

    def _generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if not self.responses:
            raise RuntimeError("no more canned responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return types.SimpleNamespace(text=response)


@pytest.fixture
def fake_client():
    return FakeGenAIClient
