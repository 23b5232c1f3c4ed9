"""Advisor tests use a stub client; nothing talks to Gemini."""

from __future__ import annotations

import json

import pytest

from mood_budget import config
from mood_budget.advisor import (
    DEFAULT_TITLE,
    FinancialAdvisor,
    build_analysis_prompt,
    build_financial_summary,
    clean_title,
)
from mood_budget.exceptions import AdvisorConfigurationError, AdvisorError
from mood_budget.models import BudgetState, Transaction


@pytest.fixture
def transactions():
    return [
        Transaction.from_record({"id": "a", "date": "2024-04-01T10:00:00", "amount": 40, "mood": "regret", "title": "Shoes"}),
        Transaction.from_record({"id": "b", "date": "2024-04-02T10:00:00", "amount": 10, "mood": "rad", "title": "Book"}),
    ]


def test_financial_summary(transactions) -> None:
    summary = build_financial_summary(BudgetState(500, 450, 80), transactions)
    assert summary["total_budget"] == 500
    assert summary["remaining_budget"] == 450
    assert summary["savings"] == 80
    assert summary["mood_patterns"] == {"regret": 40.0, "excited": 10.0}
    assert summary["transactions"][1] == {
        "date": "2024-04-02", "amount": 10.0, "title": "Book", "mood": "excited", "description": "",
    }
    json.dumps(summary)


def test_reply_sends_summary_as_system_instruction(fake_client, transactions) -> None:
    client = fake_client("  Try a weekly cap on shoes.  ")
    advisor = FinancialAdvisor(client=client, chat_model="chat-model")
    summary = build_financial_summary(BudgetState(500, 450, 80), transactions)

    assert advisor.reply("How am I doing?", summary) == "Try a weekly cap on shoes."
    [call] = client.calls
    assert call["model"] == "chat-model"
    assert call["contents"] == "User message: How am I doing?"
    instruction = call["config"].system_instruction
    assert '"remaining_budget": 450' in instruction
    assert config.CURRENCY in instruction


def test_missing_api_key(monkeypatch) -> None:
    monkeypatch.setattr(config, "GEMINI_API_KEY", None)
    with pytest.raises(AdvisorConfigurationError):
        FinancialAdvisor()


def test_api_errors_are_wrapped(fake_client) -> None:
    advisor = FinancialAdvisor(client=fake_client(RuntimeError("quota exceeded")))
    with pytest.raises(AdvisorError) as excinfo:
        advisor.reply("hi", {})
    assert "quota exceeded" in str(excinfo.value)


def test_empty_response_is_an_error(fake_client) -> None:
    with pytest.raises(AdvisorError):
        FinancialAdvisor(client=fake_client("   ")).reply("hi", {})


def test_title_uses_summary_model_and_never_raises(fake_client) -> None:
    client = fake_client('"Budget Tips For Students Today Please"', RuntimeError("down"))
    advisor = FinancialAdvisor(client=client, summary_model="summary-model")

    assert advisor.title("help me budget", "Sure!") == "Budget Tips For Students Today"
    assert client.calls[0]["model"] == "summary-model"
    assert "help me budget" in client.calls[0]["contents"]
    assert advisor.title("again", "ok") == DEFAULT_TITLE


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Title: **Saving Plan**", "Saving Plan"),
        ("## Weekly budget check\nextra line", "Weekly budget check"),
        ("", DEFAULT_TITLE),
        ('""', DEFAULT_TITLE),
        (None, DEFAULT_TITLE),
    ],
)
def test_clean_title(raw, expected) -> None:
    assert clean_title(raw) == expected


def test_analysis_prompt_includes_moods(transactions) -> None:
    prompt = build_analysis_prompt(transactions, currency="USD")
    assert '"mood": "regret"' in prompt
    assert '"excited": 10.0' in prompt
    assert "USD" in prompt


def test_analyze(fake_client, transactions) -> None:
    client = fake_client("* Spending on shoes is high")
    assert FinancialAdvisor(client=client).analyze(transactions) == "* Spending on shoes is high"
