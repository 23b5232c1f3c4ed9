"""Gemini-backed financial advisor.

The advisor itself has no financial logic: it serializes the user's budget
and transactions into a prompt, sends it to Gemini through the
``google-genai`` SDK and returns the text.  Replies are rendered through
:mod:`mood_budget.response_format`.

A client can be injected (tests pass a stub exposing
``models.generate_content``); otherwise one is created from
``GEMINI_API_KEY``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, Optional

from google import genai
from google.genai import types

from . import config
from .data_processing import format_day, mood_spending_patterns
from .exceptions import AdvisorConfigurationError, AdvisorError
from .models import BudgetState
from .moods import parse_mood

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Chat"
MAX_TITLE_WORDS = 5
_TITLE_NOISE = '#*"\'` '

ADVISOR_SYSTEM_PROMPT = """You are a mindful financial advisor who pairs practical money guidance with mindfulness practice. In every reply:
- Acknowledge the financial concern the user raised.
- Give concrete advice grounded in the user's financial data below.

If the message shows stress, anxiety or overwhelm about money, add one short mindfulness technique (a breathing exercise, a brief meditation or a mindful-awareness prompt) that fits their specific situation and supports calmer financial decisions. Leave it out otherwise.

Keep the tone compassionate and supportive. Use short paragraphs, bullet points and **bold** key figures so the answer is easy to read.

User financial data:
{financial_data}

All monetary values are in {currency}."""

TITLE_PROMPT = """Summarize the following conversation into a concise title (max {max_words} words). Reply with the title only.
User: {user_message}
Advisor: {advisor_reply}"""

ANALYSIS_PROMPT = """As a financial advisor, analyze these transactions and give personalized recommendations. Cover:
1. Overall spending patterns
2. Emotional spending trends (based on the mood recorded with each purchase)
3. Specific recommendations for improvement
4. Areas of concern and positive habits

Transaction data:
{transactions}

Spending per mood:
{mood_patterns}

Keep it concise and actionable, and tie each recommendation to both the amounts and the moods. All monetary values are in {currency}."""


def _serialize_transactions(transactions: Iterable[Any]) -> list:
    return [
        {
            'date': format_day(t.date),
            'amount': float(t.amount),
            'title': t.title,
            'mood': parse_mood(t.mood).value,
            'description': t.description,
        }
        for t in transactions
    ]


def build_financial_summary(state: BudgetState, transactions: Iterable[Any]) -> Dict[str, Any]:
    """Everything the advisor is allowed to know about the user's money."""
    transactions = list(transactions)
    return {
        'total_budget': state.total_budget,
        'remaining_budget': state.remaining_budget,
        'savings': state.savings,
        'transactions': _serialize_transactions(transactions),
        'mood_patterns': mood_spending_patterns(transactions),
    }


def build_advisor_prompt(summary: Dict[str, Any], currency: Optional[str] = None) -> str:
    return ADVISOR_SYSTEM_PROMPT.format(
        financial_data=json.dumps(summary, default=str),
        currency=currency or config.CURRENCY,
    )


def build_title_prompt(user_message: str, advisor_reply: str) -> str:
    return TITLE_PROMPT.format(
        max_words=MAX_TITLE_WORDS,
        user_message=user_message,
        advisor_reply=advisor_reply,
    )


def build_analysis_prompt(transactions: Iterable[Any], currency: Optional[str] = None) -> str:
    transactions = list(transactions)
    return ANALYSIS_PROMPT.format(
        transactions=json.dumps(_serialize_transactions(transactions)),
        mood_patterns=json.dumps(mood_spending_patterns(transactions)),
        currency=currency or config.CURRENCY,
    )


def clean_title(text: Optional[str]) -> str:
    """First line of a model-generated title, without quotes or markdown."""
    if not text:
        return DEFAULT_TITLE
    line = text.strip().splitlines()[0] if text.strip() else ''
    line = line.strip().strip(_TITLE_NOISE)
    if line.lower().startswith('title:'):
        line = line[len('title:'):].strip(_TITLE_NOISE)
    words = line.split()
    if not words:
        return DEFAULT_TITLE
    return ' '.join(words[:MAX_TITLE_WORDS])


class FinancialAdvisor:
    """Thin wrapper around ``genai.Client`` for the three advisor calls."""

    def __init__(
        self,
        client: Any = None,
        api_key: Optional[str] = None,
        chat_model: Optional[str] = None,
        summary_model: Optional[str] = None,
        temperature: float = 0.7,
    ):
        self.chat_model = chat_model or config.CHAT_MODEL
        self.summary_model = summary_model or config.SUMMARY_MODEL
        self.temperature = temperature
        if client is not None:
            self.client = client
            return
        key = api_key or config.GEMINI_API_KEY
        if not key:
            raise AdvisorConfigurationError(
                "Gemini API key not configured. Set GEMINI_API_KEY to enable the advisor."
            )
        self.client = genai.Client(api_key=key)

    def _generate(self, model: str, prompt: str, system_instruction: Optional[str] = None) -> str:
        try:
            response = self.client.models.generate_content(
                model=model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=self.temperature,
                ),
            )
        except Exception as e:
            logger.exception("Gemini API error: %s", e)
            raise AdvisorError(f"Gemini API error: {e}", details={"model": model}) from e

        text = getattr(response, 'text', None)
        if not text or not text.strip():
            raise AdvisorError("Gemini returned an empty response", details={"model": model})
        return text.strip()

    def reply(self, user_message: str, summary: Dict[str, Any]) -> str:
        """Answer a chat message in light of the financial summary."""
        return self._generate(
            self.chat_model,
            f"User message: {user_message}",
            system_instruction=build_advisor_prompt(summary),
        )

    def title(self, user_message: str, advisor_reply: str) -> str:
        """Short conversation title; never raises."""
        try:
            text = self._generate(self.summary_model, build_title_prompt(user_message, advisor_reply))
        except AdvisorError as e:
            logger.warning("Falling back to default conversation title: %s", e)
            return DEFAULT_TITLE
        return clean_title(text)

    def analyze(self, transactions: Iterable[Any]) -> str:
        """Written spending analysis for the mood trends page."""
        return self._generate(self.summary_model, build_analysis_prompt(transactions))
