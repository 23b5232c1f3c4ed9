"""Exception hierarchy shared by the services and the Streamlit pages."""

from __future__ import annotations

from typing import Any, Dict, Optional


class MoodBudgetError(Exception):
    """Base error. ``details`` carries structured context for logging."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Validation


class ValidationError(MoodBudgetError):
    pass


class InvalidMoodError(ValidationError):
    pass


class InvalidAmountError(ValidationError):
    pass


class InvalidTransactionError(ValidationError):
    pass


class EmptyMessageError(ValidationError):
    pass


# Budget rules


class BudgetError(MoodBudgetError):
    pass


class BudgetExceededError(BudgetError):
    pass


class InsufficientSavingsError(BudgetError):
    pass


# Missing records


class NotFoundError(MoodBudgetError):
    pass


class TransactionNotFoundError(NotFoundError):
    pass


class ConversationNotFoundError(NotFoundError):
    pass


class NotificationNotFoundError(NotFoundError):
    pass


# Advisor


class AdvisorError(MoodBudgetError):
    """The Gemini call failed or returned nothing usable."""


class AdvisorConfigurationError(AdvisorError):
    pass
