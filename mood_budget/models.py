"""Record types for the ledger, notifications and chat."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from .data_processing import parse_timestamp
from .exceptions import InvalidAmountError, InvalidTransactionError
from .moods import Mood, parse_mood

NOTIFICATION_TYPES = ('info', 'success', 'warning', 'error')
MESSAGE_SENDERS = ('user', 'advisor')


def _coerce_amount(value: Any) -> float:
    if value is None or isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}", details={"amount": value})
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidAmountError(f"Invalid amount: {value!r}", details={"amount": value}) from None
    if amount != amount or amount < 0:
        raise InvalidAmountError(f"Amount must be a non-negative number, got {value!r}", details={"amount": value})
    return amount


@dataclass(frozen=True)
class Transaction:
    id: str
    date: str
    amount: float
    mood: Mood
    title: str = ''
    description: str = ''
    timestamp: Optional[float] = None
    user_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Transaction':
        """Validate a raw mapping (store row, form input) into a Transaction."""
        raw_date = record.get('date')
        if isinstance(raw_date, (datetime, date)):
            raw_date = raw_date.isoformat()
        if parse_timestamp(raw_date) is None:
            raise InvalidTransactionError(
                f"Unparseable transaction date: {raw_date!r}",
                details={"date": raw_date, "id": record.get('id')},
            )
        timestamp = record.get('timestamp')
        if timestamp is not None:
            try:
                timestamp = float(timestamp)
            except (TypeError, ValueError):
                raise InvalidTransactionError(
                    f"Invalid timestamp: {timestamp!r}", details={"timestamp": timestamp}
                ) from None
        return cls(
            id=str(record.get('id') or ''),
            date=str(raw_date),
            amount=_coerce_amount(record.get('amount')),
            mood=parse_mood(record.get('mood')),
            title=str(record.get('title') or ''),
            description=str(record.get('description') or ''),
            timestamp=timestamp,
            user_id=record.get('user_id'),
        )

    def with_changes(self, **changes: Any) -> 'Transaction':
        return replace(self, **changes)

    def to_record(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': self.date,
            'amount': self.amount,
            'mood': self.mood.value,
            'title': self.title,
            'description': self.description,
            'timestamp': self.timestamp,
            'user_id': self.user_id,
        }


@dataclass(frozen=True)
class DailyAggregate:
    date: date
    total_amount: float
    mood_score: float
    transactions: List[Transaction] = field(default_factory=list)


@dataclass
class BudgetState:
    total_budget: float = 0.0
    remaining_budget: float = 0.0
    savings: float = 0.0
    last_budget_reset: Optional[datetime] = None

    @property
    def spent(self) -> float:
        return self.total_budget - self.remaining_budget


@dataclass(frozen=True)
class Notification:
    id: str
    message: str
    type: str = 'info'
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Conversation:
    id: str
    name: str
    last_message: str = ''
    unread_count: int = 0
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ChatMessage:
    id: str
    conversation_id: str
    text: str
    sender: str
    timestamp: Optional[datetime] = None
