"""Budget ledger: monthly budget, remaining balance, savings and transactions.

Every write goes straight to the store and then updates the in-memory
:class:`BudgetState`, so the state object always mirrors what was
persisted.  Rule violations (spending more than is left, moving more
than is saved) raise :mod:`mood_budget.exceptions` errors instead of
silently doing nothing; the pages turn those into warnings.

Budget movements (top-ups and savings transfers) are recorded as neutral
transactions so they show up in the history alongside purchases.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, List, Optional

from . import db
from .data_processing import parse_timestamp
from .events import ChangeFeed, Subscription
from .exceptions import (
    BudgetExceededError,
    InsufficientSavingsError,
    InvalidAmountError,
    TransactionNotFoundError,
)
from .models import BudgetState, Transaction
from .moods import Mood, parse_mood
from .notifications import NotificationCenter

logger = logging.getLogger(__name__)

MONTHLY_RESET_MESSAGE = (
    "Your monthly budget has been reset and remaining funds were transferred to savings."
)


def _positive_amount(amount: Any) -> float:
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise InvalidAmountError(f"Invalid amount: {amount!r}", details={"amount": amount}) from None
    if not value > 0:
        raise InvalidAmountError("Please enter a valid amount greater than zero.", details={"amount": amount})
    return round(value, 2)


def _exceeds(amount: float, limit: float) -> bool:
    """True when ``amount`` is more than ``limit`` by at least a cent."""
    return round(amount - limit, 2) > 0


class BudgetLedger:
    """Budget bookkeeping for a single user."""

    def __init__(
        self,
        user_id: str,
        feed: Optional[ChangeFeed] = None,
        notifications: Optional[NotificationCenter] = None,
    ):
        self.user_id = user_id
        self.feed = feed or ChangeFeed()
        self.notifications = notifications or NotificationCenter(user_id, self.feed)
        self.state = BudgetState()
        self._loaded = False

    # ------------------------------------------------------------------
    # Loading and watching
    # ------------------------------------------------------------------

    @property
    def transactions_topic(self) -> str:
        return f"transactions:{self.user_id}"

    @property
    def budget_topic(self) -> str:
        return f"budget:{self.user_id}"

    def load(self) -> BudgetState:
        user = db.ensure_user(self.user_id)
        budget = db.fetch_budget(self.user_id)
        self.state = BudgetState(
            total_budget=float(budget.get('total_budget') or 0.0),
            remaining_budget=float(budget.get('remaining_budget') or 0.0),
            savings=float(user.get('savings') or 0.0),
            last_budget_reset=parse_timestamp(user.get('last_budget_reset')),
        )
        self._loaded = True
        return self.state

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def transactions(self) -> List[Transaction]:
        """All transactions, newest first."""
        return [Transaction.from_record(row) for row in db.fetch_transactions(self.user_id)]

    def get_transaction(self, txn_id: str) -> Transaction:
        row = db.fetch_transaction(txn_id)
        if row is None or row.get('user_id') != self.user_id:
            raise TransactionNotFoundError("Transaction not found", details={"id": txn_id})
        return Transaction.from_record(row)

    def watch_transactions(self, on_change: Callable[[List[Transaction]], None]) -> Subscription:
        subscription = self.feed.subscribe(self.transactions_topic, on_change)
        on_change(self.transactions())
        return subscription

    def watch_budget(self, on_change: Callable[[BudgetState], None]) -> Subscription:
        self._ensure_loaded()
        subscription = self.feed.subscribe(self.budget_topic, on_change)
        on_change(replace(self.state))
        return subscription

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def add_transaction(
        self,
        title: str,
        description: str,
        amount: Any,
        mood: Any,
        date: Optional[Any] = None,
    ) -> Transaction:
        """Record a purchase and take it out of the remaining budget."""
        self._ensure_loaded()
        value = _positive_amount(amount)
        if _exceeds(value, self.state.remaining_budget):
            raise BudgetExceededError(
                "Transaction amount exceeds remaining budget!",
                details={"amount": value, "remaining": self.state.remaining_budget},
            )
        txn = self._record(title, description, value, parse_mood(mood), date)
        self._set_budget(remaining_budget=self.state.remaining_budget - value)
        logger.info("Added transaction %s (%.2f, %s) for %s", txn.id, value, txn.mood.value, self.user_id)
        return txn

    def update_transaction(self, txn_id: str, **fields: Any) -> Transaction:
        """Edit a transaction; the remaining budget absorbs any amount change."""
        self._ensure_loaded()
        old = self.get_transaction(txn_id)
        changes = {k: v for k, v in fields.items() if v is not None}

        if 'mood' in changes:
            changes['mood'] = parse_mood(changes['mood']).value
        if 'amount' in changes:
            changes['amount'] = _positive_amount(changes['amount'])
        if 'date' in changes:
            candidate = changes['date']
            if hasattr(candidate, 'isoformat'):
                candidate = candidate.isoformat()
            changes['date'] = Transaction.from_record({**old.to_record(), 'date': candidate}).date

        difference = changes.get('amount', old.amount) - old.amount
        if _exceeds(difference, self.state.remaining_budget):
            raise BudgetExceededError(
                "New transaction amount exceeds remaining budget!",
                details={"difference": difference, "remaining": self.state.remaining_budget},
            )

        db.update_transaction(txn_id, **changes)
        if difference:
            self._set_budget(remaining_budget=self.state.remaining_budget - difference)
        self._publish_transactions()
        return self.get_transaction(txn_id)

    def delete_transaction(self, txn_id: str) -> None:
        """Remove a transaction and refund its amount to the remaining budget."""
        self._ensure_loaded()
        txn = self.get_transaction(txn_id)
        db.delete_transaction(txn_id)
        self._set_budget(remaining_budget=self.state.remaining_budget + txn.amount)
        self._publish_transactions()
        logger.info("Deleted transaction %s for %s", txn_id, self.user_id)

    # ------------------------------------------------------------------
    # Budget and savings
    # ------------------------------------------------------------------

    def set_total_budget(self, amount: Any) -> BudgetState:
        self._ensure_loaded()
        value = _positive_amount(amount)
        self._set_budget(total_budget=value, remaining_budget=value)
        return self.state

    def add_to_budget(self, amount: Any) -> BudgetState:
        self._ensure_loaded()
        value = _positive_amount(amount)
        self._record("Add to Budget", "Funds added to budget", value, Mood.NEUTRAL)
        self._set_budget(
            total_budget=self.state.total_budget + value,
            remaining_budget=self.state.remaining_budget + value,
        )
        return self.state

    def add_to_savings(self, amount: Any) -> BudgetState:
        self._ensure_loaded()
        value = _positive_amount(amount)
        if _exceeds(value, self.state.remaining_budget):
            raise BudgetExceededError(
                "Transfer amount exceeds remaining budget!",
                details={"amount": value, "remaining": self.state.remaining_budget},
            )
        self._record("Transfer to Savings", "Budget transferred to savings", value, Mood.NEUTRAL)
        self._set_budget(remaining_budget=self.state.remaining_budget - value)
        self.state.savings = round(db.increment_savings(self.user_id, value), 2)
        self._publish_budget()
        return self.state

    def transfer_from_savings(self, amount: Any) -> BudgetState:
        self._ensure_loaded()
        value = _positive_amount(amount)
        if _exceeds(value, self.state.savings):
            raise InsufficientSavingsError(
                "Transfer amount exceeds savings!",
                details={"amount": value, "savings": self.state.savings},
            )
        self._record("Transfer from Savings", "Funds transferred from savings to budget", value, Mood.NEUTRAL)
        self._set_budget(
            total_budget=self.state.total_budget + value,
            remaining_budget=self.state.remaining_budget + value,
        )
        self.state.savings = round(db.increment_savings(self.user_id, -value), 2)
        self._publish_budget()
        return self.state

    def check_and_reset_monthly_budget(self, now: Optional[datetime] = None) -> bool:
        """Start a new budget month if the last reset was in an earlier month.

        Leftover budget is swept into savings first.  Returns True when a
        reset happened.
        """
        self._ensure_loaded()
        now = now or datetime.now()
        last = self.state.last_budget_reset or datetime.fromtimestamp(0)
        if (last.year, last.month) == (now.year, now.month):
            return False

        if self.state.remaining_budget > 0:
            self.add_to_savings(self.state.remaining_budget)
        self._set_budget(total_budget=0.0, remaining_budget=0.0)
        db.update_user(self.user_id, last_budget_reset=now.isoformat())
        self.state.last_budget_reset = now
        self.notifications.add(MONTHLY_RESET_MESSAGE)
        logger.info("Monthly budget reset for %s", self.user_id)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _record(self, title: str, description: str, amount: float, mood: Mood, date: Optional[Any] = None) -> Transaction:
        when = date or datetime.now()
        if hasattr(when, 'isoformat'):
            when = when.isoformat()
        txn = Transaction.from_record({
            'date': when,
            'amount': amount,
            'mood': mood,
            'title': title,
            'description': description,
            'user_id': self.user_id,
        })
        record = txn.to_record()
        if txn.timestamp is None:
            record['timestamp'] = datetime.now().timestamp() * 1000.0
        txn_id = db.insert_transaction(self.user_id, record)
        self._publish_transactions()
        return txn.with_changes(id=txn_id, timestamp=record['timestamp'])

    def _set_budget(self, **fields: float) -> None:
        fields = {name: round(value, 2) for name, value in fields.items()}
        db.update_budget(self.user_id, **fields)
        for name, value in fields.items():
            setattr(self.state, name, value)
        self._publish_budget()

    def _publish_transactions(self) -> None:
        self.feed.publish(self.transactions_topic, self.transactions())

    def _publish_budget(self) -> None:
        self.feed.publish(self.budget_topic, replace(self.state))
