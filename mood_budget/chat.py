"""Advisor chat: conversations, messages and the send/reply flow."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from . import db
from .advisor import DEFAULT_TITLE, FinancialAdvisor, build_financial_summary
from .budget import BudgetLedger
from .data_processing import parse_timestamp
from .events import ChangeFeed, Subscription
from .exceptions import (
    AdvisorError,
    ConversationNotFoundError,
    EmptyMessageError,
    ValidationError,
)
from .models import ChatMessage, Conversation

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 30
APOLOGY_MESSAGE = (
    "I apologize, but I'm having trouble processing your request. Please try again."
)


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """First ``length`` characters, with ``...`` when the text was cut."""
    return text[:length] + ("..." if len(text) > length else "")


def _to_conversation(row: dict) -> Conversation:
    return Conversation(
        id=row['id'],
        name=row['name'],
        last_message=row.get('last_message') or '',
        unread_count=int(row.get('unread_count') or 0),
        created_at=parse_timestamp(row.get('created_at')),
    )


def _to_message(row: dict) -> ChatMessage:
    return ChatMessage(
        id=row['id'],
        conversation_id=row['conversation_id'],
        text=row['text'],
        sender=row['sender'],
        timestamp=parse_timestamp(row.get('timestamp')),
    )


class ChatService:
    def __init__(
        self,
        user_id: str,
        advisor: Optional[FinancialAdvisor],
        ledger: BudgetLedger,
        feed: Optional[ChangeFeed] = None,
        advisor_provider: Optional[Callable[[], Optional[FinancialAdvisor]]] = None,
    ):
        self.user_id = user_id
        self.advisor = advisor
        self.advisor_provider = advisor_provider
        self.ledger = ledger
        self.feed = feed or ledger.feed

    @property
    def conversations_topic(self) -> str:
        return f"conversations:{self.user_id}"

    @staticmethod
    def messages_topic(conversation_id: str) -> str:
        return f"messages:{conversation_id}"

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    def list_conversations(self) -> List[Conversation]:
        """Oldest first."""
        return [_to_conversation(row) for row in db.fetch_conversations(self.user_id)]

    def get_conversation(self, conversation_id: str) -> Conversation:
        row = db.fetch_conversation(conversation_id)
        if row is None or row.get('user_id') != self.user_id:
            raise ConversationNotFoundError("Conversation not found", details={"id": conversation_id})
        return _to_conversation(row)

    def search(self, query: str) -> List[Conversation]:
        needle = (query or '').strip().lower()
        conversations = self.list_conversations()
        if not needle:
            return conversations
        return [c for c in conversations if needle in c.name.lower()]

    def create_conversation(self, name: str = DEFAULT_TITLE) -> Conversation:
        conversation = _to_conversation(db.insert_conversation(self.user_id, name))
        self._publish_conversations()
        return conversation

    def rename(self, conversation_id: str, name: str) -> Conversation:
        cleaned = (name or '').strip()
        if not cleaned:
            raise ValidationError("Conversation name must not be empty")
        self.get_conversation(conversation_id)
        db.update_conversation(conversation_id, name=cleaned)
        self._publish_conversations()
        return self.get_conversation(conversation_id)

    def delete(self, conversation_id: str) -> None:
        self.get_conversation(conversation_id)
        db.delete_conversation(conversation_id)
        self._publish_conversations()
        self.feed.publish(self.messages_topic(conversation_id), [])

    def messages(self, conversation_id: str) -> List[ChatMessage]:
        """Oldest first."""
        self.get_conversation(conversation_id)
        return self._fetch_messages(conversation_id)

    @staticmethod
    def _fetch_messages(conversation_id: str) -> List[ChatMessage]:
        return [_to_message(row) for row in db.fetch_messages(conversation_id)]

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def send_message(self, conversation_id: Optional[str], text: str) -> ChatMessage:
        """Store the user's message, ask the advisor and store its reply.

        With no ``conversation_id`` a conversation is created and titled
        from the first exchange.  Advisor failures are stored as an
        apology so the thread never ends on an unanswered message.
        """
        if not text or not text.strip():
            raise EmptyMessageError("Message must not be empty")

        is_new = conversation_id is None
        if is_new:
            conversation_id = self.create_conversation().id
        else:
            self.get_conversation(conversation_id)

        self._add_message(conversation_id, text, 'user')
        if not is_new:
            db.update_conversation(conversation_id, last_message=preview(text))

        try:
            reply_text = self._ask(text)
        except AdvisorError as e:
            logger.error("Error generating advisor response: %s", e)
            reply = self._add_message(conversation_id, APOLOGY_MESSAGE, 'advisor')
            self._publish_conversations()
            return reply

        reply = self._add_message(conversation_id, reply_text, 'advisor')
        if is_new:
            title = self.advisor.title(text, reply_text)
            db.update_conversation(
                conversation_id,
                name=title,
                last_message=reply_text[:PREVIEW_LENGTH] + "...",
            )
        self._publish_conversations()
        return reply

    def _resolve_advisor(self) -> Optional[FinancialAdvisor]:
        if self.advisor is None and self.advisor_provider is not None:
            self.advisor = self.advisor_provider()
        return self.advisor

    def _ask(self, text: str) -> str:
        advisor = self._resolve_advisor()
        if advisor is None:
            raise AdvisorError("Advisor is not configured")
        summary = build_financial_summary(self.ledger.load(), self.ledger.transactions())
        return advisor.reply(text, summary)

    def _add_message(self, conversation_id: str, text: str, sender: str) -> ChatMessage:
        message = _to_message(db.insert_message(conversation_id, text, sender))
        self.feed.publish(self.messages_topic(conversation_id), self._fetch_messages(conversation_id))
        return message

    # ------------------------------------------------------------------
    # Watching
    # ------------------------------------------------------------------

    def watch_conversations(self, on_change: Callable[[List[Conversation]], None]) -> Subscription:
        subscription = self.feed.subscribe(self.conversations_topic, on_change)
        on_change(self.list_conversations())
        return subscription

    def watch_messages(self, conversation_id: str, on_change: Callable[[List[ChatMessage]], None]) -> Subscription:
        self.get_conversation(conversation_id)
        subscription = self.feed.subscribe(self.messages_topic(conversation_id), on_change)
        on_change(self.messages(conversation_id))
        return subscription

    def _publish_conversations(self) -> None:
        self.feed.publish(self.conversations_topic, self.list_conversations())
