"""Chat flow tests: stub advisor client, temporary store."""

from __future__ import annotations

import pytest

from mood_budget.advisor import DEFAULT_TITLE, FinancialAdvisor
from mood_budget.budget import BudgetLedger
from mood_budget.chat import APOLOGY_MESSAGE, ChatService, preview
from mood_budget.exceptions import ConversationNotFoundError, EmptyMessageError, ValidationError


def _service(client=None, user_id="u1"):
    ledger = BudgetLedger(user_id)
    ledger.load()
    advisor = FinancialAdvisor(client=client) if client is not None else None
    return ChatService(user_id, advisor, ledger)


def test_preview() -> None:
    assert preview("short") == "short"
    assert preview("x" * 31) == "x" * 30 + "..."


def test_first_message_creates_and_titles_conversation(temp_db, fake_client) -> None:
    client = fake_client("Sure, here's a plan", "Budget Plan")
    chat = _service(client)
    chat.ledger.set_total_budget(750)

    reply = chat.send_message(None, "Help me budget")

    assert reply.sender == "advisor"
    assert reply.text == "Sure, here's a plan"
    [conversation] = chat.list_conversations()
    assert conversation.id == reply.conversation_id
    assert conversation.name == "Budget Plan"
    assert conversation.last_message == "Sure, here's a plan..."
    assert [(m.sender, m.text) for m in chat.messages(conversation.id)] == [
        ("user", "Help me budget"),
        ("advisor", "Sure, here's a plan"),
    ]
    assert '"remaining_budget": 750' in client.calls[0]["config"].system_instruction


def test_follow_up_message_updates_preview(temp_db, fake_client) -> None:
    chat = _service(fake_client("first", "Title", "second"))
    conversation_id = chat.send_message(None, "hello").conversation_id

    long_text = "Should I move some of my budget into savings?"
    chat.send_message(conversation_id, long_text)

    conversation = chat.get_conversation(conversation_id)
    assert conversation.name == "Title"
    assert conversation.last_message == long_text[:30] + "..."
    assert len(chat.messages(conversation_id)) == 4


def test_advisor_failure_stores_apology(temp_db, fake_client) -> None:
    chat = _service(fake_client(RuntimeError("boom")))
    reply = chat.send_message(None, "hello")
    assert reply.text == APOLOGY_MESSAGE
    assert chat.get_conversation(reply.conversation_id).name == DEFAULT_TITLE
    assert [m.sender for m in chat.messages(reply.conversation_id)] == ["user", "advisor"]


def test_missing_advisor_stores_apology(temp_db) -> None:
    reply = _service().send_message(None, "hello")
    assert reply.text == APOLOGY_MESSAGE


def test_empty_message_is_rejected(temp_db, fake_client) -> None:
    chat = _service(fake_client())
    with pytest.raises(EmptyMessageError):
        chat.send_message(None, "   ")
    assert chat.list_conversations() == []


def test_unknown_conversation(temp_db, fake_client) -> None:
    chat = _service(fake_client())
    with pytest.raises(ConversationNotFoundError):
        chat.send_message("missing", "hello")


def test_manage_conversations(temp_db) -> None:
    chat = _service()
    rent = chat.create_conversation("Rent worries")
    food = chat.create_conversation("Food budget")

    assert [c.id for c in chat.list_conversations()] == [rent.id, food.id]
    assert [c.id for c in chat.search("RENT")] == [rent.id]
    assert len(chat.search("")) == 2

    assert chat.rename(food.id, "  Groceries  ").name == "Groceries"
    with pytest.raises(ValidationError):
        chat.rename(food.id, " ")

    chat.delete(rent.id)
    assert [c.id for c in chat.list_conversations()] == [food.id]
    with pytest.raises(ConversationNotFoundError):
        chat.get_conversation(rent.id)


def test_conversations_are_private_to_user(temp_db) -> None:
    mine = _service(user_id="u1").create_conversation("Mine")
    theirs = _service(user_id="u2")
    assert theirs.list_conversations() == []
    with pytest.raises(ConversationNotFoundError):
        theirs.delete(mine.id)


def test_watchers(temp_db, fake_client) -> None:
    chat = _service(fake_client("reply", "Title"))
    conversation = chat.create_conversation()
    conversation_snapshots, message_snapshots = [], []
    chat.watch_conversations(conversation_snapshots.append)
    chat.watch_messages(conversation.id, message_snapshots.append)

    chat.send_message(conversation.id, "hi")

    assert [len(s) for s in message_snapshots] == [0, 1, 2]
    assert len(conversation_snapshots[0]) == 1
    assert conversation_snapshots[-1][0].last_message == "hi"


def test_messages_are_private_to_user(temp_db, fake_client) -> None:
    mine = _service(fake_client("reply", "Title"))
    reply = mine.send_message(None, "my secret plans")
    theirs = _service(user_id="u2")

    with pytest.raises(ConversationNotFoundError):
        theirs.messages(reply.conversation_id)
    with pytest.raises(ConversationNotFoundError):
        theirs.watch_messages(reply.conversation_id, lambda _: None)
    assert theirs.feed.subscriber_count(theirs.messages_topic(reply.conversation_id)) == 0
