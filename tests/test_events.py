from __future__ import annotations

import logging

from mood_budget.events import ChangeFeed


def test_publish_reaches_only_topic_subscribers() -> None:
    feed = ChangeFeed()
    seen_a, seen_b = [], []
    feed.subscribe("a", seen_a.append)
    feed.subscribe("b", seen_b.append)

    assert feed.publish("a", [1]) == 1
    assert seen_a == [[1]]
    assert seen_b == []
    assert feed.publish("nobody", []) == 0


def test_unsubscribe_is_idempotent() -> None:
    feed = ChangeFeed()
    seen = []
    sub = feed.subscribe("a", seen.append)
    sub.unsubscribe()
    sub.unsubscribe()
    feed.publish("a", "x")
    assert seen == []
    assert feed.subscriber_count("a") == 0


def test_subscription_as_context_manager() -> None:
    feed = ChangeFeed()
    seen = []
    with feed.subscribe("a", seen.append):
        feed.publish("a", 1)
    feed.publish("a", 2)
    assert seen == [1]


def test_failing_subscriber_does_not_block_others(caplog) -> None:
    feed = ChangeFeed()
    seen = []

    def boom(_snapshot):
        raise RuntimeError("subscriber bug")

    feed.subscribe("a", boom)
    feed.subscribe("a", seen.append)
    with caplog.at_level(logging.ERROR, logger="mood_budget.events"):
        delivered = feed.publish("a", "snap")
    assert delivered == 1
    assert seen == ["snap"]
    assert "subscriber bug" in caplog.text


def test_close_cancels_everything() -> None:
    feed = ChangeFeed()
    sub = feed.subscribe("a", lambda _: None)
    feed.subscribe("b", lambda _: None)
    feed.close()
    assert not sub.active
    assert feed.subscriber_count("a") == 0
    assert feed.publish("b", None) == 0
