"""In-process change feed.

Services publish a fresh snapshot of a collection after every write; pages
and tests subscribe to a topic and get an explicit handle they must
``unsubscribe()`` (or let :meth:`ChangeFeed.close` cancel) when the owning
session ends.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]


class Subscription:
    """Handle returned by :meth:`ChangeFeed.subscribe`."""

    def __init__(self, feed: 'ChangeFeed', topic: str, callback: Callback):
        self._feed = feed
        self.topic = topic
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._feed._remove(self)

    def __enter__(self) -> 'Subscription':
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.unsubscribe()


class ChangeFeed:
    """Topic-based publish/subscribe for collection snapshots."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: Dict[str, List[Subscription]] = {}

    def subscribe(self, topic: str, on_change: Callback) -> Subscription:
        subscription = Subscription(self, topic, on_change)
        with self._lock:
            self._subscribers.setdefault(topic, []).append(subscription)
        return subscription

    def publish(self, topic: str, snapshot: Any) -> int:
        """Deliver ``snapshot`` to live subscribers. Returns the delivery count."""
        with self._lock:
            targets = list(self._subscribers.get(topic, ()))
        delivered = 0
        for subscription in targets:
            if not subscription.active:
                continue
            try:
                subscription.callback(snapshot)
                delivered += 1
            except Exception:
                logger.exception("Subscriber for '%s' raised while handling a snapshot", topic)
        return delivered

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._subscribers.get(topic, ()))

    def close(self) -> None:
        """Cancel every subscription."""
        with self._lock:
            subscriptions = [s for subs in self._subscribers.values() for s in subs]
            self._subscribers.clear()
        for subscription in subscriptions:
            subscription.active = False

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subscribers.get(subscription.topic)
            if subs and subscription in subs:
                subs.remove(subscription)
                if not subs:
                    del self._subscribers[subscription.topic]
