"""Per-user notification feed backed by the ``notifications`` table."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from . import db
from .data_processing import parse_timestamp
from .events import ChangeFeed, Subscription
from .exceptions import NotificationNotFoundError, ValidationError
from .models import NOTIFICATION_TYPES, Notification

logger = logging.getLogger(__name__)


def _to_notification(row: dict) -> Notification:
    return Notification(
        id=row['id'],
        message=row['message'],
        type=row.get('type') or 'info',
        created_at=parse_timestamp(row.get('created_at')),
    )


class NotificationCenter:
    """Add, remove and watch notifications for one user."""

    def __init__(self, user_id: str, feed: Optional[ChangeFeed] = None):
        self.user_id = user_id
        self.feed = feed or ChangeFeed()

    @property
    def topic(self) -> str:
        return f"notifications:{self.user_id}"

    def list(self) -> List[Notification]:
        """Newest first."""
        return [_to_notification(row) for row in db.fetch_notifications(self.user_id)]

    def add(self, message: str, type: str = 'info') -> Notification:
        if type not in NOTIFICATION_TYPES:
            raise ValidationError(f"Unknown notification type: {type!r}", details={"type": type})
        if not message or not message.strip():
            raise ValidationError("Notification message must not be empty")
        row = db.insert_notification(self.user_id, message.strip(), type)
        logger.info("Notification added for %s: %s", self.user_id, message)
        self._publish()
        return _to_notification(row)

    def remove(self, notification_id: str) -> None:
        if not db.delete_notification(notification_id):
            raise NotificationNotFoundError(
                "Notification not found", details={"id": notification_id}
            )
        self._publish()

    def watch(self, on_change: Callable[[List[Notification]], None]) -> Subscription:
        """Subscribe to the feed; ``on_change`` also receives the current list."""
        subscription = self.feed.subscribe(self.topic, on_change)
        on_change(self.list())
        return subscription

    def _publish(self) -> None:
        self.feed.publish(self.topic, self.list())
