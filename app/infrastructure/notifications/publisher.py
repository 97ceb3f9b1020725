"""Utility helpers to push persisted notifications onto the change feed."""

from __future__ import annotations

import logging
from typing import Any

from app.domain.entities import Notification

from .change_feed import ChangeFeed, notification_change_feed

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Serialize notifications and publish them as insert events."""

    def __init__(self, feed: ChangeFeed) -> None:
        self._feed = feed

    def dispatch(self, notification: Notification) -> int:
        """Publish ``notification`` to every listener of its owner."""

        delivered = self._feed.publish_insert(notification.owner, self._serialize(notification))
        logger.debug(
            "Published notification %s to %s listener(s)", notification.id, delivered
        )
        return delivered

    @staticmethod
    def _serialize(notification: Notification) -> dict[str, Any]:
        return {
            "id": notification.id,
            "owner": notification.owner,
            "type": notification.type.value,
            "category": notification.category.value,
            "title": notification.title,
            "message": notification.message,
            "action_url": notification.action_url,
            "metadata": dict(notification.metadata or {}),
            "is_read": notification.is_read,
            "created_at": notification.created_at.isoformat()
            if notification.created_at
            else None,
            "expires_at": notification.expires_at.isoformat()
            if notification.expires_at
            else None,
        }


notification_publisher = NotificationPublisher(notification_change_feed)


def dispatch_notification(notification: Notification) -> int:
    """Public helper that delegates to the shared publisher instance."""

    return notification_publisher.dispatch(notification)


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the wire representation for ``notification``."""

    return NotificationPublisher._serialize(notification)


__all__ = [
    "NotificationPublisher",
    "notification_publisher",
    "dispatch_notification",
    "serialize_notification",
]
