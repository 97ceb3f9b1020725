"""Realtime notification helpers for the infrastructure layer."""

from .change_feed import ChangeFeed, notification_change_feed
from .feed import (
    RealtimeFeedClient,
    SubscriptionHandle,
    normalize_insert_event,
    notification_feed_client,
    notification_from_payload,
)
from .manager import NotificationConnectionManager, notification_manager
from .publisher import (
    NotificationPublisher,
    dispatch_notification,
    notification_publisher,
    serialize_notification,
)

__all__ = [
    "ChangeFeed",
    "notification_change_feed",
    "RealtimeFeedClient",
    "SubscriptionHandle",
    "normalize_insert_event",
    "notification_feed_client",
    "notification_from_payload",
    "NotificationConnectionManager",
    "notification_manager",
    "NotificationPublisher",
    "notification_publisher",
    "dispatch_notification",
    "serialize_notification",
]
