"""Session-side state shared by the notification surfaces."""

from .cache import CacheErrors, NotificationCache
from .gateway import NotificationGateway, StoreNotificationGateway

__all__ = [
    "CacheErrors",
    "NotificationCache",
    "NotificationGateway",
    "StoreNotificationGateway",
]
