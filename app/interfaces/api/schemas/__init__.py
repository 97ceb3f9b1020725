from .notification import (
    DispatchRead,
    MarkAllReadResponse,
    NotificationCreate,
    NotificationRead,
    UnreadCountRead,
)
from .preferences import PreferencesRead, PreferencesUpdate

__all__ = [
    "DispatchRead",
    "MarkAllReadResponse",
    "NotificationCreate",
    "NotificationRead",
    "PreferencesRead",
    "PreferencesUpdate",
    "UnreadCountRead",
]
