"""Presentation rules for the notification center, banner, toasts and badge."""

from .policy import (
    CenterFilter,
    DateBucket,
    DateGroup,
    ViewMode,
    filter_notifications,
    group_by_date,
    order_by_priority,
    select_banner,
    select_toasts,
    toast_duration,
)
from .surfaces import (
    BadgeView,
    BannerView,
    CenterView,
    NotificationBanner,
    NotificationCenter,
    SurfaceStatus,
    Toast,
    ToastQueue,
    UnreadBadge,
)

__all__ = [
    "BadgeView",
    "BannerView",
    "CenterFilter",
    "CenterView",
    "DateBucket",
    "DateGroup",
    "NotificationBanner",
    "NotificationCenter",
    "SurfaceStatus",
    "Toast",
    "ToastQueue",
    "UnreadBadge",
    "ViewMode",
    "filter_notifications",
    "group_by_date",
    "order_by_priority",
    "select_banner",
    "select_toasts",
    "toast_duration",
]
