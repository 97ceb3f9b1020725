"""Pure selection rules shared by the notification surfaces."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from app.domain.entities import Notification, parse_notification_type
from app.domain.exceptions import ValidationError
from app.utils import ensure_app_timezone, local_midnight, now_in_app_timezone


class ViewMode(str, enum.Enum):
    CHRONOLOGICAL = "chronological"
    GROUPED = "grouped"


class DateBucket(str, enum.Enum):
    TODAY = "Today"
    YESTERDAY = "Yesterday"
    THIS_WEEK = "This Week"
    EARLIER = "Earlier"


@dataclass(frozen=True)
class DateGroup:
    label: DateBucket
    notifications: tuple[Notification, ...]


@dataclass(frozen=True)
class CenterFilter:
    """Facet applied by the notification center.

    ``kind`` is one of ``all``, ``unread``, ``urgent`` or ``type``; the latter
    carries the notification type to keep.
    """

    kind: str = "all"
    type: str | None = None

    @classmethod
    def parse(cls, value: "CenterFilter | str | None") -> "CenterFilter":
        if isinstance(value, CenterFilter):
            return value
        raw = (value or "all").strip().lower()
        if raw in ("all", "unread", "urgent"):
            return cls(raw)
        if raw.startswith("type:"):
            raw = raw[len("type:") :]
        try:
            return cls("type", parse_notification_type(raw).value)
        except ValidationError as exc:
            raise ValidationError(f"Unknown notification filter '{value}'") from exc

    def matches(self, notification: Notification) -> bool:
        if self.kind == "unread":
            return not notification.is_read
        if self.kind == "urgent":
            return notification.is_urgent
        if self.kind == "type":
            return notification.type.value == self.type
        return True


def _timestamp(notification: Notification) -> float:
    return notification.created_at.timestamp() if notification.created_at else 0.0


def priority_sort_key(notification: Notification) -> tuple[int, float]:
    return (int(notification.priority), _timestamp(notification))


def order_by_priority(notifications: Iterable[Notification]) -> list[Notification]:
    """Sort by priority rank, then newest first within the same rank."""

    return sorted(notifications, key=priority_sort_key, reverse=True)


def order_by_recency(notifications: Iterable[Notification]) -> list[Notification]:
    return sorted(notifications, key=_timestamp, reverse=True)


def matches_query(notification: Notification, query: str | None) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    haystacks = (notification.title, notification.message, notification.type.value)
    return any(needle in (value or "").lower() for value in haystacks)


def filter_notifications(
    notifications: Iterable[Notification],
    *,
    query: str | None = None,
    facet: CenterFilter | str | None = None,
) -> list[Notification]:
    """Apply the center search and filter facet, keeping input order."""

    center_filter = CenterFilter.parse(facet)
    return [
        notification
        for notification in notifications
        if center_filter.matches(notification) and matches_query(notification, query)
    ]


def bucket_for(created_at: datetime | None, now: datetime | None = None) -> DateBucket:
    """Return the date bucket of ``created_at`` relative to local midnight."""

    if created_at is None:
        return DateBucket.EARLIER
    today = local_midnight(now or now_in_app_timezone())
    created_at = ensure_app_timezone(created_at)
    if created_at >= today:
        return DateBucket.TODAY
    if created_at >= today - timedelta(days=1):
        return DateBucket.YESTERDAY
    if created_at >= today - timedelta(days=7):
        return DateBucket.THIS_WEEK
    return DateBucket.EARLIER


def group_by_date(
    notifications: Iterable[Notification], now: datetime | None = None
) -> list[DateGroup]:
    """Group notifications into date buckets, omitting empty ones."""

    now = now or now_in_app_timezone()
    buckets: dict[DateBucket, list[Notification]] = {bucket: [] for bucket in DateBucket}
    for notification in notifications:
        buckets[bucket_for(notification.created_at, now)].append(notification)
    return [
        DateGroup(bucket, tuple(items)) for bucket, items in buckets.items() if items
    ]


def select_banner(
    notifications: Iterable[Notification],
    max_visible: int,
    dismissed: Iterable[int] = (),
) -> tuple[list[Notification], int]:
    """Return the visible banner records and how many more qualify.

    Every unread, undismissed record qualifies; priority only decides the order.
    """

    hidden = set(dismissed)
    candidates = order_by_priority(
        notification
        for notification in notifications
        if not notification.is_read and notification.id not in hidden
    )
    visible = candidates[: max(0, max_visible)]
    return visible, len(candidates) - len(visible)


def overflow_label(overflow_count: int) -> str | None:
    return f"+{overflow_count} more" if overflow_count > 0 else None


def select_toasts(
    notifications: Sequence[Notification],
    *,
    now: datetime | None = None,
    recency_seconds: float,
    already_shown: Iterable[int] = (),
) -> list[Notification]:
    """Return unread urgent records created within the recency window.

    Records listed in ``already_shown`` are skipped so each one toasts once.
    """

    reference = ensure_app_timezone(now) if now else now_in_app_timezone()
    cutoff = reference - timedelta(seconds=recency_seconds)
    shown = set(already_shown)
    return order_by_priority(
        notification
        for notification in notifications
        if notification.is_urgent
        and not notification.is_read
        and notification.id not in shown
        and notification.created_at is not None
        and cutoff <= notification.created_at <= reference
    )


def toast_duration(notification: Notification, default_seconds: float) -> float:
    """Seconds before a toast hides itself; ``0`` means manual dismissal."""

    return 0.0 if notification.is_urgent else default_seconds


__all__ = [
    "CenterFilter",
    "DateBucket",
    "DateGroup",
    "ViewMode",
    "bucket_for",
    "filter_notifications",
    "group_by_date",
    "matches_query",
    "order_by_priority",
    "order_by_recency",
    "overflow_label",
    "priority_sort_key",
    "select_banner",
    "select_toasts",
    "toast_duration",
]
