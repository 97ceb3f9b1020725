"""Realtime feed client that turns change feed inserts into notifications."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from app.domain.entities import (
    Notification,
    NotificationCategory,
    NotificationType,
    parse_category,
    parse_notification_type,
)
from app.domain.exceptions import SubscriptionError, ValidationError
from app.utils import parse_iso_datetime

from .change_feed import ChangeEvent, ChangeFeed, notification_change_feed

logger = logging.getLogger(__name__)

_handle_ids = itertools.count(1)


@dataclass
class SubscriptionHandle:
    """Opaque handle returned by :meth:`RealtimeFeedClient.subscribe`."""

    owner: str
    token: int | None
    id: int = field(default_factory=lambda: next(_handle_ids))

    @property
    def active(self) -> bool:
        return self.token is not None


class RealtimeFeedClient:
    """Subscribe to insert events for one owner at a time."""

    def __init__(self, feed: ChangeFeed) -> None:
        self._feed = feed

    def subscribe(
        self, owner: str, on_insert: Callable[[Notification], None]
    ) -> SubscriptionHandle:
        """Deliver every new notification of ``owner`` to ``on_insert``.

        Raises :class:`SubscriptionError` when the subscription cannot be set up.
        """

        if not owner:
            raise SubscriptionError("A subscription requires an owner")

        def _on_event(event: ChangeEvent) -> None:
            notification = normalize_insert_event(event)
            if notification is None or notification.owner != owner:
                return
            on_insert(notification)

        try:
            token = self._feed.listen(owner, _on_event)
        except RuntimeError as exc:
            raise SubscriptionError(
                f"Unable to subscribe to notifications of {owner}: no running event loop"
            ) from exc
        logger.debug("Subscribed to notification inserts of %s (token %s)", owner, token)
        return SubscriptionHandle(owner=owner, token=token)

    def unsubscribe(self, handle: SubscriptionHandle | None) -> None:
        """Tear ``handle`` down. Safe to call repeatedly or with ``None``."""

        if handle is None or handle.token is None:
            return
        token, handle.token = handle.token, None
        self._feed.remove(token)
        logger.debug("Unsubscribed from notification inserts of %s", handle.owner)


def normalize_insert_event(event: ChangeEvent) -> Notification | None:
    """Return the canonical notification carried by ``event``.

    Events that are not inserts or whose record is malformed are logged and ignored.
    """

    if not isinstance(event, dict) or event.get("type") != "INSERT":
        return None
    record = event.get("record")
    if not isinstance(record, dict):
        logger.warning("Ignoring insert event without a record")
        return None
    try:
        return notification_from_payload(record)
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Ignoring malformed notification insert: %s", exc)
        return None


def notification_from_payload(record: dict[str, Any]) -> Notification:
    """Build a :class:`Notification` from its wire representation."""

    metadata = record.get("metadata")
    try:
        category = parse_category(record.get("category") or NotificationCategory.INFO)
        notification_type = parse_notification_type(record.get("type") or NotificationType.SYSTEM)
    except ValidationError as exc:
        raise ValueError(str(exc)) from exc
    return Notification(
        id=int(record["id"]),
        owner=str(record["owner"]),
        type=notification_type,
        category=category,
        title=str(record.get("title") or ""),
        message=str(record.get("message") or ""),
        action_url=record.get("action_url") or None,
        metadata=dict(metadata) if isinstance(metadata, dict) else {},
        is_read=bool(record.get("is_read", False)),
        created_at=parse_iso_datetime(record.get("created_at")),
        expires_at=parse_iso_datetime(record.get("expires_at")),
    )


notification_feed_client = RealtimeFeedClient(notification_change_feed)


__all__ = [
    "RealtimeFeedClient",
    "SubscriptionHandle",
    "normalize_insert_event",
    "notification_feed_client",
    "notification_from_payload",
]
