"""Read-side and read-state operations on an owner's notifications."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from app.domain.entities import Notification
from app.domain.exceptions import NotificationNotFoundError
from app.infrastructure.repositories import NotificationRepository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


def list_notifications(
    session: Session,
    owner: str,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    unread_only: bool = False,
) -> Sequence[Notification]:
    """Return ``owner``'s notifications, newest first."""

    return NotificationRepository(session).list_for_owner(
        owner, limit=limit, offset=offset, unread_only=unread_only
    )


def get_notification(session: Session, owner: str, notification_id: int) -> Notification:
    notification = NotificationRepository(session).get(notification_id, owner=owner)
    if notification is None:
        raise NotificationNotFoundError(notification_id, owner)
    return notification


def count_unread(session: Session, owner: str) -> int:
    return NotificationRepository(session).count_unread(owner)


def mark_as_read(session: Session, owner: str, notification_id: int) -> Notification:
    """Flag a notification as read. Calling it again changes nothing."""

    repository = NotificationRepository(session)
    notification = repository.get(notification_id, owner=owner)
    if notification is None:
        raise NotificationNotFoundError(notification_id, owner)
    if notification.is_read:
        return notification
    repository.mark_as_read([notification_id], owner=owner)
    return notification.as_read()


def mark_all_as_read(session: Session, owner: str) -> int:
    """Flag every unread notification of ``owner`` as read; return how many changed."""

    changed = NotificationRepository(session).mark_all_as_read(owner)
    logger.debug("Marked %s notification(s) of %s as read", changed, owner)
    return changed


def delete_notification(session: Session, owner: str, notification_id: int) -> None:
    """Permanently remove a notification of ``owner``."""

    if not NotificationRepository(session).delete(notification_id, owner=owner):
        raise NotificationNotFoundError(notification_id, owner)
    logger.info("Deleted notification %s of %s", notification_id, owner)


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "count_unread",
    "delete_notification",
    "get_notification",
    "list_notifications",
    "mark_all_as_read",
    "mark_as_read",
]
