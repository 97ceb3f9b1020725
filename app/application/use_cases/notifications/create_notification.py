"""Dispatcher: persist a notification, then fan it out to its channels."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from sqlalchemy.orm import Session

from app.application.use_cases.preferences import Channel, evaluate_channel, load_preferences
from app.domain.entities import (
    Notification,
    NotificationCategory,
    NotificationType,
    build_notification,
)
from app.domain.exceptions import ChannelDispatchError
from app.infrastructure.notifications import dispatch_notification
from app.infrastructure.repositories import NotificationRepository

from .email_channel import EmailRelay, send_notification_email

logger = logging.getLogger(__name__)


class ChannelOutcome(str, enum.Enum):
    SENT = "sent"
    SKIPPED = "skipped"
    SUPPRESSED = "suppressed"
    FAILED = "failed"


@dataclass
class DispatchResult:
    """Outcome of :func:`create_notification`.

    The notification is always persisted when a result exists; channel
    failures are reported here instead of being raised.
    """

    notification: Notification
    channels: dict[str, ChannelOutcome] = field(default_factory=dict)
    channel_errors: list[ChannelDispatchError] = field(default_factory=list)

    @property
    def id(self) -> int:
        assert self.notification.id is not None
        return self.notification.id

    @property
    def delivered(self) -> bool:
        return not self.channel_errors

    def raise_for_channels(self) -> None:
        if self.channel_errors:
            raise self.channel_errors[0]


def create_notification(
    session: Session,
    *,
    owner: str,
    title: str,
    message: str,
    type: NotificationType | str = NotificationType.SYSTEM,
    category: NotificationCategory | str = NotificationCategory.INFO,
    action_url: str | None = None,
    metadata: Mapping[str, Any] | None = None,
    expires_at: datetime | None = None,
    send_email: bool = True,
    now: datetime | None = None,
    relay: EmailRelay | None = None,
) -> DispatchResult:
    """Persist a notification for ``owner`` and attempt the email channel.

    ``ValidationError`` and ``PersistenceError`` propagate and no channel is
    attempted. Email failures never roll the persisted record back.
    """

    notification = build_notification(
        owner=owner,
        type=type,
        category=category,
        title=title,
        message=message,
        action_url=action_url,
        metadata=metadata,
        expires_at=expires_at,
        now=now,
    )
    saved = NotificationRepository(session).create(notification)
    logger.info(
        "Created %s notification %s for %s", saved.type.value, saved.id, saved.owner
    )
    dispatch_notification(saved)

    result = DispatchResult(notification=saved)
    if not send_email:
        result.channels[Channel.EMAIL.value] = ChannelOutcome.SKIPPED
        return result

    result.channels[Channel.EMAIL.value] = _dispatch_email(
        session, saved, result, now=now, relay=relay
    )
    return result


def _dispatch_email(
    session: Session,
    notification: Notification,
    result: DispatchResult,
    *,
    now: datetime | None,
    relay: EmailRelay | None,
) -> ChannelOutcome:
    preferences = load_preferences(session, notification.owner)
    decision = evaluate_channel(preferences, notification, Channel.EMAIL, now)
    if not decision.allowed:
        logger.info(
            "Email for notification %s suppressed: %s", notification.id, decision.reason
        )
        return ChannelOutcome.SUPPRESSED

    try:
        send_notification_email(session, notification, relay=relay)
    except ChannelDispatchError as exc:
        logger.warning("Email for notification %s failed: %s", notification.id, exc)
        exc.notification_id = notification.id
        result.channel_errors.append(exc)
        return ChannelOutcome.FAILED
    except Exception as exc:
        logger.warning(
            "Email for notification %s failed unexpectedly: %r", notification.id, exc
        )
        error = ChannelDispatchError(
            str(exc) or exc.__class__.__name__, notification_id=notification.id
        )
        error.__cause__ = exc
        result.channel_errors.append(error)
        return ChannelOutcome.FAILED
    return ChannelOutcome.SENT


__all__ = ["ChannelOutcome", "DispatchResult", "create_notification"]
