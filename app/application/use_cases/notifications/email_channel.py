"""Map persisted notifications onto outbound emails."""

from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.orm import Session

from app.domain.entities import Notification, NotificationType, OutboundEmail
from app.domain.exceptions import NoAddressError, ProfileNotFoundError
from app.infrastructure.email import send_email
from app.infrastructure.repositories import ProfileRepository

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "system"

TEMPLATE_TYPES: dict[NotificationType, str] = {
    NotificationType.APPOINTMENT: "appointment_confirmation",
    NotificationType.FOLLOW_UP: "appointment_reminder",
    NotificationType.PRESCRIPTION: "prescription",
    NotificationType.EMERGENCY: "emergency",
}

_CORRELATION_KEYS = (
    "appointment_id",
    "prescription_id",
    "treatment_plan_id",
    "patient_id",
    "dentist_id",
)

EmailRelay = Callable[[OutboundEmail], None]


def template_type_for(notification: Notification) -> str:
    if notification.type is NotificationType.APPOINTMENT and (
        notification.metadata or {}
    ).get("reminder_type"):
        return "appointment_reminder"
    return TEMPLATE_TYPES.get(notification.type, DEFAULT_TEMPLATE)


def _address_override(notification: Notification) -> str | None:
    candidate = (notification.metadata or {}).get("email")
    if isinstance(candidate, str) and "@" in candidate.strip():
        return candidate.strip()
    return None


def resolve_destination(session: Session, notification: Notification) -> str:
    """Return the address the email for ``notification`` should go to.

    ``metadata.email`` wins over the address stored on the owner's profile.
    """

    override = _address_override(notification)
    if override:
        return override

    profile = ProfileRepository(session).get_by_user_id(notification.owner)
    if profile is None:
        raise ProfileNotFoundError(
            f"No profile found for {notification.owner}",
            notification_id=notification.id,
        )
    if not (profile.email or "").strip():
        raise NoAddressError(
            f"Profile of {notification.owner} has no email address",
            notification_id=notification.id,
        )
    return profile.email.strip()


def build_outbound_email(notification: Notification, destination: str) -> OutboundEmail:
    correlation_ids = {
        "notification_id": str(notification.id),
        "owner": notification.owner,
    }
    metadata = notification.metadata or {}
    for key in _CORRELATION_KEYS:
        if metadata.get(key) is not None:
            correlation_ids[key] = str(metadata[key])
    return OutboundEmail(
        to=destination,
        subject=notification.title,
        body=notification.message,
        template_type=template_type_for(notification),
        correlation_ids=correlation_ids,
    )


def send_notification_email(
    session: Session,
    notification: Notification,
    *,
    relay: EmailRelay | None = None,
) -> OutboundEmail:
    """Deliver ``notification`` by email and return the message handed to the relay.

    Raises a :class:`ChannelDispatchError` subclass when delivery fails.
    """

    email = build_outbound_email(notification, resolve_destination(session, notification))
    (relay or send_email)(email)
    logger.info(
        "Notification %s emailed using template %s", notification.id, email.template_type
    )
    return email


__all__ = [
    "DEFAULT_TEMPLATE",
    "EmailRelay",
    "TEMPLATE_TYPES",
    "build_outbound_email",
    "resolve_destination",
    "send_notification_email",
    "template_type_for",
]
