"""Decide whether a notification may interrupt its owner on a channel."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime

from app.domain.entities import Notification, NotificationPreferences, NotificationType
from app.utils import ensure_app_timezone, now_in_app_timezone, parse_time_of_day

logger = logging.getLogger(__name__)


class Channel(str, enum.Enum):
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"
    IN_APP = "in_app"


INTERRUPTIVE_CHANNELS = frozenset({Channel.EMAIL, Channel.SMS, Channel.PUSH})

_CHANNEL_TOGGLES = {
    Channel.EMAIL: "email_enabled",
    Channel.SMS: "sms_enabled",
    Channel.PUSH: "push_enabled",
    Channel.IN_APP: "in_app_enabled",
}

_TYPE_TOGGLES = {
    NotificationType.APPOINTMENT: "appointment_reminders",
    NotificationType.FOLLOW_UP: "appointment_reminders",
    NotificationType.PRESCRIPTION: "prescription_updates",
    NotificationType.TREATMENT_PLAN: "treatment_plan_updates",
    NotificationType.EMERGENCY: "emergency_alerts",
}


@dataclass(frozen=True)
class ChannelDecision:
    channel: Channel
    allowed: bool
    reason: str


def is_within_quiet_hours(
    preferences: NotificationPreferences, now: datetime | None = None
) -> bool:
    """Return ``True`` when ``now`` falls inside the owner's quiet window.

    The window is inclusive of its start, exclusive of its end and may wrap
    past midnight. A window whose start equals its end is empty.
    """

    try:
        start = parse_time_of_day(preferences.quiet_hours_start)
        end = parse_time_of_day(preferences.quiet_hours_end)
    except ValueError as exc:
        logger.warning("Ignoring invalid quiet hours of %s: %s", preferences.owner, exc)
        return False

    if start == end:
        return False

    local = ensure_app_timezone(now) if now else now_in_app_timezone()
    current = local.time().replace(second=0, microsecond=0)
    if start < end:
        return start <= current < end
    return current >= start or current < end


def bypasses_quiet_hours(notification: Notification) -> bool:
    return notification.is_urgent or notification.type is NotificationType.EMERGENCY


def evaluate_channel(
    preferences: NotificationPreferences,
    notification: Notification,
    channel: Channel | str,
    now: datetime | None = None,
) -> ChannelDecision:
    """Apply channel toggle, category toggle and quiet hours, in that order."""

    channel = Channel(channel)
    if not getattr(preferences, _CHANNEL_TOGGLES[channel]):
        return ChannelDecision(channel, False, "channel_disabled")

    toggle = _TYPE_TOGGLES.get(notification.type, "system_notifications")
    if not getattr(preferences, toggle):
        return ChannelDecision(channel, False, "category_disabled")

    if (
        channel in INTERRUPTIVE_CHANNELS
        and not bypasses_quiet_hours(notification)
        and is_within_quiet_hours(preferences, now)
    ):
        return ChannelDecision(channel, False, "quiet_hours")

    return ChannelDecision(channel, True, "allowed")
