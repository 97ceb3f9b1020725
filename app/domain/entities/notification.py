"""Domain entity representing a user notification."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Mapping

from app.domain.exceptions import ValidationError
from app.utils import ensure_app_timezone, now_in_app_timezone


class NotificationType(str, enum.Enum):
    APPOINTMENT = "appointment"
    PRESCRIPTION = "prescription"
    TREATMENT_PLAN = "treatment_plan"
    FOLLOW_UP = "follow_up"
    EMERGENCY = "emergency"
    SYSTEM = "system"
    PAYMENT = "payment"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"
    INFO = "info"


class NotificationCategory(str, enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    URGENT = "urgent"
    NORMAL = "normal"
    LOW = "low"


class Priority(enum.IntEnum):
    """Ordinal priority used only for sorting and tie-breaking."""

    LOW = 1
    NORMAL = 2
    URGENT = 3


# Legacy spellings accepted at the parsing edge.
_CATEGORY_ALIASES: dict[str, NotificationCategory] = {
    "high": NotificationCategory.URGENT,
    "medium": NotificationCategory.NORMAL,
}

_CATEGORY_PRIORITY: dict[NotificationCategory, Priority] = {
    NotificationCategory.URGENT: Priority.URGENT,
    NotificationCategory.ERROR: Priority.URGENT,
    NotificationCategory.NORMAL: Priority.NORMAL,
    NotificationCategory.INFO: Priority.NORMAL,
    NotificationCategory.SUCCESS: Priority.NORMAL,
    NotificationCategory.WARNING: Priority.NORMAL,
    NotificationCategory.LOW: Priority.LOW,
}


def parse_notification_type(value: NotificationType | str) -> NotificationType:
    """Return the :class:`NotificationType` for ``value`` or raise ``ValidationError``."""

    if isinstance(value, NotificationType):
        return value
    try:
        return NotificationType(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown notification type '{value}'") from exc


def parse_category(value: NotificationCategory | str) -> NotificationCategory:
    """Return the canonical category, accepting ``high``/``medium`` spellings."""

    if isinstance(value, NotificationCategory):
        return value
    normalized = str(value).strip().lower()
    if normalized in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[normalized]
    try:
        return NotificationCategory(normalized)
    except ValueError as exc:
        raise ValidationError(f"Unknown notification category '{value}'") from exc


def priority_for(category: NotificationCategory | str) -> Priority:
    return _CATEGORY_PRIORITY[parse_category(category)]


@dataclass
class Notification:
    """Canonical notification record delivered to a specific owner."""

    id: int | None
    owner: str
    type: NotificationType
    category: NotificationCategory
    title: str
    message: str
    action_url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False
    created_at: datetime | None = None
    expires_at: datetime | None = None

    @property
    def priority(self) -> Priority:
        return _CATEGORY_PRIORITY[self.category]

    @property
    def is_urgent(self) -> bool:
        return self.priority is Priority.URGENT

    @property
    def has_action(self) -> bool:
        return bool(self.action_url)

    def as_read(self) -> "Notification":
        """Return a copy flagged as read. Read state never goes back to unread."""

        if self.is_read:
            return self
        return replace(self, is_read=True)

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        reference = ensure_app_timezone(now) if now else now_in_app_timezone()
        return self.expires_at < reference


@dataclass(frozen=True)
class AppointmentContext:
    appointment_id: str
    appointment_date: str | None = None
    dentist_name: str | None = None
    reminder_type: str | None = None


@dataclass(frozen=True)
class PrescriptionContext:
    prescription_id: str


@dataclass(frozen=True)
class TreatmentPlanContext:
    treatment_plan_id: str
    action: str | None = None


NotificationContext = AppointmentContext | PrescriptionContext | TreatmentPlanContext


def notification_context(notification: Notification) -> NotificationContext | None:
    """Return the typed metadata extension for ``notification`` when present.

    Keys that are not part of the typed extension stay available through
    ``notification.metadata``.
    """

    metadata = notification.metadata or {}
    if notification.type in (NotificationType.APPOINTMENT, NotificationType.FOLLOW_UP):
        appointment_id = metadata.get("appointment_id")
        if appointment_id is None:
            return None
        return AppointmentContext(
            appointment_id=str(appointment_id),
            appointment_date=_optional_str(metadata.get("appointment_date")),
            dentist_name=_optional_str(metadata.get("dentist_name")),
            reminder_type=_optional_str(metadata.get("reminder_type")),
        )
    if notification.type is NotificationType.PRESCRIPTION:
        prescription_id = metadata.get("prescription_id")
        if prescription_id is None:
            return None
        return PrescriptionContext(prescription_id=str(prescription_id))
    if notification.type is NotificationType.TREATMENT_PLAN:
        plan_id = metadata.get("treatment_plan_id")
        if plan_id is None:
            return None
        return TreatmentPlanContext(
            treatment_plan_id=str(plan_id),
            action=_optional_str(metadata.get("action")),
        )
    return None


def build_notification(
    *,
    owner: str,
    type: NotificationType | str,
    category: NotificationCategory | str,
    title: str,
    message: str,
    action_url: str | None = None,
    metadata: Mapping[str, Any] | None = None,
    expires_at: datetime | None = None,
    now: datetime | None = None,
) -> Notification:
    """Validate creation input and return an unsaved canonical record."""

    owner = (owner or "").strip() if isinstance(owner, str) else ""
    if not owner:
        raise ValidationError("Notification owner is required")

    title = (title or "").strip()
    message = (message or "").strip()
    if not title:
        raise ValidationError("Notification title must not be empty")
    if not message:
        raise ValidationError("Notification message must not be empty")

    notification_type = parse_notification_type(type)
    notification_category = parse_category(category)

    created_at = ensure_app_timezone(now) if now else now_in_app_timezone()
    expires = ensure_app_timezone(expires_at)
    if expires is not None and expires <= created_at:
        raise ValidationError("expires_at must be in the future")

    return Notification(
        id=None,
        owner=owner,
        type=notification_type,
        category=notification_category,
        title=title,
        message=message,
        action_url=(action_url or "").strip() or None,
        metadata=_normalize_metadata(metadata),
        is_read=False,
        created_at=created_at,
        expires_at=expires,
    )


def _normalize_metadata(metadata: Mapping[str, Any] | None) -> dict[str, Any]:
    if metadata is None:
        return {}
    if not isinstance(metadata, Mapping):
        raise ValidationError("Notification metadata must be a mapping")
    payload = {str(key): value for key, value in metadata.items()}
    try:
        json.dumps(payload)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Notification metadata must be JSON serializable") from exc
    return payload


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


__all__ = [
    "AppointmentContext",
    "Notification",
    "NotificationCategory",
    "NotificationContext",
    "NotificationType",
    "PrescriptionContext",
    "Priority",
    "TreatmentPlanContext",
    "build_notification",
    "notification_context",
    "parse_category",
    "parse_notification_type",
    "priority_for",
]
