"""Domain entity describing per-owner notification preferences."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import datetime

DEFAULT_QUIET_HOURS_START = "22:00"
DEFAULT_QUIET_HOURS_END = "07:00"


@dataclass
class NotificationPreferences:
    """Channel, category and quiet hours configuration for one owner."""

    owner: str
    email_enabled: bool = True
    sms_enabled: bool = False
    push_enabled: bool = False
    in_app_enabled: bool = True
    appointment_reminders: bool = True
    prescription_updates: bool = True
    treatment_plan_updates: bool = True
    emergency_alerts: bool = True
    system_notifications: bool = True
    quiet_hours_start: str = DEFAULT_QUIET_HOURS_START
    quiet_hours_end: str = DEFAULT_QUIET_HOURS_END
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def defaults(cls, owner: str) -> "NotificationPreferences":
        return cls(owner=owner)

    def to_dict(self) -> dict[str, object]:
        payload = asdict(self)
        payload.pop("created_at", None)
        payload.pop("updated_at", None)
        return payload


#: Fields that may be changed through a partial update.
UPDATABLE_PREFERENCE_FIELDS: frozenset[str] = frozenset(
    item.name
    for item in fields(NotificationPreferences)
    if item.name not in {"owner", "created_at", "updated_at"}
)

BOOLEAN_PREFERENCE_FIELDS: frozenset[str] = UPDATABLE_PREFERENCE_FIELDS - {
    "quiet_hours_start",
    "quiet_hours_end",
}


__all__ = [
    "BOOLEAN_PREFERENCE_FIELDS",
    "DEFAULT_QUIET_HOURS_END",
    "DEFAULT_QUIET_HOURS_START",
    "NotificationPreferences",
    "UPDATABLE_PREFERENCE_FIELDS",
]
