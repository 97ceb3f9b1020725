"""Domain entities exposed by the application."""

from .clinical import AppointmentOwnership, PrescriptionOwnership, TreatmentPlanOwnership
from .notification import (
    AppointmentContext,
    Notification,
    NotificationCategory,
    NotificationContext,
    NotificationType,
    PrescriptionContext,
    Priority,
    TreatmentPlanContext,
    build_notification,
    notification_context,
    parse_category,
    parse_notification_type,
    priority_for,
)
from .outbound_email import OutboundEmail
from .preferences import (
    BOOLEAN_PREFERENCE_FIELDS,
    UPDATABLE_PREFERENCE_FIELDS,
    NotificationPreferences,
)
from .profile import Profile

__all__ = [
    "AppointmentContext",
    "AppointmentOwnership",
    "BOOLEAN_PREFERENCE_FIELDS",
    "Notification",
    "NotificationCategory",
    "NotificationContext",
    "NotificationPreferences",
    "NotificationType",
    "OutboundEmail",
    "PrescriptionContext",
    "PrescriptionOwnership",
    "Priority",
    "Profile",
    "TreatmentPlanContext",
    "TreatmentPlanOwnership",
    "UPDATABLE_PREFERENCE_FIELDS",
    "build_notification",
    "notification_context",
    "parse_category",
    "parse_notification_type",
    "priority_for",
]
