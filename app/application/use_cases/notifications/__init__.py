"""Public helpers for creating, reading and delivering notifications."""

from .create_notification import ChannelOutcome, DispatchResult, create_notification
from .email_channel import (
    TEMPLATE_TYPES,
    build_outbound_email,
    resolve_destination,
    send_notification_email,
    template_type_for,
)
from .events import (
    notify_appointment_cancelled,
    notify_appointment_confirmed,
    notify_appointment_reminder,
    notify_from_template,
    notify_prescription_created,
    notify_treatment_plan_updated,
)
from .queries import (
    count_unread,
    delete_notification,
    get_notification,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
)
from .sweep_expired import sweep_expired_notifications

__all__ = [
    "ChannelOutcome",
    "DispatchResult",
    "TEMPLATE_TYPES",
    "build_outbound_email",
    "count_unread",
    "create_notification",
    "delete_notification",
    "get_notification",
    "list_notifications",
    "mark_all_as_read",
    "mark_as_read",
    "notify_appointment_cancelled",
    "notify_appointment_confirmed",
    "notify_appointment_reminder",
    "notify_from_template",
    "notify_prescription_created",
    "notify_treatment_plan_updated",
    "resolve_destination",
    "send_notification_email",
    "sweep_expired_notifications",
    "template_type_for",
]
