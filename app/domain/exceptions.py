"""Error taxonomy for the notification pipeline."""

from __future__ import annotations


class NotificationError(Exception):
    """Base class for every error raised by the notification pipeline."""


class ValidationError(NotificationError, ValueError):
    """Creation or update input is malformed. Never retried."""


class PersistenceError(NotificationError):
    """The notification store could not complete the operation."""


class NotificationNotFoundError(NotificationError, LookupError):
    """No notification with the requested id exists for the owner."""

    def __init__(self, notification_id: int, owner: str) -> None:
        super().__init__(f"Notification {notification_id} not found for owner {owner}")
        self.notification_id = notification_id
        self.owner = owner


class OwnerResolutionError(NotificationError, LookupError):
    """A domain entity could not be resolved to the user that owns it."""


class ChannelDispatchError(NotificationError):
    """Delivery through an outbound channel failed.

    The persisted notification is unaffected by this error.
    """

    channel = "email"

    def __init__(self, message: str, *, notification_id: int | None = None) -> None:
        super().__init__(message)
        self.notification_id = notification_id


class ProfileNotFoundError(ChannelDispatchError):
    """The recipient has no profile to resolve a destination from."""


class NoAddressError(ChannelDispatchError):
    """Neither the metadata override nor the profile provide an address."""


class RelayError(ChannelDispatchError):
    """The outbound email relay rejected or failed to send the message."""

    def __init__(
        self,
        message: str,
        *,
        notification_id: int | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, notification_id=notification_id)
        self.status_code = status_code


class SubscriptionError(NotificationError):
    """The realtime change feed subscription could not be established."""


class PreferenceLoadError(NotificationError):
    """Stored preferences could not be read; defaults are used instead."""


__all__ = [
    "NotificationError",
    "ValidationError",
    "PersistenceError",
    "NotificationNotFoundError",
    "OwnerResolutionError",
    "ChannelDispatchError",
    "ProfileNotFoundError",
    "NoAddressError",
    "RelayError",
    "SubscriptionError",
    "PreferenceLoadError",
]
