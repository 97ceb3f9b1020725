"""Aggregate application use cases."""

from .notifications import create_notification, sweep_expired_notifications
from .preferences import load_preferences, update_preferences

__all__ = [
    "create_notification",
    "load_preferences",
    "sweep_expired_notifications",
    "update_preferences",
]
