"""Repository implementations for infrastructure layer."""

from .clinical_repository import ClinicalOwnershipRepository
from .notification_repository import NotificationRepository
from .preferences_repository import NotificationPreferencesRepository
from .profile_repository import ProfileRepository

__all__ = [
    "ClinicalOwnershipRepository",
    "NotificationPreferencesRepository",
    "NotificationRepository",
    "ProfileRepository",
]
