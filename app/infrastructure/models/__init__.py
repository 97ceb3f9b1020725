"""ORM models used by the application infrastructure."""

from .clinical import AppointmentModel, PrescriptionModel, TreatmentPlanModel
from .notification import NotificationModel
from .preferences import NotificationPreferencesModel
from .profile import ProfileModel

__all__ = [
    "AppointmentModel",
    "NotificationModel",
    "NotificationPreferencesModel",
    "PrescriptionModel",
    "ProfileModel",
    "TreatmentPlanModel",
]
