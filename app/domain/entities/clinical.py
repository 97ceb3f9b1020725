"""Read-only views of the clinical records that originate notifications.

The workflows that own these records live outside the notification pipeline;
only the fields required to resolve the recipient are modelled here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class AppointmentOwnership:
    appointment_id: str
    owner: str
    appointment_date: datetime | None
    dentist_name: str | None


@dataclass
class PrescriptionOwnership:
    prescription_id: str
    owner: str


@dataclass
class TreatmentPlanOwnership:
    treatment_plan_id: str
    owner: str
    title: str | None


__all__ = ["AppointmentOwnership", "PrescriptionOwnership", "TreatmentPlanOwnership"]
