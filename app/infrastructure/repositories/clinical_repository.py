"""Resolve clinical records to the user that should be notified."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import (
    AppointmentOwnership,
    PrescriptionOwnership,
    TreatmentPlanOwnership,
)
from app.infrastructure.models import (
    AppointmentModel,
    PrescriptionModel,
    ProfileModel,
    TreatmentPlanModel,
)
from app.utils import ensure_app_timezone

from ._errors import translate_store_errors


class ClinicalOwnershipRepository:
    """Read-only lookups used by the notification convenience helpers."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_appointment(self, appointment_id: str) -> AppointmentOwnership | None:
        with translate_store_errors(self.session, "resolve an appointment"):
            model = self.session.get(AppointmentModel, appointment_id)
            if model is None or model.patient is None:
                return None
            return AppointmentOwnership(
                appointment_id=model.id,
                owner=model.patient.user_id,
                appointment_date=ensure_app_timezone(model.appointment_date),
                dentist_name=_full_name(model.dentist),
            )

    def get_prescription(self, prescription_id: str) -> PrescriptionOwnership | None:
        with translate_store_errors(self.session, "resolve a prescription"):
            model = self.session.get(PrescriptionModel, prescription_id)
            if model is None or model.patient is None:
                return None
            return PrescriptionOwnership(
                prescription_id=model.id, owner=model.patient.user_id
            )

    def get_treatment_plan(self, treatment_plan_id: str) -> TreatmentPlanOwnership | None:
        with translate_store_errors(self.session, "resolve a treatment plan"):
            model = self.session.get(TreatmentPlanModel, treatment_plan_id)
            if model is None or model.patient is None:
                return None
            return TreatmentPlanOwnership(
                treatment_plan_id=model.id,
                owner=model.patient.user_id,
                title=model.title,
            )


def _full_name(profile: ProfileModel | None) -> str | None:
    if profile is None:
        return None
    parts = [part for part in (profile.first_name, profile.last_name) if part]
    return " ".join(parts) or None


__all__ = ["ClinicalOwnershipRepository"]
