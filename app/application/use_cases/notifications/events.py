"""Convenience helpers that notify the owner of a clinical record."""

from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy.orm import Session

from app.domain.entities import NotificationCategory, NotificationType
from app.domain.exceptions import OwnerResolutionError, ValidationError
from app.infrastructure.repositories import ClinicalOwnershipRepository

from .create_notification import DispatchResult, create_notification

REMINDER_TYPES = ("24h", "2h", "1h")
TREATMENT_PLAN_ACTIONS = ("created", "updated", "completed")


def _format_date(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "the scheduled date"


def _appointment(session: Session, appointment_id: str):
    appointment = ClinicalOwnershipRepository(session).get_appointment(appointment_id)
    if appointment is None:
        raise OwnerResolutionError(f"Appointment {appointment_id} not found")
    return appointment


def _appointment_metadata(appointment, **extra: Any) -> dict[str, Any]:
    return {
        "appointment_id": appointment.appointment_id,
        "dentist_name": appointment.dentist_name,
        "appointment_date": appointment.appointment_date.isoformat()
        if appointment.appointment_date
        else None,
        **extra,
    }


def notify_appointment_reminder(
    session: Session,
    *,
    appointment_id: str,
    reminder_type: str = "24h",
    send_email: bool = True,
) -> DispatchResult:
    """Remind the patient of an upcoming appointment."""

    if reminder_type not in REMINDER_TYPES:
        raise ValidationError(f"Unknown reminder type '{reminder_type}'")
    appointment = _appointment(session, appointment_id)
    return create_notification(
        session,
        owner=appointment.owner,
        title=f"Appointment Reminder ({reminder_type})",
        message=(
            f"Reminder: you have an appointment on {_format_date(appointment.appointment_date)}."
        ),
        type=NotificationType.APPOINTMENT,
        category=NotificationCategory.INFO,
        action_url=f"/appointments/{appointment.appointment_id}",
        metadata=_appointment_metadata(appointment, reminder_type=reminder_type),
        send_email=send_email,
    )


def notify_appointment_confirmed(
    session: Session, *, appointment_id: str, send_email: bool = True
) -> DispatchResult:
    appointment = _appointment(session, appointment_id)
    with_dentist = f" with Dr. {appointment.dentist_name}" if appointment.dentist_name else ""
    return create_notification(
        session,
        owner=appointment.owner,
        title="Appointment Confirmed",
        message=(
            f"Your appointment{with_dentist} has been confirmed for "
            f"{_format_date(appointment.appointment_date)}."
        ),
        type=NotificationType.APPOINTMENT,
        category=NotificationCategory.SUCCESS,
        action_url=f"/appointments/{appointment.appointment_id}",
        metadata=_appointment_metadata(appointment),
        send_email=send_email,
    )


def notify_appointment_cancelled(
    session: Session, *, appointment_id: str, send_email: bool = True
) -> DispatchResult:
    appointment = _appointment(session, appointment_id)
    with_dentist = f" with Dr. {appointment.dentist_name}" if appointment.dentist_name else ""
    return create_notification(
        session,
        owner=appointment.owner,
        title="Appointment Cancelled",
        message=(
            f"Your appointment{with_dentist} on "
            f"{_format_date(appointment.appointment_date)} has been cancelled."
        ),
        type=NotificationType.APPOINTMENT,
        category=NotificationCategory.WARNING,
        metadata=_appointment_metadata(appointment),
        send_email=send_email,
    )


def notify_prescription_created(
    session: Session, *, prescription_id: str, send_email: bool = True
) -> DispatchResult:
    prescription = ClinicalOwnershipRepository(session).get_prescription(prescription_id)
    if prescription is None:
        raise OwnerResolutionError(f"Prescription {prescription_id} not found")
    return create_notification(
        session,
        owner=prescription.owner,
        title="New Prescription",
        message="A new prescription has been issued for you.",
        type=NotificationType.PRESCRIPTION,
        category=NotificationCategory.INFO,
        action_url=f"/prescriptions/{prescription.prescription_id}",
        metadata={"prescription_id": prescription.prescription_id},
        send_email=send_email,
    )


def notify_treatment_plan_updated(
    session: Session,
    *,
    treatment_plan_id: str,
    action: str = "created",
    send_email: bool = True,
) -> DispatchResult:
    if action not in TREATMENT_PLAN_ACTIONS:
        raise ValidationError(f"Unknown treatment plan action '{action}'")
    plan = ClinicalOwnershipRepository(session).get_treatment_plan(treatment_plan_id)
    if plan is None:
        raise OwnerResolutionError(f"Treatment plan {treatment_plan_id} not found")
    name = f"'{plan.title}'" if plan.title else "Your treatment plan"
    return create_notification(
        session,
        owner=plan.owner,
        title=f"Treatment Plan {action.capitalize()}",
        message=f"{name} has been {action}.",
        type=NotificationType.TREATMENT_PLAN,
        category=NotificationCategory.SUCCESS if action == "completed" else NotificationCategory.INFO,
        action_url=f"/treatment-plans/{plan.treatment_plan_id}",
        metadata={"treatment_plan_id": plan.treatment_plan_id, "action": action},
        send_email=send_email,
    )


def notify_from_template(
    session: Session,
    *,
    owner: str,
    template_key: str,
    variables: Mapping[str, str] | None = None,
    action_url: str | None = None,
    metadata: Mapping[str, Any] | None = None,
    send_email: bool = True,
) -> DispatchResult:
    """Create a system notification titled ``template_key``.

    The message lists ``variables`` as ``key: value`` pairs.
    """

    variables = variables or {}
    message = ", ".join(f"{key}: {value}" for key, value in variables.items())
    return create_notification(
        session,
        owner=owner,
        title=template_key,
        message=message or template_key,
        type=NotificationType.SYSTEM,
        category=NotificationCategory.INFO,
        action_url=action_url,
        metadata={"template_key": template_key, **dict(metadata or {})},
        send_email=send_email,
    )


__all__ = [
    "REMINDER_TYPES",
    "TREATMENT_PLAN_ACTIONS",
    "notify_appointment_cancelled",
    "notify_appointment_confirmed",
    "notify_appointment_reminder",
    "notify_from_template",
    "notify_prescription_created",
    "notify_treatment_plan_updated",
]
