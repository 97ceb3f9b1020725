"""Tests for the dispatcher and the convenience notification helpers."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from app.application.use_cases.notifications import (
    ChannelOutcome,
    create_notification,
    list_notifications,
    notify_appointment_cancelled,
    notify_appointment_confirmed,
    notify_appointment_reminder,
    notify_from_template,
    notify_prescription_created,
    notify_treatment_plan_updated,
)
from app.application.use_cases.preferences import update_preferences
from app.domain.entities import NotificationCategory
from app.domain.exceptions import (
    ChannelDispatchError,
    OwnerResolutionError,
    ProfileNotFoundError,
    RelayError,
    ValidationError,
)
from app.infrastructure.models import (
    AppointmentModel,
    PrescriptionModel,
    ProfileModel,
    TreatmentPlanModel,
)
from app.infrastructure.notifications import notification_feed_client

LATE_EVENING = datetime(2024, 5, 14, 23, 0, tzinfo=timezone.utc)


class RecordingRelay:
    def __init__(self, error: Exception | None = None) -> None:
        self.sent = []
        self.error = error

    def __call__(self, email) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(email)


@pytest.fixture()
def patient(session):
    profile = ProfileModel(
        user_id="patient-1", email="patient@example.com", first_name="Ana", last_name="Lopez"
    )
    dentist = ProfileModel(user_id="dentist-1", email="dr@example.com", first_name="Sam", last_name="Reyes")
    session.add_all([profile, dentist])
    session.commit()
    session.add_all(
        [
            AppointmentModel(
                id="apt-1",
                patient_id=profile.id,
                dentist_id=dentist.id,
                appointment_date=datetime(2024, 5, 20, 9, 30),
            ),
            PrescriptionModel(id="rx-1", patient_id=profile.id),
            TreatmentPlanModel(id="tp-1", patient_id=profile.id, title="Invisalign"),
        ]
    )
    session.commit()
    return profile


def test_email_is_sent_when_preferences_allow(session, patient, noon) -> None:
    relay = RecordingRelay()

    result = create_notification(
        session,
        owner="patient-1",
        title="Welcome",
        message="Your account is ready",
        now=noon,
        relay=relay,
    )

    assert result.id is not None
    assert result.channels == {"email": ChannelOutcome.SENT}
    assert result.delivered is True
    [email] = relay.sent
    assert email.to == "patient@example.com"
    assert email.template_type == "system"
    assert email.correlation_ids["notification_id"] == str(result.id)


def test_email_failure_never_rolls_back_the_record(session, patient, noon) -> None:
    relay = RecordingRelay(RelayError("SendGrid request failed with status 500", status_code=500))

    result = create_notification(
        session,
        owner="patient-1",
        title="Appointment booked",
        message="See you soon",
        type="appointment",
        now=noon,
        relay=relay,
    )

    assert result.channels["email"] is ChannelOutcome.FAILED
    [error] = result.channel_errors
    assert isinstance(error, RelayError)
    assert error.notification_id == result.id
    assert [item.id for item in list_notifications(session, "patient-1")] == [result.id]
    with pytest.raises(RelayError):
        result.raise_for_channels()


def test_unexpected_relay_errors_are_isolated_as_channel_failures(session, patient, noon) -> None:
    relay = RecordingRelay(RuntimeError("connection reset"))

    result = create_notification(
        session, owner="patient-1", title="Hi", message="There", now=noon, relay=relay
    )

    assert result.channels["email"] is ChannelOutcome.FAILED
    [error] = result.channel_errors
    assert isinstance(error, ChannelDispatchError)
    assert isinstance(error.__cause__, RuntimeError)
    assert error.notification_id == result.id
    assert [item.id for item in list_notifications(session, "patient-1")] == [result.id]


def test_missing_profile_is_reported_as_channel_failure(session, noon) -> None:
    result = create_notification(
        session, owner="ghost", title="Hi", message="There", now=noon, relay=RecordingRelay()
    )

    assert result.channels["email"] is ChannelOutcome.FAILED
    assert isinstance(result.channel_errors[0], ProfileNotFoundError)
    assert len(list_notifications(session, "ghost")) == 1


def test_metadata_email_overrides_profile_address(session, patient, noon) -> None:
    relay = RecordingRelay()

    create_notification(
        session,
        owner="patient-1",
        title="Invoice",
        message="Paid",
        metadata={"email": "billing@example.com"},
        now=noon,
        relay=relay,
    )

    assert relay.sent[0].to == "billing@example.com"


def test_quiet_hours_suppress_email_but_keep_record(session, patient) -> None:
    relay = RecordingRelay()

    result = create_notification(
        session,
        owner="patient-1",
        title="Newsletter",
        message="Monthly tips",
        category="info",
        now=LATE_EVENING,
        relay=relay,
    )

    assert result.channels["email"] is ChannelOutcome.SUPPRESSED
    assert relay.sent == []
    assert len(list_notifications(session, "patient-1")) == 1


def test_urgent_notifications_bypass_quiet_hours(session, patient) -> None:
    relay = RecordingRelay()

    result = create_notification(
        session,
        owner="patient-1",
        title="Clinic closed",
        message="Your appointment must move",
        category="high",
        now=LATE_EVENING,
        relay=relay,
    )

    assert result.notification.category is NotificationCategory.URGENT
    assert result.channels["email"] is ChannelOutcome.SENT
    assert len(relay.sent) == 1


def test_disabled_email_channel_suppresses_delivery(session, patient, noon) -> None:
    update_preferences(session, "patient-1", {"email_enabled": False})
    relay = RecordingRelay()

    result = create_notification(
        session, owner="patient-1", title="Hi", message="There", now=noon, relay=relay
    )

    assert result.channels["email"] is ChannelOutcome.SUPPRESSED
    assert relay.sent == []


def test_send_email_false_skips_the_channel(session, patient, noon) -> None:
    relay = RecordingRelay()

    result = create_notification(
        session,
        owner="patient-1",
        title="Hi",
        message="There",
        send_email=False,
        now=noon,
        relay=relay,
    )

    assert result.channels == {"email": ChannelOutcome.SKIPPED}
    assert relay.sent == []


def test_invalid_input_persists_nothing_and_sends_nothing(session, patient, noon) -> None:
    relay = RecordingRelay()

    with pytest.raises(ValidationError):
        create_notification(
            session, owner="patient-1", title="", message="Body", now=noon, relay=relay
        )

    assert list_notifications(session, "patient-1") == []
    assert relay.sent == []


@pytest.mark.anyio
async def test_created_notification_is_published_to_the_owner_feed(session, noon) -> None:
    received = []
    handle = notification_feed_client.subscribe("patient-9", received.append)
    try:
        result = create_notification(
            session,
            owner="patient-9",
            title="Live",
            message="Update",
            send_email=False,
            now=noon,
        )
        create_notification(
            session, owner="someone-else", title="Other", message="Owner", send_email=False, now=noon
        )
        await asyncio.sleep(0)
    finally:
        notification_feed_client.unsubscribe(handle)

    assert [item.id for item in received] == [result.id]
    assert received[0].created_at == noon


def test_appointment_reminder_resolves_the_patient(session, patient) -> None:
    result = notify_appointment_reminder(
        session, appointment_id="apt-1", reminder_type="2h", send_email=False
    )

    notification = result.notification
    assert notification.owner == "patient-1"
    assert notification.title == "Appointment Reminder (2h)"
    assert notification.metadata["reminder_type"] == "2h"
    assert notification.metadata["dentist_name"] == "Sam Reyes"
    assert notification.action_url == "/appointments/apt-1"


def test_appointment_helpers_use_expected_categories(session, patient) -> None:
    confirmed = notify_appointment_confirmed(session, appointment_id="apt-1", send_email=False)
    cancelled = notify_appointment_cancelled(session, appointment_id="apt-1", send_email=False)

    assert confirmed.notification.category is NotificationCategory.SUCCESS
    assert "Dr. Sam Reyes" in confirmed.notification.message
    assert cancelled.notification.category is NotificationCategory.WARNING


def test_unknown_records_raise_owner_resolution_error(session, patient) -> None:
    with pytest.raises(OwnerResolutionError):
        notify_appointment_confirmed(session, appointment_id="missing", send_email=False)
    with pytest.raises(OwnerResolutionError):
        notify_prescription_created(session, prescription_id="missing", send_email=False)
    with pytest.raises(ValidationError):
        notify_appointment_reminder(session, appointment_id="apt-1", reminder_type="3d")


def test_prescription_and_treatment_plan_helpers(session, patient) -> None:
    prescription = notify_prescription_created(session, prescription_id="rx-1", send_email=False)
    plan = notify_treatment_plan_updated(
        session, treatment_plan_id="tp-1", action="completed", send_email=False
    )

    assert prescription.notification.title == "New Prescription"
    assert prescription.notification.metadata == {"prescription_id": "rx-1"}
    assert plan.notification.title == "Treatment Plan Completed"
    assert plan.notification.category is NotificationCategory.SUCCESS
    assert plan.notification.message == "'Invisalign' has been completed."


def test_notify_from_template_renders_variables(session) -> None:
    result = notify_from_template(
        session,
        owner="patient-1",
        template_key="Payment received",
        variables={"amount": "$120", "method": "card"},
        send_email=False,
    )

    assert result.notification.message == "amount: $120, method: card"
    assert result.notification.metadata["template_key"] == "Payment received"
