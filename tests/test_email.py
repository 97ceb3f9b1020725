"""Unit tests for the SendGrid relay and the email channel adapter."""

from __future__ import annotations

import json
import types

import pytest

from app.application.use_cases.notifications import (
    build_outbound_email,
    resolve_destination,
    send_notification_email,
    template_type_for,
)
from app.domain.entities import (
    Notification,
    NotificationCategory,
    NotificationType,
    OutboundEmail,
)
from app.domain.exceptions import NoAddressError, ProfileNotFoundError, RelayError
from app.infrastructure import email as email_module
from app.infrastructure.models import ProfileModel


class DummySettings:
    sendgrid_api_key = "SG.fake"
    sendgrid_sender = "sender@example.com"
    sendgrid_sender_name = "Practice Notifications"


class MissingSettings(DummySettings):
    sendgrid_api_key = None
    sendgrid_sender = None


def _message(**overrides) -> OutboundEmail:
    values = {
        "to": "patient@example.com",
        "subject": "Appointment <Confirmed>",
        "body": "See you\ntomorrow",
        "template_type": "appointment_confirmation",
        "correlation_ids": {"notification_id": "7"},
    }
    values.update(overrides)
    return OutboundEmail(**values)


def _notification(**overrides) -> Notification:
    values = {
        "id": 7,
        "owner": "patient-1",
        "type": NotificationType.APPOINTMENT,
        "category": NotificationCategory.INFO,
        "title": "Appointment Confirmed",
        "message": "See you soon",
        "metadata": {"appointment_id": "apt-1", "dentist_id": 3},
    }
    values.update(overrides)
    return Notification(**values)


def test_send_email_without_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    """Missing SendGrid settings are reported as a relay failure."""

    monkeypatch.setattr(email_module, "get_settings", lambda: MissingSettings())

    with pytest.raises(RelayError):
        email_module.send_email(_message())


def test_send_email_success(monkeypatch: pytest.MonkeyPatch) -> None:
    """A 2xx SendGrid response completes without raising."""

    sent = []

    class SuccessfulClient:
        def __init__(self, api_key: str) -> None:
            self.api_key = api_key

        def send(self, message):
            sent.append(message)
            return types.SimpleNamespace(status_code=202, body=None)

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", SuccessfulClient)

    email_module.send_email(_message())

    [mail] = sent
    payload = mail.get()
    assert payload["subject"] == "Appointment <Confirmed>"
    assert payload["categories"] == ["appointment_confirmation"]


def test_send_email_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog) -> None:
    """Forbidden responses from SendGrid surface meaningful details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {
                "errors": [
                    {
                        "message": "The provided authorization grant is invalid.",
                        "field": None,
                    }
                ]
            }
        ).encode()

    class FailingClient:
        def __init__(self, api_key: str) -> None:
            self.api_key = api_key

        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"):
        with pytest.raises(RelayError) as excinfo:
            email_module.send_email(_message())

    assert excinfo.value.status_code == 403
    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in caplog.text


def test_send_email_rejects_non_success_status(monkeypatch: pytest.MonkeyPatch) -> None:
    class RejectingClient:
        def __init__(self, api_key: str) -> None:
            self.api_key = api_key

        def send(self, message):
            return types.SimpleNamespace(status_code=400, body=b'{"errors": [{"message": "bad to", "field": "to"}]}')

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RejectingClient)

    with pytest.raises(RelayError, match=r"bad to \(field: to\)"):
        email_module.send_email(_message())


def test_rendered_html_escapes_user_content() -> None:
    html = email_module.render_email_html(_message(body="<b>hi</b>\nthere"))

    assert "&lt;b&gt;hi&lt;/b&gt;<br>there" in html
    assert "Appointment &lt;Confirmed&gt;" in html


@pytest.mark.parametrize(
    ("notification", "expected"),
    [
        (_notification(), "appointment_confirmation"),
        (_notification(metadata={"reminder_type": "24h"}), "appointment_reminder"),
        (_notification(type=NotificationType.FOLLOW_UP), "appointment_reminder"),
        (_notification(type=NotificationType.PRESCRIPTION), "prescription"),
        (_notification(type=NotificationType.EMERGENCY), "emergency"),
        (_notification(type=NotificationType.PAYMENT), "system"),
    ],
)
def test_template_type_for(notification, expected) -> None:
    assert template_type_for(notification) == expected


def test_outbound_email_carries_correlation_ids() -> None:
    email = build_outbound_email(_notification(), "patient@example.com")

    assert email.subject == "Appointment Confirmed"
    assert email.body == "See you soon"
    assert email.correlation_ids == {
        "notification_id": "7",
        "owner": "patient-1",
        "appointment_id": "apt-1",
        "dentist_id": "3",
    }


def test_destination_resolution(session) -> None:
    session.add_all(
        [
            ProfileModel(user_id="patient-1", email=" patient@example.com "),
            ProfileModel(user_id="patient-2", email=None),
        ]
    )
    session.commit()

    assert resolve_destination(session, _notification()) == "patient@example.com"
    assert (
        resolve_destination(session, _notification(metadata={"email": "other@example.com"}))
        == "other@example.com"
    )
    assert (
        resolve_destination(session, _notification(metadata={"email": "not-an-address"}))
        == "patient@example.com"
    )
    with pytest.raises(NoAddressError):
        resolve_destination(session, _notification(owner="patient-2"))
    with pytest.raises(ProfileNotFoundError):
        resolve_destination(session, _notification(owner="nobody"))


def test_send_notification_email_hands_message_to_relay(session) -> None:
    relayed = []

    email = send_notification_email(
        session,
        _notification(metadata={"email": "direct@example.com"}),
        relay=relayed.append,
    )

    assert relayed == [email]
    assert email.to == "direct@example.com"
