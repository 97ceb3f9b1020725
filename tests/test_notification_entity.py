"""Unit tests for notification record validation and priority rules."""

from __future__ import annotations

from datetime import timedelta

import pytest

from app.domain.entities import (
    AppointmentContext,
    Notification,
    NotificationCategory,
    NotificationType,
    Priority,
    TreatmentPlanContext,
    build_notification,
    notification_context,
    parse_category,
    priority_for,
)
from app.domain.exceptions import ValidationError


def _build(**overrides):
    values = {
        "owner": "user-1",
        "type": "system",
        "category": "info",
        "title": "Hello",
        "message": "World",
    }
    values.update(overrides)
    return build_notification(**values)


def test_build_notification_returns_unsaved_canonical_record(noon) -> None:
    notification = _build(now=noon, action_url="  /appointments/1 ")

    assert notification.id is None
    assert notification.owner == "user-1"
    assert notification.type is NotificationType.SYSTEM
    assert notification.category is NotificationCategory.INFO
    assert notification.is_read is False
    assert notification.created_at == noon
    assert notification.action_url == "/appointments/1"
    assert notification.has_action is True
    assert notification.metadata == {}


@pytest.mark.parametrize(
    "overrides",
    [
        {"owner": ""},
        {"owner": "   "},
        {"title": " "},
        {"message": ""},
        {"type": "newsletter"},
        {"category": "critical"},
        {"metadata": ["not", "a", "mapping"]},
        {"metadata": {"when": object()}},
    ],
)
def test_build_notification_rejects_malformed_input(overrides) -> None:
    with pytest.raises(ValidationError):
        _build(**overrides)


def test_expiry_must_be_strictly_after_creation(noon) -> None:
    with pytest.raises(ValidationError):
        _build(now=noon, expires_at=noon)

    notification = _build(now=noon, expires_at=noon + timedelta(seconds=1))
    assert notification.expires_at == noon + timedelta(seconds=1)


def test_validation_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        _build(title="")


def test_legacy_category_spellings_are_normalised() -> None:
    assert parse_category("high") is NotificationCategory.URGENT
    assert parse_category("Medium") is NotificationCategory.NORMAL
    assert _build(category="high").category is NotificationCategory.URGENT


@pytest.mark.parametrize(
    ("category", "expected"),
    [
        ("urgent", Priority.URGENT),
        ("high", Priority.URGENT),
        ("error", Priority.URGENT),
        ("normal", Priority.NORMAL),
        ("medium", Priority.NORMAL),
        ("info", Priority.NORMAL),
        ("warning", Priority.NORMAL),
        ("low", Priority.LOW),
    ],
)
def test_priority_rank(category, expected) -> None:
    assert priority_for(category) is expected


def test_read_state_only_moves_forward(noon) -> None:
    notification = _build(now=noon)
    read = notification.as_read()

    assert read.is_read is True
    assert notification.is_read is False
    assert read.as_read() is read


def test_is_expired(noon) -> None:
    notification = _build(now=noon, expires_at=noon + timedelta(hours=1))

    assert notification.is_expired(noon) is False
    assert notification.is_expired(noon + timedelta(hours=2)) is True
    assert _build(now=noon).is_expired(noon + timedelta(days=365)) is False


def test_typed_context_keeps_free_form_metadata() -> None:
    appointment = Notification(
        id=1,
        owner="user-1",
        type=NotificationType.APPOINTMENT,
        category=NotificationCategory.INFO,
        title="Reminder",
        message="Soon",
        metadata={"appointment_id": 42, "reminder_type": "2h", "room": "B"},
    )
    plan = Notification(
        id=2,
        owner="user-1",
        type=NotificationType.TREATMENT_PLAN,
        category=NotificationCategory.SUCCESS,
        title="Plan",
        message="Done",
        metadata={"treatment_plan_id": "tp-1", "action": "completed"},
    )

    assert notification_context(appointment) == AppointmentContext(
        appointment_id="42", reminder_type="2h"
    )
    assert appointment.metadata["room"] == "B"
    assert notification_context(plan) == TreatmentPlanContext("tp-1", "completed")
    assert notification_context(
        Notification(
            id=3,
            owner="user-1",
            type=NotificationType.SYSTEM,
            category=NotificationCategory.INFO,
            title="t",
            message="m",
        )
    ) is None
