"""Integration tests for the notification HTTP endpoints."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient

OWNER_HEADERS = {"X-Owner-Id": "patient-1"}


@pytest.fixture()
def client():
    """Return a test client bound to a clean application instance."""

    from main import create_app

    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


def _create(client: TestClient, **overrides) -> dict:
    payload = {
        "owner": "patient-1",
        "title": "Appointment booked",
        "message": "See you on Monday",
        "type": "appointment",
        "category": "info",
        "send_email": False,
    }
    payload.update(overrides)
    response = client.post("/notifications/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_requests_without_owner_are_rejected(client: TestClient) -> None:
    assert client.get("/notifications/").status_code == 401
    assert client.get("/notifications/", headers={"X-Owner-Id": "  "}).status_code == 401


def test_notification_lifecycle(client: TestClient) -> None:
    created = _create(client)
    second = _create(client, title="Second", category="high")

    assert created["channels"] == {"email": "skipped"}
    assert second["notification"]["category"] == "urgent"

    listing = client.get("/notifications/", headers=OWNER_HEADERS)
    assert listing.status_code == 200
    assert [item["title"] for item in listing.json()] == ["Second", "Appointment booked"]
    assert client.get("/notifications/unread-count", headers=OWNER_HEADERS).json() == {"count": 2}

    notification_id = created["notification"]["id"]
    read = client.post(f"/notifications/{notification_id}/read", headers=OWNER_HEADERS)
    assert read.status_code == 200
    assert read.json()["is_read"] is True
    again = client.post(f"/notifications/{notification_id}/read", headers=OWNER_HEADERS)
    assert again.status_code == 200

    unread = client.get("/notifications/", params={"unread_only": True}, headers=OWNER_HEADERS)
    assert [item["title"] for item in unread.json()] == ["Second"]

    assert client.post("/notifications/read-all", headers=OWNER_HEADERS).json() == {"updated": 1}
    assert client.get("/notifications/unread-count", headers=OWNER_HEADERS).json() == {"count": 0}

    deleted = client.delete(f"/notifications/{notification_id}", headers=OWNER_HEADERS)
    assert deleted.status_code == 204
    missing = client.get(f"/notifications/{notification_id}", headers=OWNER_HEADERS)
    assert missing.status_code == 404


def test_other_owners_cannot_touch_a_notification(client: TestClient) -> None:
    created = _create(client)
    notification_id = created["notification"]["id"]
    intruder = {"X-Owner-Id": "patient-2"}

    assert client.get(f"/notifications/{notification_id}", headers=intruder).status_code == 404
    assert client.post(f"/notifications/{notification_id}/read", headers=intruder).status_code == 404
    assert client.delete(f"/notifications/{notification_id}", headers=intruder).status_code == 404
    assert client.get("/notifications/", headers=intruder).json() == []


def test_invalid_creation_input(client: TestClient) -> None:
    response = client.post(
        "/notifications/",
        json={"owner": "patient-1", "title": "Hi", "message": "There", "category": "critical"},
    )
    assert response.status_code == 400
    assert "critical" in response.json()["detail"]

    response = client.post("/notifications/", json={"owner": "patient-1", "message": "There"})
    assert response.status_code == 422


def test_email_failure_is_reported_without_losing_the_record(client: TestClient) -> None:
    client.put(
        "/notifications/preferences",
        json={"quiet_hours_start": "00:00", "quiet_hours_end": "00:00"},
        headers=OWNER_HEADERS,
    )

    created = _create(client, send_email=True)

    assert created["channels"] == {"email": "failed"}
    assert created["channel_errors"]
    listing = client.get("/notifications/", headers=OWNER_HEADERS).json()
    assert [item["id"] for item in listing] == [created["notification"]["id"]]


def test_preferences_defaults_and_partial_update(client: TestClient) -> None:
    defaults = client.get("/notifications/preferences", headers=OWNER_HEADERS)
    assert defaults.status_code == 200
    assert defaults.json()["email_enabled"] is True
    assert defaults.json()["quiet_hours_start"] == "22:00"

    updated = client.put(
        "/notifications/preferences",
        json={"sms_enabled": True, "quiet_hours_end": "06:30"},
        headers=OWNER_HEADERS,
    )
    assert updated.status_code == 200
    body = updated.json()
    assert body["sms_enabled"] is True
    assert body["quiet_hours_end"] == "06:30"
    assert body["email_enabled"] is True
    assert body["quiet_hours_start"] == "22:00"


@pytest.mark.parametrize(
    "payload",
    [{"vibrate": True}, {"quiet_hours_start": "24:00"}],
)
def test_invalid_preference_updates(client: TestClient, payload) -> None:
    response = client.put("/notifications/preferences", json=payload, headers=OWNER_HEADERS)

    assert response.status_code == 422
