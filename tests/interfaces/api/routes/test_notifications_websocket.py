"""Tests for the realtime notification websocket."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect


@pytest.fixture()
def client():
    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


def _create(client: TestClient, owner: str, title: str) -> dict:
    response = client.post(
        "/notifications/",
        json={"owner": owner, "title": title, "message": "Body", "send_email": False},
    )
    assert response.status_code == 201, response.text
    return response.json()["notification"]


def test_websocket_requires_an_owner(client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/notifications/ws"):
            pass


def test_websocket_streams_inserts_and_acknowledges(client: TestClient) -> None:
    pending = _create(client, "patient-1", "Pending")

    with client.websocket_connect("/notifications/ws?owner=patient-1") as websocket:
        init = websocket.receive_json()
        assert init["type"] == "init"
        assert [item["id"] for item in init["data"]] == [pending["id"]]

        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

        _create(client, "patient-2", "Not for you")
        live = _create(client, "patient-1", "Live")
        message = websocket.receive_json()
        assert message["type"] == "notification"
        assert message["data"]["id"] == live["id"]
        assert message["data"]["title"] == "Live"

        websocket.send_json({"type": "ack", "ids": [pending["id"], live["id"]]})
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

    count = client.get("/notifications/unread-count", headers={"X-Owner-Id": "patient-1"})
    assert count.json() == {"count": 0}
