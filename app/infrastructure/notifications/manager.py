"""Connection management helpers for notification websockets."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

from app.domain.entities import Notification

from .feed import RealtimeFeedClient, SubscriptionHandle, notification_feed_client
from .publisher import serialize_notification

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Manage active websocket connections grouped by owner.

    All sockets of one owner share a single change feed subscription that is
    opened with the first connection and released with the last one.
    """

    def __init__(self, feed_client: RealtimeFeedClient) -> None:
        self._feed_client = feed_client
        self._connections: DefaultDict[str, Set[WebSocket]] = defaultdict(set)
        self._subscriptions: dict[str, SubscriptionHandle] = {}
        self._pending: Set[asyncio.Task[None]] = set()

    async def connect(self, owner: str, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``owner``."""

        await websocket.accept()
        self._connections[owner].add(websocket)
        if owner not in self._subscriptions:
            self._subscriptions[owner] = self._feed_client.subscribe(
                owner, lambda notification: self._forward(owner, notification)
            )

    def disconnect(self, owner: str, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool for ``owner``."""

        connections = self._connections.get(owner)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(owner, None)
            self._feed_client.unsubscribe(self._subscriptions.pop(owner, None))

    def connection_count(self, owner: str) -> int:
        return len(self._connections.get(owner, ()))

    def has_subscription(self, owner: str) -> bool:
        return owner in self._subscriptions

    async def send_to_user(self, owner: str, message: dict[str, Any]) -> None:
        """Send ``message`` to every active connection for ``owner``."""

        connections = list(self._connections.get(owner, set()))
        for connection in connections:
            try:
                await connection.send_json(message)
            except Exception:  # pragma: no cover - socket already gone
                logger.debug("Dropping unreachable websocket of %s", owner)
                self.disconnect(owner, connection)

    def _forward(self, owner: str, notification: Notification) -> None:
        message = {"type": "notification", "data": serialize_notification(notification)}
        task = asyncio.get_running_loop().create_task(self.send_to_user(owner, message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


notification_manager = NotificationConnectionManager(notification_feed_client)


__all__ = ["NotificationConnectionManager", "notification_manager"]
