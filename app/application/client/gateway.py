"""Async access to the notification store for client sessions."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import partial
from typing import Any, Mapping, Protocol, TypeVar

import anyio
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import (
    count_unread,
    delete_notification,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
)
from app.application.use_cases.preferences import load_preferences, update_preferences
from app.domain.entities import Notification, NotificationPreferences
from app.infrastructure.database import SessionLocal

T = TypeVar("T")


class NotificationGateway(Protocol):
    """Operations a :class:`NotificationCache` needs from the store."""

    async def list_notifications(self, owner: str, limit: int) -> Sequence[Notification]: ...

    async def count_unread(self, owner: str) -> int: ...

    async def load_preferences(self, owner: str) -> NotificationPreferences: ...

    async def mark_as_read(self, owner: str, notification_id: int) -> None: ...

    async def mark_all_as_read(self, owner: str) -> int: ...

    async def update_preferences(
        self, owner: str, changes: Mapping[str, Any]
    ) -> NotificationPreferences: ...

    async def delete_notification(self, owner: str, notification_id: int) -> None: ...


class StoreNotificationGateway:
    """Run the synchronous use cases in worker threads, one session per call."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    async def list_notifications(self, owner: str, limit: int) -> Sequence[Notification]:
        return await self._run(partial(list_notifications, owner=owner, limit=limit))

    async def count_unread(self, owner: str) -> int:
        return await self._run(partial(count_unread, owner=owner))

    async def load_preferences(self, owner: str) -> NotificationPreferences:
        return await self._run(partial(load_preferences, owner=owner))

    async def mark_as_read(self, owner: str, notification_id: int) -> None:
        await self._run(partial(mark_as_read, owner=owner, notification_id=notification_id))

    async def mark_all_as_read(self, owner: str) -> int:
        return await self._run(partial(mark_all_as_read, owner=owner))

    async def update_preferences(
        self, owner: str, changes: Mapping[str, Any]
    ) -> NotificationPreferences:
        return await self._run(
            partial(update_preferences, owner=owner, partial=dict(changes))
        )

    async def delete_notification(self, owner: str, notification_id: int) -> None:
        await self._run(
            partial(delete_notification, owner=owner, notification_id=notification_id)
        )

    async def _run(self, operation: Callable[[Session], T]) -> T:
        def call() -> T:
            session = self._session_factory()
            try:
                return operation(session)
            finally:
                session.close()

        return await anyio.to_thread.run_sync(call)


__all__ = ["NotificationGateway", "StoreNotificationGateway"]
