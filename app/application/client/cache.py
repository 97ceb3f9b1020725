"""Per-session cache of an owner's notifications, unread count and preferences."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, fields
from typing import Any, Callable, Mapping

from app.application.use_cases.preferences import merge_preferences
from app.config import get_settings
from app.domain.entities import Notification, NotificationPreferences
from app.domain.exceptions import NotificationError, SubscriptionError
from app.infrastructure.notifications import RealtimeFeedClient, SubscriptionHandle

from .gateway import NotificationGateway

logger = logging.getLogger(__name__)

Listener = Callable[[], None]
Change = tuple[str, Any]


@dataclass
class CacheErrors:
    """Most recent error per data slot; ``None`` once the slot recovers."""

    notifications: Exception | None = None
    unread_count: Exception | None = None
    preferences: Exception | None = None
    subscription: Exception | None = None
    mutation: Exception | None = None

    def any(self) -> bool:
        return any(getattr(self, item.name) is not None for item in fields(self))

    def items(self) -> list[tuple[str, Exception]]:
        return [
            (item.name, getattr(self, item.name))
            for item in fields(self)
            if getattr(self, item.name) is not None
        ]


def _newest_first(notification: Notification) -> tuple[float, int]:
    created_at = notification.created_at
    return (created_at.timestamp() if created_at else 0.0, notification.id or 0)


def _replay(
    snapshot: list[Notification], changes: list[Change], fetched_unread: int
) -> tuple[list[Notification], int]:
    """Re-apply local changes made while ``snapshot`` was being fetched.

    The unread count is adjusted relative to the snapshot, so a change the
    store already reflects is not counted twice.
    """

    items = list(snapshot)
    unread = fetched_unread
    for kind, value in changes:
        if kind == "insert":
            if all(item.id != value.id for item in items):
                items.append(value)
                if not value.is_read:
                    unread += 1
        elif kind == "read":
            for index, item in enumerate(items):
                if item.id == value and not item.is_read:
                    items[index] = item.as_read()
                    unread -= 1
        elif kind == "read_all":
            items = [item.as_read() for item in items]
            unread = 0
        elif kind == "delete":
            for index, item in enumerate(items):
                if item.id == value:
                    del items[index]
                    if not item.is_read:
                        unread -= 1
                    break
    return items, max(0, unread)


class NotificationCache:
    """Keep a bounded window of an owner's notifications in sync with the store.

    The cache is the single source of truth for every presentation surface of a
    session. It loads the three data slots concurrently, applies read-state
    changes optimistically, absorbs realtime inserts and debounces the unread
    count it publishes. Surfaces share one realtime subscription through
    :meth:`attach` and :meth:`detach`.

    Use it as an async context manager to load on entry and release the
    subscription on exit::

        async with NotificationCache(owner, gateway, notification_feed_client) as cache:
            cache.attach()
            ...
    """

    def __init__(
        self,
        owner: str,
        gateway: NotificationGateway,
        feed_client: RealtimeFeedClient,
        *,
        window_size: int | None = None,
        debounce_seconds: float | None = None,
    ) -> None:
        settings = get_settings()
        self.owner = owner
        self._gateway = gateway
        self._feed_client = feed_client
        self.window_size = window_size or settings.notification_window_size
        self.debounce_seconds = (
            settings.unread_debounce_seconds if debounce_seconds is None else debounce_seconds
        )

        self._notifications: list[Notification] = []
        self._unread_target = 0
        self._unread_published = 0
        self._preferences: NotificationPreferences | None = None
        self._loading = False
        self._loaded = False
        self._closed = False
        self.errors = CacheErrors()

        self._subscription: SubscriptionHandle | None = None
        self._attachments = 0
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._listeners: list[Listener] = []
        self._journals: list[list[Change]] = []

    async def __aenter__(self) -> "NotificationCache":
        await self.load()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return tuple(self._notifications)

    @property
    def unread_count(self) -> int:
        return self._unread_published

    @property
    def preferences(self) -> NotificationPreferences | None:
        return self._preferences

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every state change; return a remover."""

        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def load(self) -> None:
        """Fetch notifications, unread count and preferences concurrently.

        A failing slot keeps its last known value and records the error in
        :attr:`errors`; the other slots still update. Inserts, reads and
        deletions applied while the fetch is in flight are replayed onto the
        fresh data, so a record read locally never turns unread again.
        """

        journal: list[Change] = []
        self._journals.append(journal)
        self._loading = True
        self._notify()
        try:
            results = await asyncio.gather(
                self._gateway.list_notifications(self.owner, self.window_size),
                self._gateway.count_unread(self.owner),
                self._gateway.load_preferences(self.owner),
                return_exceptions=True,
            )
        finally:
            self._journals = [item for item in self._journals if item is not journal]
            self._loading = bool(self._journals)

        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
        notifications, unread_count, preferences = results

        count_failed = isinstance(unread_count, Exception)
        fetched_unread = 0 if count_failed else max(0, int(unread_count))

        if isinstance(notifications, Exception):
            self._record_error("notifications", notifications)
        else:
            items, fetched_unread = _replay(list(notifications), journal, fetched_unread)
            self._notifications = sorted(items, key=_newest_first, reverse=True)[
                : self.window_size
            ]
            self.errors.notifications = None

        if count_failed:
            self._record_error("unread_count", unread_count)
        else:
            if not (journal and isinstance(notifications, Exception)):
                self._cancel_debounce()
                self._unread_target = self._unread_published = fetched_unread
            self.errors.unread_count = None

        if isinstance(preferences, Exception):
            self._record_error("preferences", preferences)
        else:
            self._preferences = preferences
            self.errors.preferences = None

        self._loaded = True
        self._notify()

    async def refresh(self) -> None:
        """Reload every slot from the store, reconciling optimistic changes."""

        await self.load()

    async def mark_as_read(self, notification_id: int) -> bool:
        """Flip a cached notification to read and persist it.

        Returns ``False`` when the notification is unknown or already read. A
        persistence failure is recorded in ``errors.mutation``; the local read
        state is kept and reconciled by the next :meth:`refresh`.
        """

        index = self._index_of(notification_id)
        if index is None or self._notifications[index].is_read:
            return False

        self._notifications[index] = self._notifications[index].as_read()
        self._adjust_unread(-1)
        self._journal("read", notification_id)
        self._notify()

        try:
            await self._gateway.mark_as_read(self.owner, notification_id)
        except NotificationError as exc:
            self._record_error("mutation", exc)
            self._notify()
        else:
            self.errors.mutation = None
        return True

    async def mark_all_as_read(self) -> None:
        """Flip every cached notification to read and persist the change."""

        self._notifications = [notification.as_read() for notification in self._notifications]
        self._set_unread(0)
        self._journal("read_all", None)
        self._notify()

        try:
            await self._gateway.mark_all_as_read(self.owner)
        except NotificationError as exc:
            self._record_error("mutation", exc)
            self._notify()
        else:
            self.errors.mutation = None

    async def delete(self, notification_id: int) -> bool:
        """Remove a notification from the cache and from the store."""

        index = self._index_of(notification_id)
        if index is not None:
            removed = self._notifications.pop(index)
            if not removed.is_read:
                self._adjust_unread(-1)
            self._notify()
        self._journal("delete", notification_id)

        try:
            await self._gateway.delete_notification(self.owner, notification_id)
        except NotificationError as exc:
            self._record_error("mutation", exc)
            self._notify()
            return False
        self.errors.mutation = None
        return True

    async def update_preferences(
        self, changes: Mapping[str, Any]
    ) -> NotificationPreferences:
        """Merge ``changes`` locally, persist them and return the result.

        Invalid changes raise ``ValidationError`` before anything is applied.
        """

        current = self._preferences or NotificationPreferences.defaults(self.owner)
        self._preferences = merge_preferences(current, changes)
        self._notify()

        try:
            self._preferences = await self._gateway.update_preferences(self.owner, changes)
        except NotificationError as exc:
            self._record_error("preferences", exc)
        else:
            self.errors.preferences = None
        self._notify()
        return self._preferences

    def attach(self) -> None:
        """Register a consumer of realtime updates.

        The first consumer opens the subscription; later ones share it.
        """

        self._attachments += 1
        if self._subscription is None and not self._closed:
            self._subscribe()

    def detach(self) -> None:
        """Release a consumer; the last one closes the subscription."""

        if self._attachments == 0:
            return
        self._attachments -= 1
        if self._attachments == 0:
            self._unsubscribe()

    @property
    def attachments(self) -> int:
        return self._attachments

    def flush_unread_count(self) -> None:
        """Publish a pending unread count immediately."""

        self._cancel_debounce()
        self._publish_unread()

    async def close(self) -> None:
        """Cancel pending work and release the realtime subscription."""

        if self._closed:
            return
        self._closed = True
        self._cancel_debounce()
        self._attachments = 0
        self._unsubscribe()
        self._listeners.clear()

    def handle_insert(self, notification: Notification) -> None:
        """Absorb a realtime insert into the cached window."""

        if self._closed or notification.owner != self.owner:
            return
        if self._index_of(notification.id) is not None:
            return

        self._notifications.insert(0, notification)
        self._journal("insert", notification)
        self._notifications.sort(key=_newest_first, reverse=True)
        del self._notifications[self.window_size :]
        if not notification.is_read:
            self._adjust_unread(1)
        self._notify()

    def _subscribe(self) -> None:
        try:
            self._subscription = self._feed_client.subscribe(self.owner, self.handle_insert)
        except SubscriptionError as exc:
            self._record_error("subscription", exc)
            self._notify()
        else:
            self.errors.subscription = None

    def _unsubscribe(self) -> None:
        handle, self._subscription = self._subscription, None
        self._feed_client.unsubscribe(handle)

    def _journal(self, kind: str, value: Any) -> None:
        for journal in self._journals:
            journal.append((kind, value))

    def _index_of(self, notification_id: int | None) -> int | None:
        for index, notification in enumerate(self._notifications):
            if notification.id == notification_id:
                return index
        return None

    def _adjust_unread(self, delta: int) -> None:
        self._set_unread(self._unread_target + delta)

    def _set_unread(self, value: int) -> None:
        self._unread_target = max(0, value)
        if self.debounce_seconds <= 0:
            self._publish_unread()
            return
        self._cancel_debounce()
        loop = asyncio.get_running_loop()
        self._debounce_handle = loop.call_later(self.debounce_seconds, self._publish_unread)

    def _publish_unread(self) -> None:
        self._debounce_handle = None
        if self._unread_published == self._unread_target:
            return
        self._unread_published = self._unread_target
        self._notify()

    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _record_error(self, slot: str, exc: Exception) -> None:
        setattr(self.errors, slot, exc)
        logger.warning("Notification cache of %s: %s failed: %s", self.owner, slot, exc)

    def _notify(self) -> None:
        if self._closed:
            return
        for listener in list(self._listeners):
            listener()


__all__ = ["CacheErrors", "Listener", "NotificationCache"]
