"""In-process change feed for inserted notification records."""

from __future__ import annotations

import asyncio
import copy
import itertools
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, DefaultDict, Set

logger = logging.getLogger(__name__)

ChangeEvent = dict[str, Any]


@dataclass(frozen=True)
class _Listener:
    token: int
    owner: str
    callback: Callable[[ChangeEvent], None]
    loop: asyncio.AbstractEventLoop


class ChangeFeed:
    """Fan insert events out to listeners registered per owner.

    Callbacks always run on the event loop that registered them, so events may
    be published from worker threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens = itertools.count(1)
        self._listeners: dict[int, _Listener] = {}
        self._by_owner: DefaultDict[str, Set[int]] = defaultdict(set)

    def listen(self, owner: str, callback: Callable[[ChangeEvent], None]) -> int:
        """Register ``callback`` for inserts of ``owner``.

        Must be called from a running event loop; raises ``RuntimeError`` otherwise.
        """

        loop = asyncio.get_running_loop()
        with self._lock:
            token = next(self._tokens)
            self._listeners[token] = _Listener(token, owner, callback, loop)
            self._by_owner[owner].add(token)
        return token

    def remove(self, token: int) -> bool:
        with self._lock:
            listener = self._listeners.pop(token, None)
            if listener is None:
                return False
            tokens = self._by_owner.get(listener.owner)
            if tokens is not None:
                tokens.discard(token)
                if not tokens:
                    self._by_owner.pop(listener.owner, None)
            return True

    def publish_insert(self, owner: str, record: dict[str, Any]) -> int:
        """Schedule an insert event for every listener of ``owner``.

        Returns the number of listeners the event was scheduled for.
        """

        event: ChangeEvent = {"type": "INSERT", "table": "notification", "record": record}
        with self._lock:
            listeners = [self._listeners[token] for token in self._by_owner.get(owner, ())]

        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        scheduled = 0
        for listener in listeners:
            if listener.loop.is_closed():
                self.remove(listener.token)
                continue
            payload = copy.deepcopy(event)
            if listener.loop is current_loop:
                listener.loop.call_soon(self._deliver, listener.token, payload)
            else:
                listener.loop.call_soon_threadsafe(self._deliver, listener.token, payload)
            scheduled += 1
        return scheduled

    def listener_count(self, owner: str | None = None) -> int:
        with self._lock:
            if owner is None:
                return len(self._listeners)
            return len(self._by_owner.get(owner, ()))

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()
            self._by_owner.clear()

    def _deliver(self, token: int, event: ChangeEvent) -> None:
        listener = self._listeners.get(token)
        if listener is None:
            # Removed between scheduling and delivery.
            return
        try:
            listener.callback(event)
        except Exception:
            logger.exception("Change feed listener %s failed to handle an insert", token)


notification_change_feed = ChangeFeed()


__all__ = ["ChangeEvent", "ChangeFeed", "notification_change_feed"]
