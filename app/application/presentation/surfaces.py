"""Notification surfaces rendered from one shared :class:`NotificationCache`."""

from __future__ import annotations

import enum
import itertools
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable

from app.application.client import NotificationCache
from app.config import get_settings
from app.domain.entities import Notification
from app.utils import ensure_app_timezone, now_in_app_timezone

from .policy import (
    DateGroup,
    ViewMode,
    filter_notifications,
    group_by_date,
    order_by_recency,
    overflow_label,
    select_banner,
    select_toasts,
    toast_duration,
)

logger = logging.getLogger(__name__)

BADGE_LIMIT = 99
ERROR_TOAST_TITLE = "Notification Error"


class SurfaceStatus(str, enum.Enum):
    LOADING = "loading"
    EMPTY = "empty"
    READY = "ready"


class _Surface:
    """Attach to the cache while mounted so realtime inserts keep flowing."""

    def __init__(self, cache: NotificationCache) -> None:
        self.cache = cache
        self._mounted = False

    @property
    def mounted(self) -> bool:
        return self._mounted

    def mount(self) -> None:
        if self._mounted:
            return
        self.cache.attach()
        self._mounted = True

    def unmount(self) -> None:
        if not self._mounted:
            return
        self._mounted = False
        self.cache.detach()

    def __enter__(self):
        self.mount()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.unmount()

    @property
    def stale(self) -> bool:
        """Data is shown but the last refresh of the notification list failed."""

        return self.cache.loaded and self.cache.errors.notifications is not None

    def _status(self, has_items: bool) -> SurfaceStatus:
        if not self.cache.loaded:
            return SurfaceStatus.LOADING
        return SurfaceStatus.READY if has_items else SurfaceStatus.EMPTY


@dataclass(frozen=True)
class CenterView:
    status: SurfaceStatus
    stale: bool
    view_mode: ViewMode
    notifications: tuple[Notification, ...]
    groups: tuple[DateGroup, ...]
    total_count: int
    unread_count: int
    urgent_count: int


class NotificationCenter(_Surface):
    """Searchable, filterable list of the owner's cached notifications."""

    def __init__(
        self, cache: NotificationCache, *, view_mode: ViewMode | str = ViewMode.GROUPED
    ) -> None:
        super().__init__(cache)
        self.view_mode = ViewMode(view_mode)

    def toggle_view_mode(self) -> ViewMode:
        self.view_mode = (
            ViewMode.CHRONOLOGICAL
            if self.view_mode is ViewMode.GROUPED
            else ViewMode.GROUPED
        )
        return self.view_mode

    def render(
        self,
        *,
        query: str | None = None,
        facet: str | None = None,
        now: datetime | None = None,
    ) -> CenterView:
        cached = self.cache.notifications
        visible = order_by_recency(filter_notifications(cached, query=query, facet=facet))
        groups: tuple[DateGroup, ...] = ()
        if self.view_mode is ViewMode.GROUPED:
            groups = tuple(group_by_date(visible, now))
        return CenterView(
            status=self._status(bool(visible)),
            stale=self.stale,
            view_mode=self.view_mode,
            notifications=tuple(visible),
            groups=groups,
            total_count=len(cached),
            unread_count=sum(1 for item in cached if not item.is_read),
            urgent_count=sum(1 for item in cached if item.is_urgent),
        )

    async def open(self, notification_id: int) -> str | None:
        """Mark a notification read and return its action link, if any."""

        await self.cache.mark_as_read(notification_id)
        for notification in self.cache.notifications:
            if notification.id == notification_id:
                return notification.action_url
        return None

    async def mark_as_read(self, notification_id: int) -> bool:
        return await self.cache.mark_as_read(notification_id)

    async def mark_all_as_read(self) -> None:
        await self.cache.mark_all_as_read()

    async def delete(self, notification_id: int) -> bool:
        return await self.cache.delete(notification_id)


@dataclass(frozen=True)
class BannerView:
    status: SurfaceStatus
    stale: bool
    notifications: tuple[Notification, ...]
    overflow_count: int

    @property
    def overflow_label(self) -> str | None:
        return overflow_label(self.overflow_count)


class NotificationBanner(_Surface):
    """Dismissible strip of unread notifications, most urgent first."""

    def __init__(self, cache: NotificationCache, *, max_visible: int | None = None) -> None:
        super().__init__(cache)
        self.max_visible = (
            get_settings().banner_max_visible if max_visible is None else max_visible
        )
        self._dismissed: set[int] = set()

    def render(self) -> BannerView:
        visible, overflow = select_banner(
            self.cache.notifications, self.max_visible, self._dismissed
        )
        return BannerView(
            status=self._status(bool(visible)),
            stale=self.stale,
            notifications=tuple(visible),
            overflow_count=overflow,
        )

    async def dismiss(self, notification_id: int) -> None:
        """Hide the record from the banner and mark it read through the cache."""

        self._dismissed.add(notification_id)
        await self.cache.mark_as_read(notification_id)


@dataclass(frozen=True)
class Toast:
    key: str
    title: str
    message: str
    duration: float
    raised_at: datetime
    notification_id: int | None = None
    action_url: str | None = None
    is_error: bool = False

    def expired(self, now: datetime) -> bool:
        if self.duration <= 0:
            return False
        return now >= self.raised_at + timedelta(seconds=self.duration)


_error_keys = itertools.count(1)


class ToastQueue(_Surface):
    """Raise transient toasts for fresh urgent records and cache errors."""

    def __init__(
        self,
        cache: NotificationCache,
        *,
        recency_seconds: float | None = None,
        default_duration: float | None = None,
    ) -> None:
        super().__init__(cache)
        settings = get_settings()
        self.recency_seconds = (
            settings.toast_recency_seconds if recency_seconds is None else recency_seconds
        )
        self.default_duration = (
            settings.toast_default_duration_seconds
            if default_duration is None
            else default_duration
        )
        self._active: list[Toast] = []
        self._shown: set[int] = set()
        self._reported: dict[str, Exception] = {}
        self._remove_listener: Callable[[], None] | None = None

    @property
    def active(self) -> tuple[Toast, ...]:
        return tuple(self._active)

    def mount(self) -> None:
        if self.mounted:
            return
        super().mount()
        self._remove_listener = self.cache.add_listener(self.poll)

    def unmount(self) -> None:
        if self._remove_listener is not None:
            self._remove_listener()
            self._remove_listener = None
        super().unmount()

    def poll(self, now: datetime | None = None) -> list[Toast]:
        """Raise toasts for records and errors not seen yet; return the new ones."""

        now = ensure_app_timezone(now) if now else now_in_app_timezone()
        raised: list[Toast] = []

        for notification in select_toasts(
            self.cache.notifications,
            now=now,
            recency_seconds=self.recency_seconds,
            already_shown=self._shown,
        ):
            self._shown.add(notification.id)
            raised.append(
                Toast(
                    key=f"notification-{notification.id}",
                    title=notification.title,
                    message=notification.message,
                    duration=toast_duration(notification, self.default_duration),
                    raised_at=now,
                    notification_id=notification.id,
                    action_url=notification.action_url,
                )
            )

        current = dict(self.cache.errors.items())
        for slot in list(self._reported):
            if slot not in current:
                del self._reported[slot]
        for slot, exc in current.items():
            if self._reported.get(slot) is exc:
                continue
            self._reported[slot] = exc
            raised.append(
                Toast(
                    key=f"error-{next(_error_keys)}",
                    title=ERROR_TOAST_TITLE,
                    message=str(exc) or exc.__class__.__name__,
                    duration=self.default_duration,
                    raised_at=now,
                    is_error=True,
                )
            )

        if raised:
            logger.debug("Raised %s toast(s) for %s", len(raised), self.cache.owner)
        self._active.extend(raised)
        return raised

    def dismiss(self, key: str) -> bool:
        for index, toast in enumerate(self._active):
            if toast.key == key:
                del self._active[index]
                return True
        return False

    def expire(self, now: datetime | None = None) -> list[Toast]:
        """Drop toasts whose duration elapsed and return them."""

        now = ensure_app_timezone(now) if now else now_in_app_timezone()
        expired = [toast for toast in self._active if toast.expired(now)]
        self._active = [toast for toast in self._active if not toast.expired(now)]
        return expired


@dataclass(frozen=True)
class BadgeView:
    status: SurfaceStatus
    count: int

    @property
    def label(self) -> str | None:
        if self.count <= 0:
            return None
        return f"{BADGE_LIMIT}+" if self.count > BADGE_LIMIT else str(self.count)


class UnreadBadge(_Surface):
    """Counter of unread notifications, fed by the debounced cache count."""

    def render(self) -> BadgeView:
        count = self.cache.unread_count
        return BadgeView(status=self._status(count > 0), count=count)


__all__ = [
    "BadgeView",
    "BannerView",
    "CenterView",
    "ERROR_TOAST_TITLE",
    "NotificationBanner",
    "NotificationCenter",
    "SurfaceStatus",
    "Toast",
    "ToastQueue",
    "UnreadBadge",
]
