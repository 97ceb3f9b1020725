"""Tests for the read-side operations and the expiration sweeper."""

from __future__ import annotations

from datetime import timedelta

import pytest

from app.application.use_cases.notifications import (
    count_unread,
    create_notification,
    delete_notification,
    get_notification,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
    sweep_expired_notifications,
)
from app.domain.exceptions import NotificationNotFoundError


def _create(session, owner, now, **overrides):
    values = {"title": "Title", "message": "Message", "send_email": False, "now": now}
    values.update(overrides)
    return create_notification(session, owner=owner, **values).notification


def test_list_is_scoped_to_owner_and_newest_first(session, noon) -> None:
    older = _create(session, "owner-a", noon)
    newer = _create(session, "owner-a", noon + timedelta(minutes=5))
    _create(session, "owner-b", noon)

    assert [item.id for item in list_notifications(session, "owner-a")] == [newer.id, older.id]
    assert [item.id for item in list_notifications(session, "owner-a", limit=1)] == [newer.id]
    assert [item.id for item in list_notifications(session, "owner-a", offset=1)] == [older.id]


def test_mark_as_read_is_idempotent(session, noon) -> None:
    notification = _create(session, "owner-a", noon)

    first = mark_as_read(session, "owner-a", notification.id)
    second = mark_as_read(session, "owner-a", notification.id)

    assert first.is_read is True
    assert second.is_read is True
    assert count_unread(session, "owner-a") == 0
    assert list_notifications(session, "owner-a", unread_only=True) == []


def test_read_state_of_other_owners_is_untouched(session, noon) -> None:
    mine = _create(session, "owner-a", noon)
    _create(session, "owner-a", noon)
    theirs = _create(session, "owner-b", noon)

    with pytest.raises(NotificationNotFoundError):
        mark_as_read(session, "owner-a", theirs.id)

    assert mark_all_as_read(session, "owner-a") == 2
    assert mark_all_as_read(session, "owner-a") == 0
    assert count_unread(session, "owner-b") == 1
    assert get_notification(session, "owner-a", mine.id).is_read is True


def test_delete_is_terminal(session, noon) -> None:
    notification = _create(session, "owner-a", noon)

    delete_notification(session, "owner-a", notification.id)

    with pytest.raises(NotificationNotFoundError):
        get_notification(session, "owner-a", notification.id)
    with pytest.raises(NotificationNotFoundError):
        delete_notification(session, "owner-a", notification.id)


def test_sweeper_removes_only_expired_records(session, noon) -> None:
    expired = _create(session, "owner-a", noon, expires_at=noon + timedelta(hours=1))
    alive = _create(session, "owner-a", noon, expires_at=noon + timedelta(days=2))
    forever = _create(session, "owner-a", noon)

    later = noon + timedelta(days=1)
    assert sweep_expired_notifications(session, now=later) == 1
    assert sweep_expired_notifications(session, now=later) == 0

    remaining = {item.id for item in list_notifications(session, "owner-a")}
    assert remaining == {alive.id, forever.id}
    assert expired.id not in remaining
