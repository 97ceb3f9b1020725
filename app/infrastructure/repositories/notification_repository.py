"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.entities import Notification, NotificationCategory, NotificationType
from app.infrastructure.models import NotificationModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)

from ._errors import translate_store_errors


class NotificationRepository:
    """Provide CRUD operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_for_owner(
        self,
        owner: str,
        *,
        limit: int | None = 50,
        offset: int = 0,
        unread_only: bool = False,
    ) -> Sequence[Notification]:
        with translate_store_errors(self.session, "list notifications"):
            query = self.session.query(NotificationModel).filter(
                NotificationModel.owner == owner
            )
            if unread_only:
                query = query.filter(NotificationModel.is_read.is_(False))
            query = query.order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return [self._to_entity(model) for model in query.all()]

    def get(self, notification_id: int, *, owner: str | None = None) -> Notification | None:
        with translate_store_errors(self.session, "fetch a notification"):
            model = self._get_model(notification_id, owner=owner)
            return self._to_entity(model) if model else None

    def count_unread(self, owner: str) -> int:
        with translate_store_errors(self.session, "count unread notifications"):
            return (
                self.session.query(func.count(NotificationModel.id))
                .filter(NotificationModel.owner == owner)
                .filter(NotificationModel.is_read.is_(False))
                .scalar()
                or 0
            )

    def create(self, notification: Notification) -> Notification:
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        with translate_store_errors(self.session, "create a notification"):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
            return self._to_entity(model)

    def mark_as_read(self, notification_ids: Iterable[int], *, owner: str) -> int:
        """Flag the given unread notifications of ``owner`` as read.

        Returns the number of records that changed state.
        """

        ids = [notification_id for notification_id in notification_ids if notification_id is not None]
        if not ids:
            return 0
        with translate_store_errors(self.session, "mark notifications as read"):
            changed = (
                self.session.query(NotificationModel)
                .filter(
                    NotificationModel.id.in_(ids),
                    NotificationModel.owner == owner,
                    NotificationModel.is_read.is_(False),
                )
                .update({NotificationModel.is_read: True}, synchronize_session=False)
            )
            self.session.commit()
            return changed

    def mark_all_as_read(self, owner: str) -> int:
        with translate_store_errors(self.session, "mark all notifications as read"):
            changed = (
                self.session.query(NotificationModel)
                .filter(
                    NotificationModel.owner == owner,
                    NotificationModel.is_read.is_(False),
                )
                .update({NotificationModel.is_read: True}, synchronize_session=False)
            )
            self.session.commit()
            return changed

    def delete(self, notification_id: int, *, owner: str) -> bool:
        with translate_store_errors(self.session, "delete a notification"):
            model = self._get_model(notification_id, owner=owner)
            if model is None:
                return False
            self.session.delete(model)
            self.session.commit()
            return True

    def delete_expired(self, now: datetime | None = None) -> int:
        """Remove every notification whose ``expires_at`` is set and in the past."""

        reference = ensure_app_naive_datetime(now or now_in_app_timezone())
        with translate_store_errors(self.session, "delete expired notifications"):
            removed = (
                self.session.query(NotificationModel)
                .filter(NotificationModel.expires_at.is_not(None))
                .filter(NotificationModel.expires_at < reference)
                .delete(synchronize_session=False)
            )
            self.session.commit()
            return removed

    def _get_model(
        self, notification_id: int, *, owner: str | None = None
    ) -> NotificationModel | None:
        query = self.session.query(NotificationModel).filter(
            NotificationModel.id == notification_id
        )
        if owner is not None:
            query = query.filter(NotificationModel.owner == owner)
        return query.one_or_none()

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        model.created_at = (
            ensure_app_naive_datetime(notification.created_at)
            or ensure_app_naive_datetime(now_in_app_timezone())
        )
        model.owner = notification.owner
        model.type = notification.type.value
        model.category = notification.category.value
        model.title = notification.title
        model.message = notification.message
        model.action_url = notification.action_url
        model.metadata_ = notification.metadata or {}
        model.is_read = bool(notification.is_read)
        model.expires_at = ensure_app_naive_datetime(notification.expires_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        metadata = model.metadata_ if isinstance(model.metadata_, dict) else {}
        return Notification(
            id=model.id,
            owner=model.owner,
            type=NotificationType(model.type),
            category=NotificationCategory(model.category),
            title=model.title,
            message=model.message,
            action_url=model.action_url,
            metadata=dict(metadata),
            is_read=bool(model.is_read),
            created_at=ensure_app_timezone(model.created_at),
            expires_at=ensure_app_timezone(model.expires_at),
        )


__all__ = ["NotificationRepository"]
