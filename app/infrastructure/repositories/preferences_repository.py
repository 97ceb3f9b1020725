"""Persistence helpers for notification preferences."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import NotificationPreferences, UPDATABLE_PREFERENCE_FIELDS
from app.infrastructure.models import NotificationPreferencesModel
from app.utils import ensure_app_timezone

from ._errors import translate_store_errors


class NotificationPreferencesRepository:
    """Read and upsert :class:`NotificationPreferences` records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, owner: str) -> NotificationPreferences | None:
        with translate_store_errors(self.session, "load notification preferences"):
            model = self._get_model(owner)
            return self._to_entity(model) if model else None

    def save(self, preferences: NotificationPreferences) -> NotificationPreferences:
        """Insert or update the preferences of ``preferences.owner``."""

        with translate_store_errors(self.session, "save notification preferences"):
            model = self._get_model(preferences.owner)
            if model is None:
                model = NotificationPreferencesModel(owner=preferences.owner)
            for name in UPDATABLE_PREFERENCE_FIELDS:
                setattr(model, name, getattr(preferences, name))
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
            return self._to_entity(model)

    def _get_model(self, owner: str) -> NotificationPreferencesModel | None:
        return (
            self.session.query(NotificationPreferencesModel)
            .filter(NotificationPreferencesModel.owner == owner)
            .one_or_none()
        )

    @staticmethod
    def _to_entity(model: NotificationPreferencesModel) -> NotificationPreferences:
        values = {name: getattr(model, name) for name in UPDATABLE_PREFERENCE_FIELDS}
        return NotificationPreferences(
            owner=model.owner,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
            **values,
        )


__all__ = ["NotificationPreferencesRepository"]
