"""Persistence helpers for recipient profiles."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import Profile
from app.infrastructure.models import ProfileModel

from ._errors import translate_store_errors


class ProfileRepository:
    """Look up :class:`Profile` records by user identifier."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_user_id(self, user_id: str) -> Profile | None:
        with translate_store_errors(self.session, "load a profile"):
            model = (
                self.session.query(ProfileModel)
                .filter(ProfileModel.user_id == user_id)
                .one_or_none()
            )
            return self._to_entity(model) if model else None

    def create(self, profile: Profile) -> Profile:
        model = ProfileModel(
            user_id=profile.user_id,
            email=profile.email,
            first_name=profile.first_name,
            last_name=profile.last_name,
        )
        with translate_store_errors(self.session, "create a profile"):
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
            return self._to_entity(model)

    @staticmethod
    def _to_entity(model: ProfileModel) -> Profile:
        return Profile(
            id=model.id,
            user_id=model.user_id,
            email=model.email,
            first_name=model.first_name,
            last_name=model.last_name,
        )


__all__ = ["ProfileRepository"]
