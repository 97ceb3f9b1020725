"""Use case merging a partial preference update."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping

from sqlalchemy.orm import Session

from app.domain.entities import NotificationPreferences
from app.domain.exceptions import PersistenceError
from app.infrastructure.repositories import NotificationPreferencesRepository
from app.utils import now_in_app_timezone

from .load_preferences import load_preferences
from .validators import clean_preference_update

logger = logging.getLogger(__name__)


def merge_preferences(
    current: NotificationPreferences, partial: Mapping[str, Any]
) -> NotificationPreferences:
    """Apply ``partial`` on top of ``current`` without dropping other fields."""

    return replace(current, **clean_preference_update(partial))


def update_preferences(
    session: Session, owner: str, partial: Mapping[str, Any]
) -> NotificationPreferences:
    """Merge ``partial`` onto the stored (or default) preferences and persist.

    Invalid input raises ``ValidationError``. When the store rejects the
    write the merged value is still returned, unpersisted, so callers never
    block on a transient failure.
    """

    merged = merge_preferences(load_preferences(session, owner), partial)
    try:
        return NotificationPreferencesRepository(session).save(merged)
    except PersistenceError as exc:
        logger.warning(
            "Preferences of %s could not be saved, returning unpersisted values: %s",
            owner,
            exc,
        )
        return replace(merged, updated_at=now_in_app_timezone())
