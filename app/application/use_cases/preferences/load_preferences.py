"""Use case returning the total preference set of an owner."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.domain.entities import NotificationPreferences
from app.domain.exceptions import PersistenceError, PreferenceLoadError
from app.infrastructure.repositories import NotificationPreferencesRepository

logger = logging.getLogger(__name__)


def load_preferences(session: Session, owner: str) -> NotificationPreferences:
    """Return stored preferences of ``owner`` or a complete default set.

    Store failures never propagate: they are logged as
    :class:`PreferenceLoadError` and the defaults are returned.
    """

    try:
        stored = NotificationPreferencesRepository(session).get(owner)
    except PersistenceError as exc:
        error = PreferenceLoadError(f"Could not load preferences of {owner}")
        logger.warning("%s; falling back to defaults", error, exc_info=exc)
        return NotificationPreferences.defaults(owner)
    return stored or NotificationPreferences.defaults(owner)
