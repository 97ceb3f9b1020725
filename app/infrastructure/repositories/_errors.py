"""Shared error translation for repositories."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.exceptions import PersistenceError

logger = logging.getLogger(__name__)


@contextmanager
def translate_store_errors(session: Session, operation: str) -> Iterator[None]:
    """Roll back and raise :class:`PersistenceError` for any SQLAlchemy failure."""

    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Notification store failed during %s: %s", operation, exc)
        session.rollback()
        raise PersistenceError(f"Store unavailable while trying to {operation}") from exc
