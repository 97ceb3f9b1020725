"""Expiration sweeper for notifications past their ``expires_at``."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from app.infrastructure.repositories import NotificationRepository

logger = logging.getLogger(__name__)


def sweep_expired_notifications(session: Session, now: datetime | None = None) -> int:
    """Delete every expired notification and return how many were removed.

    Records without ``expires_at`` are never touched; running it twice in a
    row removes nothing the second time.
    """

    removed = NotificationRepository(session).delete_expired(now)
    if removed:
        logger.info("Removed %s expired notification(s)", removed)
    return removed


__all__ = ["sweep_expired_notifications"]
