"""Shared fixtures: an isolated in-memory database and a clean change feed."""

from __future__ import annotations

import os
from datetime import datetime, timezone

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ.pop("SENDGRID_API_KEY", None)
os.environ.pop("SENDGRID_SENDER", None)

import pytest

from app.config import reset_settings_cache

reset_settings_cache()

from app.infrastructure.database import Base, SessionLocal, engine, initialize_database
from app.infrastructure.notifications import notification_change_feed

initialize_database()


@pytest.fixture(autouse=True)
def clean_database():
    """Give every test empty tables and no leftover feed listeners."""

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    notification_change_feed.clear()
    yield
    notification_change_feed.clear()


@pytest.fixture()
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def noon() -> datetime:
    """A fixed reference time outside the default quiet hours."""

    return datetime(2024, 5, 14, 12, 0, tzinfo=timezone.utc)
