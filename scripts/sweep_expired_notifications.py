"""Utility script to delete notifications whose expiry date has passed."""

from __future__ import annotations

import argparse
import logging

from app.application.use_cases.notifications import sweep_expired_notifications
from app.domain.exceptions import PersistenceError
from app.infrastructure.database import SessionLocal, initialize_database
from app.utils import parse_iso_datetime


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the sweep."""

    parser = argparse.ArgumentParser(
        description="Delete expired notifications from the notification store.",
    )
    parser.add_argument(
        "--now",
        default=None,
        help="ISO 8601 reference time (defaults to the current time)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every step of the sweep.",
    )
    return parser.parse_args()


def main() -> None:
    """Run one sweep using the provided command line arguments."""

    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        now = parse_iso_datetime(args.now)
    except ValueError as exc:
        raise SystemExit(f"Invalid --now value: {exc}") from exc

    initialize_database()

    session = SessionLocal()
    try:
        removed = sweep_expired_notifications(session, now=now)
    except PersistenceError as exc:
        raise SystemExit(f"Could not sweep expired notifications: {exc}") from exc
    else:
        print(f"Removed {removed} expired notification(s)")
    finally:
        session.close()


if __name__ == "__main__":
    main()
