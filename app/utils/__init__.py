"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    format_time_of_day,
    get_app_timezone,
    local_midnight,
    now_in_app_naive_datetime,
    now_in_app_timezone,
    parse_iso_datetime,
    parse_time_of_day,
)

__all__ = [
    "ensure_app_naive_datetime",
    "ensure_app_timezone",
    "format_time_of_day",
    "get_app_timezone",
    "local_midnight",
    "now_in_app_naive_datetime",
    "now_in_app_timezone",
    "parse_iso_datetime",
    "parse_time_of_day",
]
