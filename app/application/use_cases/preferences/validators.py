"""Validation helpers for preference updates."""

from __future__ import annotations

from typing import Any, Mapping

from app.domain.entities import BOOLEAN_PREFERENCE_FIELDS, UPDATABLE_PREFERENCE_FIELDS
from app.domain.exceptions import ValidationError
from app.utils import format_time_of_day, parse_time_of_day


def clean_preference_update(partial: Mapping[str, Any]) -> dict[str, Any]:
    """Return a normalized copy of ``partial`` or raise ``ValidationError``."""

    unknown = sorted(set(partial) - UPDATABLE_PREFERENCE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown preference fields: {', '.join(unknown)}")

    cleaned: dict[str, Any] = {}
    for name, value in partial.items():
        if value is None:
            continue
        if name in BOOLEAN_PREFERENCE_FIELDS:
            if not isinstance(value, bool):
                raise ValidationError(f"Preference '{name}' must be a boolean")
            cleaned[name] = value
            continue
        try:
            cleaned[name] = format_time_of_day(parse_time_of_day(str(value)))
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
    return cleaned
