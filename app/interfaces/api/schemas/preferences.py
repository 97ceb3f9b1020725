"""Notification preference schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class PreferencesRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    owner: str
    email_enabled: bool
    sms_enabled: bool
    push_enabled: bool
    in_app_enabled: bool
    appointment_reminders: bool
    prescription_updates: bool
    treatment_plan_updates: bool
    emergency_alerts: bool
    system_notifications: bool
    quiet_hours_start: str
    quiet_hours_end: str
    updated_at: datetime | None = None


class PreferencesUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""

    model_config = ConfigDict(extra="forbid")

    email_enabled: bool | None = None
    sms_enabled: bool | None = None
    push_enabled: bool | None = None
    in_app_enabled: bool | None = None
    appointment_reminders: bool | None = None
    prescription_updates: bool | None = None
    treatment_plan_updates: bool | None = None
    emergency_alerts: bool | None = None
    system_notifications: bool | None = None
    quiet_hours_start: str | None = Field(default=None, pattern=_TIME_PATTERN)
    quiet_hours_end: str | None = Field(default=None, pattern=_TIME_PATTERN)


__all__ = ["PreferencesRead", "PreferencesUpdate"]
