"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.entities import NotificationCategory, NotificationType


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner: str
    type: NotificationType
    category: NotificationCategory
    title: str
    message: str
    action_url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    created_at: datetime | None = None
    expires_at: datetime | None = None


class NotificationCreate(BaseModel):
    """Payload used by internal collaborators to raise a notification."""

    model_config = ConfigDict(extra="forbid")

    owner: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    type: str = "system"
    category: str = "info"
    action_url: str | None = None
    metadata: dict[str, Any] | None = None
    expires_at: datetime | None = None
    send_email: bool = True


class DispatchRead(BaseModel):
    """Persisted notification together with the outcome of each channel."""

    notification: NotificationRead
    channels: dict[str, str] = Field(default_factory=dict)
    channel_errors: list[str] = Field(default_factory=list)


class UnreadCountRead(BaseModel):
    count: int = Field(..., ge=0)


class MarkAllReadResponse(BaseModel):
    updated: int = Field(..., ge=0)


__all__ = [
    "DispatchRead",
    "MarkAllReadResponse",
    "NotificationCreate",
    "NotificationRead",
    "UnreadCountRead",
]
