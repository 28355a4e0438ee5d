"""Pydantic schemas for the notification inbox."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    title: str
    message: str
    read: bool
    payload: dict[str, Any] = {}
    expiration_date: datetime | None = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    count: int


class NotificationCountResponse(BaseModel):
    total: int
    unread: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkReadRequest(BaseModel):
    read: bool = True


class MarkAllReadResponse(BaseModel):
    modified: int
