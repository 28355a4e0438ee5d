"""Pydantic schemas for subscription endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SubscriptionStatusResponse(BaseModel):
    status: str
    end_date: datetime | None = None
    days_remaining: int | None = None
    reminder_count: int = 0
    last_reminder_sent: datetime | None = None


class RenewRequest(BaseModel):
    months: int = Field(1, ge=1, le=12)
