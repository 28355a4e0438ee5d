"""Subscription status and renewal endpoints."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inventorypro.config import get_settings
from inventorypro.dependencies import get_current_user_id, get_db
from inventorypro.db.models import SubscriptionStatus, User
from inventorypro.email.service import get_email_service
from inventorypro.redis_client import get_redis_or_none
from inventorypro.subscriptions.schemas import RenewRequest, SubscriptionStatusResponse
from inventorypro.subscriptions.service import renew_subscription
from inventorypro.subscriptions.tiers import days_remaining

router = APIRouter(prefix="/api/v1/subscription", tags=["Subscription"])


def _status_response(user: User, now: datetime) -> SubscriptionStatusResponse:
    remaining = None
    if user.subscription_end_date is not None and user.subscription_status == SubscriptionStatus.ACTIVE.value:
        remaining = max(days_remaining(user.subscription_end_date, now), 0)
    return SubscriptionStatusResponse(
        status=user.subscription_status,
        end_date=user.subscription_end_date,
        days_remaining=remaining,
        reminder_count=user.reminder_count,
        last_reminder_sent=user.last_reminder_sent,
    )


@router.get("/status", response_model=SubscriptionStatusResponse)
async def get_subscription_status(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Current subscription state. Transitions are left to the lifecycle sweep."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return _status_response(user, datetime.now(timezone.utc))


@router.post("/renew", response_model=SubscriptionStatusResponse)
async def renew(
    body: RenewRequest | None = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Activate or extend the caller's subscription."""
    months = body.months if body is not None else 1
    redis = get_redis_or_none()
    now = datetime.now(timezone.utc)
    try:
        user = await renew_subscription(
            db, user_id, get_email_service(redis), now=now, months=months, redis=redis
        )
    except LookupError:
        raise HTTPException(status_code=404, detail="User not found") from None
    return _status_response(user, now)
