"""Subscription lifecycle: active -> expired transitions and expiry notices.

Run daily at 00:00. Safe to re-run: the ``status == active`` guard stops
re-transitioning, and the 24h notice guard stops duplicate expiry messages.
The guard is a query followed by an insert, not a unique index; two sweeps
running at the same moment can both pass it.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from inventorypro.db.models import Notification, SubscriptionStatus, User
from inventorypro.email.service import EmailService
from inventorypro.notifications.payloads import SubscriptionPayload
from inventorypro.notifications.store import (
    create_notification,
    find_recent_subscription_notice,
    find_subscription_notice_for_date,
)
from inventorypro.subscriptions.tiers import REMINDER_WINDOW, days_remaining

logger = structlog.get_logger()

EXPIRY_NOTICE_WINDOW = timedelta(hours=24)
EXPIRED_MARKER = "has expired"


async def has_recent_expiry_notice(db: AsyncSession, user_id: int, now: datetime) -> bool:
    """Dedup guard: was an expiry notice created for this user in the last 24h?"""
    existing = await find_recent_subscription_notice(
        db, user_id, now - EXPIRY_NOTICE_WINDOW, message_contains=EXPIRED_MARKER
    )
    return existing is not None


async def insert_expiry_notification(
    db: AsyncSession,
    user_id: int,
    expiration_date: datetime,
    now: datetime,
    redis: Any | None = None,
) -> Notification:
    """Insert an expiry notice. Does not check for duplicates."""
    return await create_notification(
        db,
        user_id,
        SubscriptionPayload(kind="expired", expiration_date=expiration_date),
        title="Subscription Expired",
        message=f"Your subscription {EXPIRED_MARKER}. Please renew to continue using all features.",
        now=now,
        redis=redis,
    )


async def sweep_expirations(
    db: AsyncSession,
    now: datetime | None = None,
    *,
    redis: Any | None = None,
    email_service: EmailService | None = None,
    renew_url: str = "",
) -> int:
    """Expire lapsed subscriptions and notify each tenant once.

    Each subscription is handled independently: a failure is rolled back,
    logged, and the sweep moves on.

    Returns number of active -> expired transitions performed.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    result = await db.execute(
        select(User.id, User.email, User.name, User.subscription_end_date).where(
            User.subscription_status == SubscriptionStatus.ACTIVE.value,
            User.subscription_end_date <= now,
        )
    )
    lapsed = result.all()
    transitions = 0

    for user_id, email, name, end_date in lapsed:
        try:
            updated = await db.execute(
                update(User)
                .where(User.id == user_id, User.subscription_status == SubscriptionStatus.ACTIVE.value)
                .values(subscription_status=SubscriptionStatus.EXPIRED.value)
            )
            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception("subscription_expire_failed", user_id=user_id)
            continue

        if updated.rowcount == 0:
            # Another sweep or a renewal got there first
            continue
        transitions += 1

        try:
            if await has_recent_expiry_notice(db, user_id, now):
                logger.info("expiry_notice_deduplicated", user_id=user_id)
                continue
            await insert_expiry_notification(db, user_id, end_date, now, redis=redis)
            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception("expiry_notice_failed", user_id=user_id)
            continue

        if email_service is not None and email:
            try:
                sent = await email_service.send_template(
                    email, "subscription_expired", name=name, renew_url=renew_url
                )
            except Exception:
                logger.exception("expiry_email_failed", user_id=user_id)
                continue
            if not sent:
                logger.warning("expiry_email_not_sent", user_id=user_id)

    upcoming = await notify_upcoming_expirations(db, now, redis=redis)
    logger.info("expiration_sweep_complete", transitions=transitions, upcoming_notices=upcoming)
    return transitions


async def notify_upcoming_expirations(
    db: AsyncSession,
    now: datetime | None = None,
    *,
    redis: Any | None = None,
) -> int:
    """Single-fire "expiring soon" notice per subscription end date.

    Coarser than the tiered reminders: one in-app notice per exact
    ``expiration_date``, never repeated for that date.

    Returns number of notices created.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    result = await db.execute(
        select(User.id, User.subscription_end_date).where(
            User.subscription_status == SubscriptionStatus.ACTIVE.value,
            User.subscription_end_date > now,
            User.subscription_end_date <= now + REMINDER_WINDOW,
        )
    )
    created = 0

    for user_id, end_date in result.all():
        try:
            if await find_subscription_notice_for_date(db, user_id, end_date, "expiring"):
                continue
            days_left = days_remaining(end_date, now)
            await create_notification(
                db,
                user_id,
                SubscriptionPayload(kind="expiring", expiration_date=end_date),
                title="Subscription Expiring Soon",
                message=(
                    f"Your subscription will expire in {days_left} day{'' if days_left == 1 else 's'}. "
                    "Please renew to avoid service interruption."
                ),
                now=now,
                redis=redis,
            )
            await db.commit()
            created += 1
        except Exception:
            await db.rollback()
            logger.exception("upcoming_notice_failed", user_id=user_id)

    return created
