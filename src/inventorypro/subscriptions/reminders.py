"""Tiered subscription reminders (7 / 3 / 1 day before expiry).

Run daily at 09:00. One reminder at most per subscription per
``REMINDER_COOLDOWN``, whatever the tier. A subscription that crosses from
the seven-day into the one-day tier inside the cooldown is not reminded
again until the cooldown lapses. This under-notifies in that case and is
kept until product decides otherwise; changing the policy means editing
``REMINDER_COOLDOWN`` only.

Bookkeeping (``last_reminder_sent``, ``reminder_count``) advances whether
or not the email was delivered, so a failing transport is not hammered.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import structlog
from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from inventorypro.db.models import SubscriptionStatus, User
from inventorypro.email.service import EmailService
from inventorypro.email.templates import REMINDER_SUBJECTS
from inventorypro.notifications.payloads import SubscriptionPayload
from inventorypro.notifications.store import create_notification
from inventorypro.subscriptions.tiers import REMINDER_WINDOW, ReminderTier, classify_tier, days_remaining

logger = structlog.get_logger()

REMINDER_COOLDOWN = timedelta(hours=24)


def reminder_candidates_query(now: datetime):
    """Active subscriptions expiring within the window and out of cooldown."""
    return select(
        User.id,
        User.email,
        User.name,
        User.subscription_end_date,
    ).where(
        User.subscription_status == SubscriptionStatus.ACTIVE.value,
        User.subscription_end_date > now,
        User.subscription_end_date <= now + REMINDER_WINDOW,
        or_(
            User.last_reminder_sent.is_(None),
            User.last_reminder_sent < now - REMINDER_COOLDOWN,
        ),
    )


async def sweep_reminders(
    db: AsyncSession,
    email_service: EmailService,
    now: datetime | None = None,
    *,
    renew_url: str = "",
    redis: Any | None = None,
) -> int:
    """Send one tier-appropriate reminder to each qualifying subscription.

    Returns number of reminders attempted (delivered or not).
    """
    if now is None:
        now = datetime.now(timezone.utc)

    result = await db.execute(reminder_candidates_query(now))
    candidates = result.all()
    logger.info("reminder_candidates_found", count=len(candidates))

    attempted = 0
    for user_id, email, name, end_date in candidates:
        days = days_remaining(end_date, now)
        tier = classify_tier(days)
        if tier is ReminderTier.NONE:
            continue

        try:
            message = email_service.render(
                email,
                "subscription_reminder",
                name=name,
                tier=tier,
                days_remaining=days,
                expiration_date=end_date,
                renew_url=renew_url,
            )
            delivered = await email_service.dispatch(message)
        except Exception:
            logger.exception("reminder_dispatch_error", user_id=user_id, tier=tier.value)
            delivered = False

        try:
            await db.execute(
                update(User)
                .where(User.id == user_id)
                .values(
                    last_reminder_sent=now,
                    reminder_count=User.reminder_count + 1,
                )
            )
            await create_notification(
                db,
                user_id,
                SubscriptionPayload(kind="reminder", expiration_date=end_date, tier=tier.value),
                title=REMINDER_SUBJECTS[tier],
                message=f"Your subscription will expire in {days} day{'' if days == 1 else 's'}.",
                now=now,
                redis=redis,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            logger.exception("reminder_bookkeeping_failed", user_id=user_id)
            continue

        attempted += 1
        logger.info("reminder_sent", user_id=user_id, tier=tier.value, delivered=delivered)

    logger.info("reminder_sweep_complete", attempted=attempted)
    return attempted
