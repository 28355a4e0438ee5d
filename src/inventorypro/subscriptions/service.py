"""Subscription renewal."""

from __future__ import annotations

import calendar
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inventorypro.db.models import SubscriptionStatus, User
from inventorypro.email.service import EmailService
from inventorypro.notifications.payloads import SubscriptionPayload
from inventorypro.notifications.store import create_notification

logger = structlog.get_logger()


def add_months(value: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


async def renew_subscription(
    db: AsyncSession,
    user_id: int,
    email_service: EmailService | None = None,
    now: datetime | None = None,
    months: int = 1,
    *,
    redis: Any | None = None,
) -> User:
    """Activate or extend a tenant's subscription.

    A still-active subscription is extended from its current end date so
    early renewals keep the remaining time. Anything else restarts from
    ``now``. Reminder bookkeeping is reset for the new period.

    Raises:
        LookupError: If the user does not exist.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        msg = f"User {user_id} not found"
        raise LookupError(msg)

    base = now
    if (
        user.subscription_status == SubscriptionStatus.ACTIVE.value
        and user.subscription_end_date is not None
        and user.subscription_end_date > now
    ):
        base = user.subscription_end_date
    new_end_date = add_months(base, months)

    user.subscription_status = SubscriptionStatus.ACTIVE.value
    user.subscription_end_date = new_end_date
    user.last_reminder_sent = None
    user.reminder_count = 0

    await create_notification(
        db,
        user.id,
        SubscriptionPayload(kind="renewed", expiration_date=new_end_date),
        title="Subscription Renewed",
        message=f"Your subscription has been renewed until {new_end_date.strftime('%B %d, %Y')}.",
        now=now,
        redis=redis,
    )
    await db.commit()
    logger.info("subscription_renewed", user_id=user.id, new_end_date=new_end_date.isoformat())

    if email_service is not None:
        try:
            sent = await email_service.send_template(
                user.email, "subscription_renewed", name=user.name, new_end_date=new_end_date
            )
        except Exception:
            logger.exception("renewal_email_failed", user_id=user.id)
        else:
            if not sent:
                logger.warning("renewal_email_not_sent", user_id=user.id)

    return user
