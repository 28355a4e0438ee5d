"""Notification store: persistence and inbox queries.

Notifications are:
1. Persisted in the database (plain inserts, no uniqueness constraint)
2. Optionally pushed to the user via Redis pub/sub (``ipro:notifications:{id}``)

Duplicate suppression is the caller's job: sweeps call one of the
``find_recent_*`` queries before inserting.

Types: subscription, inventory, payment, system
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from inventorypro.db.models import Notification, NotificationType
from inventorypro.notifications.payloads import NotificationPayload, SubscriptionPayload, dump_payload
from inventorypro.redis_client import publish_notification

VALID_TYPES = {t.value for t in NotificationType}


async def create_notification(
    db: AsyncSession,
    user_id: int,
    payload: NotificationPayload,
    title: str,
    message: str,
    *,
    now: datetime | None = None,
    redis: Any | None = None,
) -> Notification:
    """Insert a notification and push it via Redis if a client is given."""
    if payload.type not in VALID_TYPES:
        raise ValueError(f"Invalid notification type: {payload.type}. Must be one of {VALID_TYPES}")

    notification = Notification(
        user_id=user_id,
        type=payload.type,
        title=title,
        message=message,
        read=False,
        payload=dump_payload(payload),
        expiration_date=payload.expiration_date if isinstance(payload, SubscriptionPayload) else None,
        created_at=now or datetime.now(timezone.utc),
    )
    db.add(notification)
    await db.flush()

    if redis is not None:
        await publish_notification(
            redis,
            user_id,
            {
                "id": str(notification.id),
                "type": notification.type,
                "title": notification.title,
                "message": notification.message,
                "timestamp": notification.created_at.isoformat(),
                "read": False,
            },
        )

    return notification


async def find_recent_subscription_notice(
    db: AsyncSession,
    user_id: int,
    since: datetime,
    *,
    expiration_date: datetime | None = None,
    message_contains: str | None = None,
) -> Notification | None:
    """Find a subscription notification created at or after ``since``."""
    stmt = select(Notification).where(
        Notification.user_id == user_id,
        Notification.type == NotificationType.SUBSCRIPTION.value,
        Notification.created_at >= since,
    )
    if expiration_date is not None:
        stmt = stmt.where(Notification.expiration_date == expiration_date)
    if message_contains is not None:
        stmt = stmt.where(Notification.message.contains(message_contains, autoescape=True))
    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none()


async def find_subscription_notice_for_date(
    db: AsyncSession,
    user_id: int,
    expiration_date: datetime,
    kind: str,
) -> Notification | None:
    """Find any subscription notification of ``kind`` for an exact expiration date."""
    result = await db.execute(
        select(Notification).where(
            Notification.user_id == user_id,
            Notification.type == NotificationType.SUBSCRIPTION.value,
            Notification.expiration_date == expiration_date,
        )
    )
    for notification in result.scalars():
        if notification.payload.get("kind") == kind:
            return notification
    return None


async def find_recent_notice(
    db: AsyncSession,
    user_id: int,
    type_: str,
    since: datetime,
    *,
    message_contains: str | None = None,
) -> Notification | None:
    """Find a notification of ``type_`` created at or after ``since``."""
    stmt = select(Notification).where(
        Notification.user_id == user_id,
        Notification.type == type_,
        Notification.created_at >= since,
    )
    if message_contains is not None:
        stmt = stmt.where(Notification.message.contains(message_contains, autoescape=True))
    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none()


async def list_notifications(
    db: AsyncSession,
    user_id: int,
    limit: int = 10,
    unread_only: bool = False,
) -> list[Notification]:
    """Get user's notifications, most recent first."""
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.read.is_(False))
    result = await db.execute(
        stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
    )
    return list(result.scalars().all())


async def count_unread(db: AsyncSession, user_id: int) -> int:
    """Get count of unread notifications."""
    result = await db.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
    )
    return result.scalar_one()


async def count_notifications(db: AsyncSession, user_id: int) -> tuple[int, int]:
    """Get (total, unread) counts for a user."""
    total_result = await db.execute(
        select(func.count()).select_from(Notification).where(Notification.user_id == user_id)
    )
    return total_result.scalar_one(), await count_unread(db, user_id)


async def mark_as_read(db: AsyncSession, user_id: int, notification_id: int, read: bool = True) -> bool:
    """Set the read flag on a single notification. Returns True if found."""
    result = await db.execute(
        update(Notification)
        .where(Notification.id == notification_id, Notification.user_id == user_id)
        .values(read=read)
    )
    await db.flush()
    return result.rowcount > 0


async def mark_all_as_read(db: AsyncSession, user_id: int) -> int:
    """Mark all unread notifications as read. Returns count updated."""
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
        .values(read=True)
    )
    await db.flush()
    return result.rowcount


async def delete_notification(db: AsyncSession, user_id: int, notification_id: int) -> bool:
    """Delete a single notification. Returns True if found."""
    result = await db.execute(
        delete(Notification).where(Notification.id == notification_id, Notification.user_id == user_id)
    )
    await db.flush()
    return result.rowcount > 0


async def delete_created_before(db: AsyncSession, cutoff: datetime) -> int:
    """Delete every notification created strictly before ``cutoff``."""
    result = await db.execute(delete(Notification).where(Notification.created_at < cutoff))
    await db.flush()
    return result.rowcount
