"""Retention sweep for the notification table (daily at 01:00)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from inventorypro.notifications.store import delete_created_before

logger = structlog.get_logger()

DEFAULT_RETENTION = timedelta(days=30)


async def sweep_stale_notifications(
    db: AsyncSession,
    now: datetime | None = None,
    retention: timedelta = DEFAULT_RETENTION,
) -> int:
    """Delete notifications created before ``now - retention``, read or unread.

    Returns number of rows deleted.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    cutoff = now - retention

    try:
        deleted = await delete_created_before(db, cutoff)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("notification_cleanup_failed", cutoff=cutoff.isoformat())
        raise

    logger.info("notification_cleanup_complete", deleted=deleted, cutoff=cutoff.isoformat())
    return deleted
