"""Session-managing entry points for each sweep.

Shared by the in-process supervisor, the arq worker, and the cron HTTP
handlers, so each sweep has exactly one implementation. Each entry opens
its own session; the database must already be initialised.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import structlog

from inventorypro.config import get_settings
from inventorypro.database import get_session_factory
from inventorypro.email.service import get_email_service
from inventorypro.notifications.alerts import check_low_stock_items, check_payments_due
from inventorypro.notifications.cleanup import sweep_stale_notifications
from inventorypro.redis_client import get_redis_or_none
from inventorypro.scheduling.remote import RemoteTriggerError, call_remote_reminder_trigger
from inventorypro.subscriptions.lifecycle import sweep_expirations
from inventorypro.subscriptions.reminders import sweep_reminders

logger = structlog.get_logger()


def _renew_url() -> str:
    return get_settings().app_base_url.rstrip("/") + "/subscription"


async def run_lifecycle_sweep(now: datetime | None = None) -> int:
    """Expire lapsed subscriptions and post expiry notices."""
    redis = get_redis_or_none()
    async with get_session_factory()() as db:
        return await sweep_expirations(
            db,
            now,
            redis=redis,
            email_service=get_email_service(redis),
            renew_url=_renew_url(),
        )


async def run_reminder_sweep(now: datetime | None = None) -> int:
    """Send tiered reminders. Used by the cron endpoint and the local fallback."""
    redis = get_redis_or_none()
    async with get_session_factory()() as db:
        return await sweep_reminders(
            db,
            get_email_service(redis),
            now,
            renew_url=_renew_url(),
            redis=redis,
        )


async def run_cleanup_sweep(now: datetime | None = None) -> int:
    """Delete notifications past the retention period."""
    retention = timedelta(days=get_settings().notification_retention_days)
    async with get_session_factory()() as db:
        return await sweep_stale_notifications(db, now, retention=retention)


async def run_low_stock_check(now: datetime | None = None) -> int:
    async with get_session_factory()() as db:
        return await check_low_stock_items(db, now, redis=get_redis_or_none())


async def run_payment_due_check(now: datetime | None = None) -> int:
    async with get_session_factory()() as db:
        return await check_payments_due(db, now, redis=get_redis_or_none())


async def trigger_reminder_sweep() -> dict[str, Any]:
    """Run the reminder sweep remotely if configured, locally otherwise.

    A remote failure of any kind falls back to the local sweep.
    """
    settings = get_settings()
    if settings.remote_trigger_base_url:
        try:
            body = await call_remote_reminder_trigger(
                settings.remote_trigger_base_url,
                settings.cron_secret,
                settings.remote_trigger_timeout_seconds,
            )
            return {"mode": "remote", "result": body}
        except RemoteTriggerError as exc:
            logger.warning("remote_reminder_trigger_failed", error=str(exc))

    attempted = await run_reminder_sweep()
    logger.info("local_reminder_sweep_complete", attempted=attempted)
    return {"mode": "local", "result": {"reminders_attempted": attempted}}


# Dispatch table keyed by ScheduledSweep.name
SWEEP_RUNNERS = {
    "lifecycle": run_lifecycle_sweep,
    "cleanup": run_cleanup_sweep,
    "payment_due": run_payment_due_check,
    "reminders": trigger_reminder_sweep,
    "low_stock": run_low_stock_check,
}
