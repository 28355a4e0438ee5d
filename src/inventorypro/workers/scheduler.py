"""arq worker that runs the sweeps on the shared schedule.

Used when ``scheduler_mode`` is ``arq``: the API process then starts no
timers and this worker fires the sweeps instead.

Usage: arq inventorypro.workers.scheduler.WorkerSettings
"""

from __future__ import annotations

import logging
from typing import Any

from arq import cron
from arq.connections import RedisSettings

from inventorypro.config import get_settings
from inventorypro.database import close_db, init_db
from inventorypro.middleware.logging import setup_logging
from inventorypro.redis_client import close_redis, init_redis
from inventorypro.scheduling import jobs
from inventorypro.scheduling.schedule import (
    CLEANUP,
    LIFECYCLE,
    LOW_STOCK,
    PAYMENT_DUE,
    REMINDERS,
    ScheduledSweep,
    resolve_timezone,
)

logger = logging.getLogger(__name__)


async def startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Open the database and Redis pools for the sweep jobs."""
    settings = get_settings()
    setup_logging(settings)
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)
    logger.info("Scheduler worker started (timezone=%s)", settings.scheduler_timezone)


async def shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    await close_db()
    await close_redis()
    logger.info("Scheduler worker shut down")


async def lifecycle_sweep(ctx: dict) -> int:  # type: ignore[type-arg]
    """Daily 00:00: expire lapsed subscriptions."""
    return await jobs.run_lifecycle_sweep()


async def cleanup_sweep(ctx: dict) -> int:  # type: ignore[type-arg]
    """Daily 01:00: drop notifications past retention."""
    return await jobs.run_cleanup_sweep()


async def payment_due_check(ctx: dict) -> int:  # type: ignore[type-arg]
    """Daily 08:00: payment-due alerts."""
    return await jobs.run_payment_due_check()


async def reminder_sweep(ctx: dict) -> dict[str, Any]:  # type: ignore[type-arg]
    """Daily 09:00: tiered reminders, remote first."""
    return await jobs.trigger_reminder_sweep()


async def low_stock_check(ctx: dict) -> int:  # type: ignore[type-arg]
    """Every 6 hours: low-stock alerts."""
    return await jobs.run_low_stock_check()


def _cron_for(sweep: ScheduledSweep, coroutine: Any) -> Any:  # noqa: ANN401
    return cron(coroutine, hour=set(sweep.hours), minute=sweep.minute, run_at_startup=False)


class WorkerSettings:
    """arq worker configuration."""

    functions: list[Any] = []
    cron_jobs = [
        _cron_for(LIFECYCLE, lifecycle_sweep),
        _cron_for(CLEANUP, cleanup_sweep),
        _cron_for(PAYMENT_DUE, payment_due_check),
        _cron_for(REMINDERS, reminder_sweep),
        _cron_for(LOW_STOCK, low_stock_check),
    ]
    on_startup = startup
    on_shutdown = shutdown

    redis_settings = RedisSettings.from_dsn(get_settings().redis_url or "redis://localhost:6379/0")
    timezone = resolve_timezone(get_settings().scheduler_timezone)
