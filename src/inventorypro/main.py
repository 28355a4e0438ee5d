"""InventoryPro notification API.

``create_app()`` wires the inbox, subscription and cron routers. The
lifespan opens the database and Redis and, in ``inprocess`` scheduler mode,
owns the sweep timers for the life of the process.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from inventorypro.config import Settings, get_settings
from inventorypro.database import close_db, init_db
from inventorypro.health.router import router as health_router
from inventorypro.middleware import setup_middleware
from inventorypro.notifications.router import router as notifications_router
from inventorypro.redis_client import close_redis, init_redis
from inventorypro.scheduling.jobs import SWEEP_RUNNERS
from inventorypro.scheduling.router import router as cron_router
from inventorypro.scheduling.schedule import resolve_timezone
from inventorypro.scheduling.supervisor import SweepSupervisor
from inventorypro.subscriptions.router import router as subscription_router

logger = structlog.get_logger()


def build_supervisor(settings: Settings) -> SweepSupervisor | None:
    """Sweep timers for this process, or None when another process runs them."""
    if settings.scheduler_mode != "inprocess":
        logger.info("in_process_scheduler_disabled", scheduler_mode=settings.scheduler_mode)
        return None
    return SweepSupervisor(SWEEP_RUNNERS, tz=resolve_timezone(settings.scheduler_timezone))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    supervisor = build_supervisor(settings)
    if supervisor is not None:
        supervisor.start()
    app.state.supervisor = supervisor

    try:
        yield
    finally:
        if supervisor is not None:
            await supervisor.stop()
        await close_redis()
        await close_db()


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="InventoryPro Notification API",
        description="Subscription lifecycle, reminders, and in-app notifications for InventoryPro",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(notifications_router)
    app.include_router(subscription_router)
    app.include_router(cron_router)

    return app


app = create_app()
