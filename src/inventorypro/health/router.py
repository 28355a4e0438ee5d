"""Liveness, readiness and version probes."""

from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from inventorypro.config import get_settings
from inventorypro.database import get_session
from inventorypro.redis_client import get_redis_or_none

router = APIRouter()

OK = "ok"


async def check_database(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:
        return f"error: {exc}"
    return OK


async def check_redis(client: Any) -> str:
    try:
        await client.ping()
    except Exception as exc:
        return f"error: {exc}"
    return OK


def check_scheduler(supervisor: Any) -> str:
    if supervisor is None or not supervisor.running:
        return "error: not running"
    return OK


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    request: Request,
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Database always; Redis only when configured; sweep timers only in ``inprocess`` mode."""
    checks = {"database": await check_database(db)}

    redis = get_redis_or_none()
    if redis is not None:
        checks["redis"] = await check_redis(redis)

    if get_settings().scheduler_mode == "inprocess":
        checks["scheduler"] = check_scheduler(getattr(request.app.state, "supervisor", None))

    ready = all(result == OK for result in checks.values())
    return {"status": "ready" if ready else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {
        "version": settings.app_version,
        "environment": settings.environment,
        "scheduler_mode": settings.scheduler_mode,
    }
