"""Optional Redis client.

An empty ``redis_url`` leaves the client unset. Everything that uses Redis
(notification pushes, the email rate limit, readiness) treats a missing
client as "feature off", never as an error.
"""

import json
from typing import Any

import redis.asyncio as redis
import structlog

logger = structlog.get_logger()

_pool: redis.Redis | None = None


async def init_redis(url: str) -> None:
    global _pool  # noqa: PLW0603
    if not url:
        logger.info("redis_disabled")
        return
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
    )


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        await _pool.aclose()
        _pool = None


def get_redis_or_none() -> redis.Redis | None:
    return _pool


def notification_channel(user_id: int) -> str:
    """Pub/sub channel the web client listens on for a tenant's inbox."""
    return f"ipro:notifications:{user_id}"


async def publish_notification(client: Any, user_id: int, data: dict[str, Any]) -> bool:
    """Push an inbox event. A failed publish is logged; the notification row stands."""
    try:
        await client.publish(notification_channel(user_id), json.dumps({"event": "notification", "data": data}))
    except Exception:
        logger.warning("notification_publish_failed", user_id=user_id, exc_info=True)
        return False
    return True
