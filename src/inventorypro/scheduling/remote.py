"""Remote trigger for the reminder sweep.

The preferred path is to hit the deployed HTTP endpoint so the sweep runs
where the web tier runs. Any failure is surfaced as ``RemoteTriggerError``
and the caller falls back to a local sweep.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

logger = structlog.get_logger()

REMINDER_TRIGGER_PATH = "/api/v1/cron/subscription-reminders"


class RemoteTriggerError(Exception):
    """The remote endpoint could not be reached or refused the call."""


async def call_remote_reminder_trigger(
    base_url: str,
    secret: str,
    timeout: float = 30.0,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """POST to the remote reminder endpoint and return its JSON body.

    Raises:
        RemoteTriggerError: On network error, timeout, or a non-2xx status.
    """
    if not base_url:
        msg = "No remote trigger base URL configured"
        raise RemoteTriggerError(msg)

    url = base_url.rstrip("/") + REMINDER_TRIGGER_PATH
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.post(url, headers={"Authorization": f"Bearer {secret}"})
            response.raise_for_status()
    except httpx.TimeoutException as exc:
        msg = f"Remote trigger timed out after {timeout}s"
        raise RemoteTriggerError(msg) from exc
    except httpx.HTTPStatusError as exc:
        msg = f"Remote trigger returned {exc.response.status_code}"
        raise RemoteTriggerError(msg) from exc
    except httpx.HTTPError as exc:
        msg = f"Remote trigger failed: {exc}"
        raise RemoteTriggerError(msg) from exc

    logger.info("remote_reminder_trigger_ok", url=url, status=response.status_code)
    try:
        return response.json()
    except ValueError:
        return {}
