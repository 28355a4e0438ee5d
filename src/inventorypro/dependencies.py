"""Shared FastAPI dependencies."""

from __future__ import annotations

import hmac

from fastapi import Header, HTTPException, status

from inventorypro.config import get_settings
from inventorypro.database import get_session as _get_session

get_db = _get_session


async def get_current_user_id(x_user_id: str | None = Header(default=None)) -> int:
    """Resolve the caller from the ``X-User-Id`` header set by the upstream auth layer."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    try:
        return int(x_user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized") from None


async def verify_cron_secret(authorization: str | None = Header(default=None)) -> None:
    """Require ``Authorization: Bearer <cron_secret>`` on scheduler endpoints."""
    secret = get_settings().cron_secret
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error",
        )
    if not hmac.compare_digest(authorization or "", f"Bearer {secret}"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
