"""Scheduler-facing cron endpoints.

Called by an external scheduler, or by this service's own remote trigger.
Every route requires ``Authorization: Bearer <cron_secret>``.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException

from inventorypro.dependencies import verify_cron_secret
from inventorypro.scheduling import jobs

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/cron", tags=["Cron"], dependencies=[Depends(verify_cron_secret)])


@router.post("/subscription-reminders")
async def subscription_reminders() -> dict[str, object]:
    """Run the reminder sweep locally."""
    try:
        attempted = await jobs.run_reminder_sweep()
    except Exception as exc:
        logger.exception("cron_reminder_sweep_failed")
        raise HTTPException(
            status_code=500, detail="An error occurred while processing subscription reminders"
        ) from exc
    return {"success": True, "reminders_sent": attempted}


@router.post("/check-subscriptions")
async def check_subscriptions() -> dict[str, object]:
    try:
        expired = await jobs.run_lifecycle_sweep()
    except Exception as exc:
        logger.exception("cron_lifecycle_sweep_failed")
        raise HTTPException(status_code=500, detail="Failed to check subscriptions") from exc
    return {"success": True, "expired": expired}


@router.post("/cleanup-notifications")
async def cleanup_notifications() -> dict[str, object]:
    try:
        deleted = await jobs.run_cleanup_sweep()
    except Exception as exc:
        logger.exception("cron_cleanup_sweep_failed")
        raise HTTPException(status_code=500, detail="Failed to clean up notifications") from exc
    return {"success": True, "deleted": deleted}


@router.post("/check-low-stock")
async def check_low_stock() -> dict[str, object]:
    try:
        created = await jobs.run_low_stock_check()
    except Exception as exc:
        logger.exception("cron_low_stock_check_failed")
        raise HTTPException(status_code=500, detail="Failed to check low stock items") from exc
    return {"success": True, "alerts_created": created}


@router.post("/check-payments-due")
async def check_payments_due() -> dict[str, object]:
    try:
        created = await jobs.run_payment_due_check()
    except Exception as exc:
        logger.exception("cron_payment_due_check_failed")
        raise HTTPException(status_code=500, detail="Failed to check payment due") from exc
    return {"success": True, "alerts_created": created}
