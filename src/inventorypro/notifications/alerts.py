"""Low-stock and payment-due alerts.

``emit_*`` are plain inserts; callers own duplicate suppression. The
``check_*`` sweeps are the scheduled callers and apply their own windows:
24h per item name for stock, 3 days per tenant for payments.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inventorypro.db.models import InventoryItem, Notification, NotificationType, User
from inventorypro.notifications.payloads import InventoryPayload, PaymentPayload
from inventorypro.notifications.store import create_notification, find_recent_notice

logger = structlog.get_logger()

LOW_STOCK_DEDUP_WINDOW = timedelta(hours=24)
PAYMENT_DUE_DEDUP_WINDOW = timedelta(days=3)


async def emit_low_stock(
    db: AsyncSession,
    user_id: int,
    item_name: str,
    current_quantity: int,
    *,
    item_id: int | None = None,
    now: datetime | None = None,
    redis: Any | None = None,
) -> Notification:
    """Insert a low-stock alert for one item."""
    return await create_notification(
        db,
        user_id,
        InventoryPayload(item_name=item_name, current_quantity=current_quantity, item_id=item_id),
        title="Low Stock Alert",
        message=f"{item_name} is running low on stock ({current_quantity} remaining).",
        now=now,
        redis=redis,
    )


async def emit_payment_due(
    db: AsyncSession,
    user_id: int,
    amount: Decimal,
    *,
    now: datetime | None = None,
    redis: Any | None = None,
) -> Notification:
    """Insert a payment-due alert."""
    return await create_notification(
        db,
        user_id,
        PaymentPayload(amount=amount),
        title="Payment Due",
        message=f"You have a payment of ${amount:.2f} due. Please settle it to avoid service interruption.",
        now=now,
        redis=redis,
    )


async def check_low_stock_items(
    db: AsyncSession,
    now: datetime | None = None,
    *,
    redis: Any | None = None,
) -> int:
    """Alert on items at or below their threshold, once per item name per 24h.

    Returns number of alerts created.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    result = await db.execute(
        select(InventoryItem.id, InventoryItem.user_id, InventoryItem.name, InventoryItem.quantity).where(
            InventoryItem.quantity <= InventoryItem.low_stock_threshold
        )
    )
    items = result.all()
    logger.info("low_stock_items_found", count=len(items))

    created = 0
    for item_id, user_id, name, quantity in items:
        try:
            existing = await find_recent_notice(
                db,
                user_id,
                NotificationType.INVENTORY.value,
                now - LOW_STOCK_DEDUP_WINDOW,
                message_contains=name,
            )
            if existing is not None:
                continue
            await emit_low_stock(db, user_id, name, quantity, item_id=item_id, now=now, redis=redis)
            await db.commit()
            created += 1
        except Exception:
            await db.rollback()
            logger.exception("low_stock_alert_failed", item_id=item_id)

    logger.info("low_stock_check_complete", created=created)
    return created


async def check_payments_due(
    db: AsyncSession,
    now: datetime | None = None,
    *,
    redis: Any | None = None,
) -> int:
    """Alert tenants with an outstanding balance, at most once per 3 days.

    Returns number of alerts created.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    result = await db.execute(select(User.id, User.payment_due).where(User.payment_due > 0))
    debtors = result.all()
    logger.info("payment_due_users_found", count=len(debtors))

    created = 0
    for user_id, amount in debtors:
        try:
            existing = await find_recent_notice(
                db, user_id, NotificationType.PAYMENT.value, now - PAYMENT_DUE_DEDUP_WINDOW
            )
            if existing is not None:
                continue
            await emit_payment_due(db, user_id, Decimal(amount), now=now, redis=redis)
            await db.commit()
            created += 1
        except Exception:
            await db.rollback()
            logger.exception("payment_due_alert_failed", user_id=user_id)

    logger.info("payment_due_check_complete", created=created)
    return created
