"""Notification inbox API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inventorypro.dependencies import get_current_user_id, get_db
from inventorypro.notifications import store
from inventorypro.notifications.schemas import (
    MarkAllReadResponse,
    MarkReadRequest,
    NotificationCountResponse,
    NotificationListResponse,
    NotificationResponse,
    UnreadCountResponse,
)

router = APIRouter(prefix="/api/v1", tags=["Notifications"])


@router.get("/notifications", response_model=NotificationListResponse)
async def list_notifications(
    limit: int = Query(10, ge=1, le=100),
    unread_only: bool = Query(False),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's notifications, newest first."""
    notifications = await store.list_notifications(db, user_id, limit=limit, unread_only=unread_only)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        count=len(notifications),
    )


@router.get("/notifications/count", response_model=NotificationCountResponse)
async def get_notification_counts(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    total, unread = await store.count_notifications(db, user_id)
    return NotificationCountResponse(total=total, unread=unread)


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
async def get_unread_notification_count(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Badge counter for the header bell."""
    return UnreadCountResponse(unread_count=await store.count_unread(db, user_id))


@router.post("/notifications/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Mark all notifications as read."""
    modified = await store.mark_all_as_read(db, user_id)
    await db.commit()
    return MarkAllReadResponse(modified=modified)


@router.put("/notifications/{notification_id}", status_code=200)
async def update_notification(
    notification_id: int,
    body: MarkReadRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Set or clear the read flag on one notification."""
    found = await store.mark_as_read(db, user_id, notification_id, read=body.read)
    if not found:
        raise HTTPException(status_code=404, detail="Notification not found")
    await db.commit()
    return {"detail": "Notification updated"}


@router.delete("/notifications/{notification_id}", status_code=200)
async def delete_notification(
    notification_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    found = await store.delete_notification(db, user_id, notification_id)
    if not found:
        raise HTTPException(status_code=404, detail="Notification not found")
    await db.commit()
    return {"detail": "Notification deleted"}
