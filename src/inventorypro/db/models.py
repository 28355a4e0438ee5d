"""ORM models for tenants, the inventory slice, and notifications.

Only the columns the notification engine reads or writes are mapped. The
inventory and billing handlers own the rest of their tables.
"""

from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    Boolean,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventorypro.db.base import Base
from inventorypro.db.types import BigIntPK, JSONType, UTCDateTime


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class NotificationType(str, enum.Enum):
    SUBSCRIPTION = "subscription"
    INVENTORY = "inventory"
    PAYMENT = "payment"
    SYSTEM = "system"


# ---------------------------------------------------------------------------
# Users (tenants) with their embedded subscription record
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table."""

    __tablename__ = "users"
    __table_args__ = (
        Index("ix_users_subscription_status_end", "subscription_status", "subscription_end_date"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="user", server_default="user")
    created_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    # --- Subscription ---
    subscription_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=SubscriptionStatus.INACTIVE.value, server_default="inactive"
    )
    subscription_end_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    last_reminder_sent: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    reminder_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    # --- Billing slice ---
    payment_due: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")

    inventory_items: Mapped[list[InventoryItem]] = relationship("InventoryItem", back_populates="user")


# ---------------------------------------------------------------------------
# Inventory (read-only slice for low-stock checks)
# ---------------------------------------------------------------------------


class InventoryItem(Base):
    """Maps to the 'inventory_items' table."""

    __tablename__ = "inventory_items"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    sku: Mapped[str | None] = mapped_column(String(64), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    low_stock_threshold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    user: Mapped[User] = relationship("User", back_populates="inventory_items")


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


class Notification(Base):
    """Persisted in-app notifications."""

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "read"),
        Index("ix_notifications_user_type_created", "user_id", "type", "created_at"),
        Index("ix_notifications_created", "created_at"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(BigIntPK, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    payload: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    # Mirrors payload["expiration_date"] for subscription notices
    expiration_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
