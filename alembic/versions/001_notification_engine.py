"""Notification engine: tenants with subscription state, inventory slice, notifications.

Creates users, inventory_items, notifications tables.

Revision ID: 001_notification_engine
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_notification_engine"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users (tenants) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id BIGSERIAL PRIMARY KEY,
            email VARCHAR(320) UNIQUE NOT NULL,
            name VARCHAR(128),
            role VARCHAR(16) NOT NULL DEFAULT 'user',
            created_at TIMESTAMPTZ,
            subscription_status VARCHAR(16) NOT NULL DEFAULT 'inactive',
            subscription_end_date TIMESTAMPTZ,
            last_reminder_sent TIMESTAMPTZ,
            reminder_count INTEGER NOT NULL DEFAULT 0,
            payment_due NUMERIC(12, 2) NOT NULL DEFAULT 0
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_users_subscription_status_end
        ON users(subscription_status, subscription_end_date)
    """)

    # --- Inventory items ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS inventory_items (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            name VARCHAR(256) NOT NULL,
            sku VARCHAR(64),
            quantity INTEGER NOT NULL DEFAULT 0,
            low_stock_threshold INTEGER NOT NULL DEFAULT 0
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_inventory_items_user_id
        ON inventory_items(user_id)
    """)

    # --- Notifications ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS notifications (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            type VARCHAR(32) NOT NULL,
            title VARCHAR(256) NOT NULL,
            message TEXT NOT NULL,
            read BOOLEAN NOT NULL DEFAULT false,
            payload JSONB NOT NULL DEFAULT '{}'::jsonb,
            expiration_date TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_notifications_user_read
        ON notifications(user_id, read)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_notifications_user_type_created
        ON notifications(user_id, type, created_at)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_notifications_created
        ON notifications(created_at)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_notifications_expiration_date
        ON notifications(expiration_date)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notifications")
    op.execute("DROP TABLE IF EXISTS inventory_items")
    op.execute("DROP TABLE IF EXISTS users")
