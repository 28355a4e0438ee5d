"""Integration tests: notification inbox endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy import select

from inventorypro.db.models import Notification
from inventorypro.notifications.payloads import InventoryPayload, SubscriptionPayload, SystemPayload
from inventorypro.notifications.store import create_notification

NOW = datetime(2026, 3, 10, 9, 0, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def inbox(db_session, make_user):
    """Two tenants; the first has three notifications, oldest first."""
    owner = await make_user()
    other = await make_user()
    ids = []
    for offset, payload, title in [
        (3, SystemPayload(), "Welcome"),
        (2, InventoryPayload(item_name="Bolts", current_quantity=1), "Low Stock Alert"),
        (
            1,
            SubscriptionPayload(kind="expiring", expiration_date=NOW + timedelta(days=5)),
            "Subscription Expiring Soon",
        ),
    ]:
        notification = await create_notification(
            db_session, owner.id, payload, title=title, message=f"{title} message", now=NOW - timedelta(hours=offset)
        )
        ids.append(notification.id)
    foreign = await create_notification(db_session, other.id, SystemPayload(), title="Other", message="x", now=NOW)
    await db_session.commit()
    return {"owner": owner.id, "other": other.id, "ids": ids, "foreign": foreign.id}


def _as(user_id: int) -> dict[str, str]:
    return {"X-User-Id": str(user_id)}


class TestInboxAuth:
    @pytest.mark.asyncio
    async def test_missing_user_header(self, client: AsyncClient):
        response = await client.get("/api/v1/notifications")
        assert response.status_code == 401
        assert response.json() == {"detail": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_malformed_user_header(self, client: AsyncClient):
        response = await client.get("/api/v1/notifications", headers={"X-User-Id": "abc"})
        assert response.status_code == 401


class TestListNotifications:
    @pytest.mark.asyncio
    async def test_empty(self, client: AsyncClient, make_user):
        user = await make_user()
        response = await client.get("/api/v1/notifications", headers=_as(user.id))
        assert response.status_code == 200
        assert response.json() == {"notifications": [], "count": 0}

    @pytest.mark.asyncio
    async def test_newest_first_and_scoped_to_user(self, client: AsyncClient, inbox):
        response = await client.get("/api/v1/notifications", headers=_as(inbox["owner"]))
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert [n["id"] for n in data["notifications"]] == list(reversed(inbox["ids"]))
        first = data["notifications"][0]
        assert first["type"] == "subscription"
        assert first["payload"]["kind"] == "expiring"
        assert first["read"] is False

    @pytest.mark.asyncio
    async def test_limit(self, client: AsyncClient, inbox):
        response = await client.get("/api/v1/notifications?limit=2", headers=_as(inbox["owner"]))
        assert response.json()["count"] == 2

    @pytest.mark.asyncio
    async def test_limit_validated(self, client: AsyncClient, inbox):
        response = await client.get("/api/v1/notifications?limit=0", headers=_as(inbox["owner"]))
        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"

    @pytest.mark.asyncio
    async def test_unread_only(self, client: AsyncClient, inbox):
        await client.put(f"/api/v1/notifications/{inbox['ids'][0]}", json={"read": True}, headers=_as(inbox["owner"]))

        response = await client.get("/api/v1/notifications?unread_only=true", headers=_as(inbox["owner"]))

        ids = [n["id"] for n in response.json()["notifications"]]
        assert inbox["ids"][0] not in ids
        assert len(ids) == 2


class TestCounts:
    @pytest.mark.asyncio
    async def test_count_and_unread_count(self, client: AsyncClient, inbox):
        headers = _as(inbox["owner"])
        await client.put(f"/api/v1/notifications/{inbox['ids'][1]}", json={"read": True}, headers=headers)

        counts = await client.get("/api/v1/notifications/count", headers=headers)
        unread = await client.get("/api/v1/notifications/unread-count", headers=headers)

        assert counts.json() == {"total": 3, "unread": 2}
        assert unread.json() == {"unread_count": 2}


class TestReadState:
    @pytest.mark.asyncio
    async def test_mark_read_and_unread(self, client: AsyncClient, inbox, db_session):
        headers = _as(inbox["owner"])
        target = inbox["ids"][2]

        response = await client.put(f"/api/v1/notifications/{target}", json={"read": True}, headers=headers)
        assert response.status_code == 200
        result = await db_session.execute(select(Notification.read).where(Notification.id == target))
        assert result.scalar_one() is True

        response = await client.put(f"/api/v1/notifications/{target}", json={"read": False}, headers=headers)
        assert response.status_code == 200
        result = await db_session.execute(select(Notification.read).where(Notification.id == target))
        assert result.scalar_one() is False

    @pytest.mark.asyncio
    async def test_cannot_touch_another_users_notification(self, client: AsyncClient, inbox):
        response = await client.put(
            f"/api/v1/notifications/{inbox['foreign']}", json={"read": True}, headers=_as(inbox["owner"])
        )
        assert response.status_code == 404
        assert response.json() == {"detail": "Notification not found"}

    @pytest.mark.asyncio
    async def test_unknown_notification(self, client: AsyncClient, inbox):
        response = await client.put("/api/v1/notifications/99999", json={"read": True}, headers=_as(inbox["owner"]))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_mark_all_read(self, client: AsyncClient, inbox):
        headers = _as(inbox["owner"])
        response = await client.post("/api/v1/notifications/read-all", headers=headers)
        assert response.status_code == 200
        assert response.json() == {"modified": 3}

        again = await client.post("/api/v1/notifications/read-all", headers=headers)
        assert again.json() == {"modified": 0}

        other = await client.get("/api/v1/notifications/unread-count", headers=_as(inbox["other"]))
        assert other.json() == {"unread_count": 1}


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_own(self, client: AsyncClient, inbox):
        headers = _as(inbox["owner"])
        response = await client.delete(f"/api/v1/notifications/{inbox['ids'][0]}", headers=headers)
        assert response.status_code == 200

        counts = await client.get("/api/v1/notifications/count", headers=headers)
        assert counts.json()["total"] == 2

    @pytest.mark.asyncio
    async def test_delete_foreign_is_404(self, client: AsyncClient, inbox):
        response = await client.delete(f"/api/v1/notifications/{inbox['foreign']}", headers=_as(inbox["owner"]))
        assert response.status_code == 404
