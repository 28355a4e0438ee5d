"""Integration tests for subscription renewal."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select

from inventorypro.db.models import SubscriptionStatus, User
from inventorypro.email.service import EmailService
from inventorypro.notifications.store import list_notifications
from inventorypro.subscriptions.reminders import sweep_reminders
from inventorypro.subscriptions.service import renew_subscription

NOW = datetime(2026, 3, 10, 9, 0, 0, tzinfo=timezone.utc)


class TestRenewSubscription:
    @pytest.mark.asyncio
    async def test_expired_restarts_from_now(self, db_session, make_user, email_service):
        user = await make_user(ends_in=-timedelta(days=10), status=SubscriptionStatus.EXPIRED)

        renewed = await renew_subscription(db_session, user.id, email_service, now=NOW)

        assert renewed.subscription_status == SubscriptionStatus.ACTIVE.value
        assert renewed.subscription_end_date == datetime(2026, 4, 10, 9, 0, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_active_extends_from_current_end(self, db_session, make_user, email_service):
        user = await make_user(ends_in=timedelta(days=3))

        renewed = await renew_subscription(db_session, user.id, email_service, now=NOW)

        assert renewed.subscription_end_date == datetime(2026, 4, 13, 9, 0, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_resets_reminder_bookkeeping(self, db_session, make_user, email_service):
        user = await make_user(ends_in=timedelta(days=3), last_reminder_sent=NOW - timedelta(hours=1), reminder_count=3)

        await renew_subscription(db_session, user.id, email_service, now=NOW)

        result = await db_session.execute(
            select(User.last_reminder_sent, User.reminder_count).where(User.id == user.id)
        )
        assert tuple(result.one()) == (None, 0)

    @pytest.mark.asyncio
    async def test_notice_and_confirmation_email(self, db_session, make_user, email_service, email_provider):
        user = await make_user(ends_in=-timedelta(days=1), status=SubscriptionStatus.EXPIRED, email="r@example.com")

        await renew_subscription(db_session, user.id, email_service, now=NOW)

        notices = await list_notifications(db_session, user.id)
        assert [n.payload["kind"] for n in notices] == ["renewed"]
        sent = email_provider.send.await_args.args[0]
        to, subject, text = sent.to, sent.subject, sent.text_body
        assert to == "r@example.com"
        assert "renewed" in subject.lower()
        assert "April 10, 2026" in text

    @pytest.mark.asyncio
    async def test_unknown_user(self, db_session, email_service):
        with pytest.raises(LookupError):
            await renew_subscription(db_session, 9999, email_service, now=NOW)

    @pytest.mark.asyncio
    async def test_renewed_subscription_leaves_reminder_window(self, db_session, make_user, email_service):
        user = await make_user(ends_in=timedelta(days=2))
        await renew_subscription(db_session, user.id, email_service, now=NOW)
        assert await sweep_reminders(db_session, email_service, NOW) == 0

    @pytest.mark.asyncio
    async def test_email_error_does_not_undo_or_fail_renewal(self, db_session, make_user, email_provider):
        user = await make_user(ends_in=-timedelta(days=1), status=SubscriptionStatus.EXPIRED)
        redis = MagicMock()
        redis.incr = AsyncMock(side_effect=ConnectionError("redis down"))
        broken = MagicMock()
        broken.send_template = AsyncMock(side_effect=RuntimeError("template blew up"))

        renewed = await renew_subscription(db_session, user.id, broken, now=NOW)

        assert renewed.subscription_status == SubscriptionStatus.ACTIVE.value
        broken.send_template.assert_awaited_once()
        result = await db_session.execute(select(User.subscription_status).where(User.id == user.id))
        assert result.scalar_one() == SubscriptionStatus.ACTIVE.value

        service = EmailService(provider=email_provider, redis=redis, rate_limit_max=5)
        await renew_subscription(db_session, user.id, service, now=NOW)
        email_provider.send.assert_awaited_once()
