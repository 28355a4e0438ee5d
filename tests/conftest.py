"""Shared test fixtures.

Every test gets a fresh in-memory SQLite database (aiosqlite, one shared
connection) with the schema created from the ORM metadata. Redis is
disabled and the in-process scheduler is off.
"""

from __future__ import annotations

import os

os.environ["IPRO_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["IPRO_REDIS_URL"] = ""
os.environ["IPRO_SCHEDULER_MODE"] = "off"
os.environ["IPRO_CRON_SECRET"] = "test-cron-secret"
os.environ["IPRO_LOG_FORMAT"] = "console"
os.environ["IPRO_REMOTE_TRIGGER_BASE_URL"] = ""

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from inventorypro.config import get_settings  # noqa: E402
from inventorypro.database import close_db, create_schema, get_session_factory, init_db  # noqa: E402
from inventorypro.db.models import SubscriptionStatus, User  # noqa: E402
from inventorypro.email.service import BaseEmailProvider, EmailService, reset_email_service  # noqa: E402

get_settings.cache_clear()

# Reference instant shared by the sweep tests
NOW = datetime(2026, 3, 10, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings and the email singleton around every test."""
    get_settings.cache_clear()
    reset_email_service()
    yield
    get_settings.cache_clear()
    reset_email_service()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Session on a freshly created in-memory database."""
    await init_db(get_settings().database_url)
    await create_schema()

    async with get_session_factory()() as session:
        yield session

    await close_db()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, sharing the test database."""
    from inventorypro.main import create_app

    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def email_provider() -> BaseEmailProvider:
    """Provider double that records sends and reports success."""
    provider = MagicMock(spec=BaseEmailProvider)
    provider.send = AsyncMock(return_value=True)
    return provider


@pytest.fixture
def email_service(email_provider: BaseEmailProvider) -> EmailService:
    return EmailService(provider=email_provider, rate_limit_max=100)


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory for tenants with a subscription ending ``ends_in`` from ``NOW``."""
    counter = {"n": 0}

    async def _make(
        ends_in: timedelta | None = None,
        status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
        last_reminder_sent: datetime | None = None,
        **fields,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=fields.pop("email", f"tenant{counter['n']}@example.com"),
            name=fields.pop("name", f"Tenant {counter['n']}"),
            subscription_status=status.value,
            subscription_end_date=NOW + ends_in if ends_in is not None else None,
            last_reminder_sent=last_reminder_sent,
            **fields,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make
