"""Async engine and sessions.

One engine per process, created in the app lifespan or the arq worker
startup. PostgreSQL (asyncpg) in production; SQLite (aiosqlite) for local
runs and tests, where an in-memory database lives on a single shared
connection.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from inventorypro.db import models  # noqa: F401
from inventorypro.db.base import Base

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

_NOT_READY = "Database not initialized. Call init_db() first."


def engine_options(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_size": 10, "max_overflow": 5, "pool_pre_ping": True}


async def init_db(url: str, *, echo: bool = False) -> None:
    global _engine, _session_factory  # noqa: PLW0603
    _engine = create_async_engine(url, echo=echo, **engine_options(url))
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)


async def close_db() -> None:
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None


async def create_schema() -> None:
    """Create all tables directly from the models (tests and local SQLite)."""
    if _engine is None:
        raise RuntimeError(_NOT_READY)
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Factory for jobs that open and close their own session."""
    if _session_factory is None:
        raise RuntimeError(_NOT_READY)
    return _session_factory


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with get_session_factory()() as session:
        yield session
