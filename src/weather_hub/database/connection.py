"""Engine and session lifecycle.

One process-wide async engine is created by ``init_db()`` at startup and
disposed by ``close_db()`` at shutdown. Request handlers get a fresh
``AsyncSession`` per request through ``get_db_session``.

## Backends

- PostgreSQL through asyncpg (``postgresql+asyncpg://``), pooled.
- SQLite through aiosqlite (``sqlite+aiosqlite://``) for tests and local
  runs. Every connection runs ``PRAGMA foreign_keys=ON`` so the RESTRICT
  rules on favorites and search history are enforced like on PostgreSQL.

## Usage

```python
from weather_hub.database import get_db, init_db

await init_db()
async with get_db() as session:
    user = await session.get(User, user_id)
```
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from weather_hub.config import Settings, get_settings
from weather_hub.database.models import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _build_engine(settings: Settings) -> AsyncEngine:
    if settings.is_sqlite:
        # In-memory databases live only as long as their single connection
        engine = create_async_engine(
            settings.database_url,
            poolclass=StaticPool,
            echo=settings.database_echo,
        )
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
        echo=settings.database_echo,
    )


def _require_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _engine


async def init_db() -> None:
    """Create the engine and session factory from current settings."""
    global _engine, _session_factory

    settings = get_settings()
    backend = "sqlite" if settings.is_sqlite else "postgresql"
    logger.info(f"Connecting to {backend} database")

    _engine = _build_engine(settings)
    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def close_db() -> None:
    """Dispose of the engine. Safe to call when never initialized."""
    global _engine, _session_factory

    if _engine is None:
        return

    logger.info("Closing database connection")
    await _engine.dispose()
    _engine = None
    _session_factory = None


async def create_tables() -> None:
    """Create users, cities, favorites and search history tables."""
    async with _require_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def drop_tables() -> None:
    """Drop every table. Tests only."""
    async with _require_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("Database tables dropped")


@asynccontextmanager
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Open a session; roll back if the block raises.

    Nothing is committed implicitly. Services commit their own writes.
    """
    if _session_factory is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")

    session = _session_factory()
    try:
        yield session
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with get_db() as session:
        yield session
