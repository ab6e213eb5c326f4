"""Async SQLAlchemy engine and session management.

The engine lives on a :class:`Database` handle owned by the application
lifespan and stored on ``app.state.db``; request handlers receive sessions
through the :func:`get_session` dependency.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from certprep.config import Settings


class Database:
    """Engine plus session factory for one process."""

    def __init__(self, url: str, **engine_kwargs: Any) -> None:  # noqa: ANN401
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def session(self) -> AsyncSession:
        """Open a new session (caller owns its lifetime)."""
        return self.session_factory()

    async def dispose(self) -> None:
        """Dispose of the engine's connection pool."""
        await self.engine.dispose()


def create_database(settings: Settings) -> Database:
    """Build the production database handle from settings."""
    return Database(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
        echo=False,
        connect_args={"statement_cache_size": 0},
    )


def get_database(request: Request) -> Database:
    """Return the database handle attached to the running app."""
    db: Database | None = getattr(request.app.state, "db", None)
    if db is None:
        msg = "Database not initialized. Attach a Database to app.state.db first."
        raise RuntimeError(msg)
    return db


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session (FastAPI dependency)."""
    async with get_database(request).session() as session:
        yield session
