"""Async SQLAlchemy engine and session management.

The storage handle is constructed explicitly and passed to the components
that need it; the FastAPI app keeps one on ``app.state.database``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from engageforge.db.base import Base


class Database:
    """Owns one async engine and its session factory."""

    def __init__(self, url: str, **engine_kwargs: Any) -> None:
        if url.startswith("postgresql"):
            engine_kwargs.setdefault("pool_pre_ping", True)
            engine_kwargs.setdefault("connect_args", {"statement_cache_size": 0})
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=False, **engine_kwargs)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Any) -> Database:
        """Build a handle from application settings."""
        kwargs: dict[str, Any] = {}
        if settings.database_url.startswith("postgresql"):
            kwargs = {
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_max_overflow,
            }
        return cls(settings.database_url, **kwargs)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Yield a session; uncommitted work is rolled back on exit."""
        async with self.session_factory() as session:
            yield session

    async def create_all(self) -> None:
        """Create all tables (tests and local SQLite only; production uses Alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Dispose of the engine's connection pool."""
        await self.engine.dispose()
