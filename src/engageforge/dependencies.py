"""Shared FastAPI dependencies.

Everything is read from ``app.state``, populated by the lifespan in
``engageforge.main``; there is no process-wide storage singleton.
"""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.database import Database
from engageforge.dispatch import Dispatcher


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session (FastAPI dependency)."""
    async with get_database(request).session() as session:
        yield session


def get_dispatcher(request: Request) -> Dispatcher:
    return request.app.state.dispatcher
