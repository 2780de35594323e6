"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from arq import create_pool
from arq.connections import RedisSettings
from fastapi import FastAPI

from engageforge.catalog.router import router as catalog_router
from engageforge.config import Settings, get_settings
from engageforge.dashboard.router import router as dashboard_router
from engageforge.database import Database
from engageforge.dispatch import ArqDispatcher, Dispatcher, TaskDispatcher
from engageforge.engine.notifications import EventPublisher
from engageforge.engine.processor import EventProcessor
from engageforge.health.router import router as health_router
from engageforge.leaderboard.router import router as leaderboard_router
from engageforge.middleware import setup_middleware
from engageforge.users.router import router as users_router
from engageforge.webhooks.router import router as webhooks_router


async def _build_dispatcher(settings: Settings, processor: EventProcessor) -> tuple[Dispatcher, object | None]:
    """Pick the dispatch backend. Returns (dispatcher, arq pool or None)."""
    if settings.dispatch_mode == "arq":
        pool = await create_pool(RedisSettings.from_dsn(settings.arq_redis_url))
        return ArqDispatcher(pool, settings.arq_queue_name), pool
    if settings.dispatch_mode == "task":
        return TaskDispatcher(processor), None
    msg = f"Unknown dispatch_mode: {settings.dispatch_mode!r}"
    raise ValueError(msg)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()

    database = Database.from_settings(settings)
    if database.url.startswith("sqlite"):
        await database.create_all()

    redis = None
    if settings.redis_url:
        redis = aioredis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=50,
        )

    processor = EventProcessor(database, EventPublisher(redis))
    dispatcher, arq_pool = await _build_dispatcher(settings, processor)

    app.state.database = database
    app.state.redis = redis
    app.state.processor = processor
    app.state.dispatcher = dispatcher

    yield

    await dispatcher.drain()
    if arq_pool is not None:
        await arq_pool.aclose()
    if redis is not None:
        await redis.aclose()
    await database.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="EngageForge API",
        description="XP, level and badge rule engine for community activity",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(webhooks_router)
    app.include_router(leaderboard_router)
    app.include_router(users_router)
    app.include_router(catalog_router)
    app.include_router(dashboard_router)

    return app


app = create_app()
