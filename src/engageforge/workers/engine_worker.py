"""arq worker for queued engine events.

Import path for arq CLI: arq engageforge.workers.engine_worker.WorkerSettings
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from arq.connections import RedisSettings
from arq.worker import Retry

from engageforge.config import get_settings
from engageforge.database import Database
from engageforge.engine.notifications import EventPublisher
from engageforge.engine.processor import EventProcessor
from engageforge.exceptions import StorageUnavailableError
from engageforge.middleware.logging import setup_logging

logger = logging.getLogger(__name__)

RETRY_BACKOFF_SECONDS = 5


async def startup(ctx: dict) -> None:  # type: ignore[type-arg]
    """Initialize the storage handle and publisher on worker startup."""
    settings = get_settings()
    setup_logging(settings)

    database = Database.from_settings(settings)
    publisher_redis = None
    if settings.redis_url:
        publisher_redis = aioredis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=20,
        )

    ctx["database"] = database
    ctx["publisher_redis"] = publisher_redis
    ctx["processor"] = EventProcessor(database, EventPublisher(publisher_redis))
    logger.info("Engine worker started")


async def shutdown(ctx: dict) -> None:  # type: ignore[type-arg]
    """Clean up on worker shutdown."""
    publisher_redis: aioredis.Redis | None = ctx.get("publisher_redis")
    if publisher_redis:
        await publisher_redis.aclose()

    database: Database | None = ctx.get("database")
    if database:
        await database.dispose()

    logger.info("Engine worker shut down")


async def process_event_job(ctx: dict, event: dict, company_id: str) -> dict:  # type: ignore[type-arg]
    """Process one queued event. Storage failures are retried by arq with backoff."""
    processor: EventProcessor = ctx["processor"]
    try:
        result = await processor.process(event, company_id)
    except StorageUnavailableError as exc:
        job_try = ctx.get("job_try", 1)
        logger.warning("Retrying event (try %d): %s", job_try, exc)
        raise Retry(defer=job_try * RETRY_BACKOFF_SECONDS) from exc
    return result.model_dump()


_settings = get_settings()


class WorkerSettings:
    """arq worker settings for the engine event queue."""

    functions = [process_event_job]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = RedisSettings.from_dsn(_settings.arq_redis_url)
    queue_name = _settings.arq_queue_name
    max_tries = _settings.arq_max_tries
    max_jobs = 20
