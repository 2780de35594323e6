"""Fire-and-forget event dispatch for the webhook transport.

The transport acknowledges a webhook before the engine runs. Dispatch only
changes *when* the outcome is observed; each event still runs in its own
atomic transaction inside ``EventProcessor.process``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import structlog

from engageforge.engine.processor import EventProcessor
from engageforge.engine.schemas import WebhookEvent
from engageforge.exceptions import EngineError

logger = structlog.get_logger()

PROCESS_EVENT_JOB = "process_event_job"


class Dispatcher(Protocol):
    async def dispatch(self, event: WebhookEvent, company_id: str) -> None: ...

    async def drain(self) -> None: ...


class TaskDispatcher:
    """Runs each event as an in-process asyncio task."""

    def __init__(self, processor: EventProcessor) -> None:
        self.processor = processor
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def dispatch(self, event: WebhookEvent, company_id: str) -> None:
        task = asyncio.create_task(self._run(event, company_id))
        # Strong reference until done, otherwise the loop may drop the task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, event: WebhookEvent, company_id: str) -> None:
        try:
            result = await self.processor.process(event, company_id)
        except EngineError as exc:
            logger.error(
                "event_processing_failed",
                event_type=event.type,
                company_id=company_id,
                user_id=event.user_id,
                retryable=exc.retryable,
                error=str(exc),
            )
        except Exception as exc:
            logger.error(
                "event_processing_crashed",
                event_type=event.type,
                company_id=company_id,
                user_id=event.user_id,
                exc_info=exc,
            )
        else:
            if result.xp_awarded > 0:
                logger.info(
                    "event_processed",
                    event_type=event.type,
                    company_id=company_id,
                    user_id=event.user_id,
                    xp_awarded=result.xp_awarded,
                    badges_earned=len(result.badges_earned),
                    level_up=result.level_up,
                )

    async def drain(self) -> None:
        """Wait for outstanding tasks (shutdown and tests)."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


class ArqDispatcher:
    """Enqueues events for the arq engine worker."""

    def __init__(self, pool: Any, queue_name: str) -> None:
        self.pool = pool
        self.queue_name = queue_name

    async def dispatch(self, event: WebhookEvent, company_id: str) -> None:
        try:
            await self.pool.enqueue_job(
                PROCESS_EVENT_JOB,
                event.model_dump(),
                company_id,
                _queue_name=self.queue_name,
            )
        except Exception as exc:
            logger.error(
                "event_enqueue_failed",
                event_type=event.type,
                company_id=company_id,
                error=str(exc),
            )

    async def drain(self) -> None:
        return None
