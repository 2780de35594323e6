"""Dispatch tests — fire-and-forget tasks and arq enqueueing."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from engageforge.dispatch import PROCESS_EVENT_JOB, ArqDispatcher, TaskDispatcher
from engageforge.engine.schemas import EventResult, WebhookEvent
from engageforge.exceptions import StorageUnavailableError

EVENT = WebhookEvent(type="poll.voted", data={"user_id": "U1", "company_id": "C1"})


class TestTaskDispatcher:
    @pytest.mark.asyncio
    async def test_event_processed_in_background(self, processor, seed, load_user):
        await seed.rule("R1", "poll.voted", 25)
        dispatcher = TaskDispatcher(processor)

        await dispatcher.dispatch(EVENT, "C1")
        await dispatcher.drain()

        assert (await load_user("U1")).xp == 25
        assert dispatcher.pending == 0

    @pytest.mark.asyncio
    async def test_failures_never_reach_caller(self):
        processor = MagicMock()
        processor.process = AsyncMock(side_effect=StorageUnavailableError("db down", user_id="U1"))
        dispatcher = TaskDispatcher(processor)

        await dispatcher.dispatch(EVENT, "C1")
        await dispatcher.drain()

        processor.process.assert_awaited_once_with(EVENT, "C1")

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_contained(self):
        processor = MagicMock()
        processor.process = AsyncMock(side_effect=RuntimeError("boom"))
        dispatcher = TaskDispatcher(processor)

        await dispatcher.dispatch(EVENT, "C1")
        await dispatcher.drain()
        assert dispatcher.pending == 0

    @pytest.mark.asyncio
    async def test_drain_with_nothing_pending(self):
        processor = MagicMock()
        processor.process = AsyncMock(return_value=EventResult.zero())
        await TaskDispatcher(processor).drain()


class TestArqDispatcher:
    @pytest.mark.asyncio
    async def test_enqueues_job(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock()
        dispatcher = ArqDispatcher(pool, "engageforge:events")

        await dispatcher.dispatch(EVENT, "C1")

        pool.enqueue_job.assert_awaited_once_with(
            PROCESS_EVENT_JOB,
            {"type": "poll.voted", "data": {"user_id": "U1", "company_id": "C1"}},
            "C1",
            _queue_name="engageforge:events",
        )

    @pytest.mark.asyncio
    async def test_enqueue_failure_is_logged_not_raised(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock(side_effect=ConnectionError("redis down"))
        dispatcher = ArqDispatcher(pool, "engageforge:events")

        await dispatcher.dispatch(EVENT, "C1")
        await dispatcher.drain()
