"""Event processor — matches rules and applies them for one inbound event."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from engageforge.database import Database
from engageforge.engine.ledger import apply_event
from engageforge.engine.notifications import EventPublisher
from engageforge.engine.rule_matcher import match_rules
from engageforge.engine.schemas import EventResult, WebhookEvent
from engageforge.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)

TRANSIENT_STORAGE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError, OSError)


class EventProcessor:
    """Processes one event per call; safe to run many calls concurrently.

    Each call uses its own session and transaction, so concurrent events
    for the same user serialize on the user row in the store.
    """

    def __init__(self, database: Database, publisher: EventPublisher | None = None) -> None:
        self.database = database
        self.publisher = publisher

    async def process(
        self,
        event: WebhookEvent | dict[str, Any],
        company_id: str | None = None,
    ) -> EventResult:
        """Award XP/badges for ``event``. Returns the zero result for skips.

        Raises:
            StorageUnavailableError: The store failed; nothing was committed.
        """
        if not isinstance(event, WebhookEvent):
            event = WebhookEvent.model_validate(event)

        user_id = event.user_id
        company_id = company_id or event.company_id

        if not user_id:
            logger.info("No user_id in %s event, skipping", event.type)
            return EventResult.zero()
        if not company_id:
            logger.info("No company_id in %s event, skipping", event.type)
            return EventResult.zero()

        try:
            async with self.database.session() as db:
                rules = await match_rules(db, company_id, event.type)
                if not rules:
                    logger.info("No matching rules for event type: %s", event.type)
                    return EventResult.zero()

                result = await apply_event(db, user_id, company_id, rules, event.data)
                await db.commit()
        except TRANSIENT_STORAGE_ERRORS as exc:
            logger.warning(
                "Storage failure processing %s for user %s: %s",
                event.type, user_id, exc,
            )
            msg = f"Storage unavailable while processing {event.type} for user {user_id}"
            raise StorageUnavailableError(msg, user_id=user_id) from exc

        if self.publisher is not None:
            await self.publisher.publish_result(user_id, company_id, result)

        return result
