"""Level-up and badge-earned broadcasts over Redis pub/sub.

Published only after the event's transaction commits. Delivery is best
effort: a failed publish is logged and never fails the event.
"""

from __future__ import annotations

import json
import logging

from engageforge.engine.schemas import EventResult

logger = logging.getLogger(__name__)

LEVEL_UP_CHANNEL = "pubsub:level_up"
BADGE_EARNED_CHANNEL = "pubsub:badge_earned"


class EventPublisher:
    """Publishes engine outcomes for activity feeds and overlays."""

    def __init__(self, redis: object | None) -> None:
        self.redis = redis

    async def publish_result(self, user_id: str, company_id: str, result: EventResult) -> None:
        if self.redis is None:
            return
        if result.level_up:
            await self._publish(LEVEL_UP_CHANNEL, {
                "user_id": user_id,
                "company_id": company_id,
                "new_level": result.new_level,
            })
        for badge_name in result.badges_earned:
            await self._publish(BADGE_EARNED_CHANNEL, {
                "user_id": user_id,
                "company_id": company_id,
                "badge_name": badge_name,
            })

    async def _publish(self, channel: str, payload: dict) -> None:
        try:
            await self.redis.publish(channel, json.dumps(payload))  # type: ignore[union-attr]
        except Exception:
            logger.warning("Failed to publish %s broadcast", channel, exc_info=True)
