"""Webhook intake — acknowledges fast, processes in the background.

Signature verification happens upstream; this route receives an already
validated event.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from engageforge.dependencies import get_dispatcher
from engageforge.dispatch import Dispatcher
from engageforge.engine.schemas import WebhookEvent

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/webhooks", tags=["Webhooks"])


class WebhookAck(BaseModel):
    status: str


@router.post("", response_model=WebhookAck)
async def receive_webhook(
    event: WebhookEvent,
    dispatcher: Dispatcher = Depends(get_dispatcher),  # noqa: B008
) -> WebhookAck:
    """Accept an activity event; engine outcome never affects the response."""
    logger.info("webhook_received", event_type=event.type)

    company_id = event.company_id
    if not company_id:
        logger.info("webhook_skipped", event_type=event.type, reason="no company_id")
        return WebhookAck(status="skipped")

    await dispatcher.dispatch(event, company_id)
    return WebhookAck(status="accepted")


@router.get("")
async def webhook_health() -> dict[str, str]:
    """Health check for the webhook endpoint."""
    return {
        "status": "healthy",
        "service": "EngageForge Webhooks",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
