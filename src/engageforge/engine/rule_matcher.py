"""Rule matcher — which configured rules fire for an event."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.db.models import Rule
from engageforge.engine.repositories import find_active_by_company_and_type

SUPPORTED_EVENT_TYPES: list[dict[str, str]] = [
    {"value": "payment.succeeded", "label": "Payment Succeeded", "description": "When a user makes a purchase"},
    {"value": "membership.activated", "label": "Membership Activated", "description": "When a user joins or renews"},
    {"value": "chat.message.created", "label": "Chat Message", "description": "When a user posts in chat"},
    {"value": "challenge.completed", "label": "Challenge Completed", "description": "When a user completes a challenge"},
    {"value": "content.viewed", "label": "Content Viewed", "description": "When a user views content"},
    {"value": "poll.voted", "label": "Poll Vote", "description": "When a user votes in a poll"},
]


async def match_rules(db: AsyncSession, company_id: str, event_type: str) -> list[Rule]:
    """Active rules for ``company_id`` + ``event_type``; empty list when none match."""
    if not company_id or not event_type:
        return []
    return await find_active_by_company_and_type(db, company_id, event_type)
