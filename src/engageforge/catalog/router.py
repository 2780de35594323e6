"""Read-only listings of a company's rules and badges."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.catalog.schemas import (
    BadgeResponse,
    BadgesResponse,
    BadgeSummary,
    EventTypeOption,
    RuleResponse,
    RulesResponse,
)
from engageforge.db.models import Badge, Rule, UserBadge
from engageforge.dependencies import get_db
from engageforge.engine.rule_matcher import SUPPORTED_EVENT_TYPES

router = APIRouter(prefix="/api/v1", tags=["Catalog"])


@router.get("/rules", response_model=RulesResponse)
async def list_rules(
    company_id: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> RulesResponse:
    """All rules for a company, newest first, plus the supported event types."""
    result = await db.execute(
        select(Rule)
        .where(Rule.company_id == company_id)
        .order_by(Rule.created_at.desc(), Rule.id.desc())
    )
    rules = [
        RuleResponse(
            id=r.id,
            name=r.name,
            description=r.description,
            event_type=r.event_type,
            xp_amount=r.xp_amount,
            is_active=r.is_active,
            badge=BadgeSummary(id=r.badge.id, name=r.badge.name) if r.badge else None,
            created_at=r.created_at,
        )
        for r in result.scalars().all()
    ]
    return RulesResponse(
        rules=rules,
        supported_event_types=[EventTypeOption(**t) for t in SUPPORTED_EVENT_TYPES],
    )


@router.get("/badges", response_model=BadgesResponse)
async def list_badges(
    company_id: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> BadgesResponse:
    """All badges for a company with how many users earned each."""
    earned = (
        select(UserBadge.badge_id, func.count(UserBadge.id).label("earned_count"))
        .group_by(UserBadge.badge_id)
        .subquery()
    )
    result = await db.execute(
        select(Badge, func.coalesce(earned.c.earned_count, 0))
        .outerjoin(earned, earned.c.badge_id == Badge.id)
        .where(Badge.company_id == company_id)
        .order_by(Badge.created_at.desc(), Badge.id.desc())
    )
    return BadgesResponse(
        badges=[
            BadgeResponse(
                id=b.id,
                name=b.name,
                description=b.description,
                icon=b.icon,
                earned_count=int(count),
                created_at=b.created_at,
            )
            for b, count in result.all()
        ]
    )
