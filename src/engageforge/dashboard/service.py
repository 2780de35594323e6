"""Company dashboard aggregation.

Read-only and uncached: counts, XP totals, top members and the latest
ledger rows for one company.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.dashboard.schemas import CompanyStats, DashboardResponse, RecentXpEvent
from engageforge.db.models import Badge, Rule, User, XpEvent
from engageforge.engine.levels import level_for_xp
from engageforge.engine.ranking import display_name_for, get_leaderboard

TOP_USERS_LIMIT = 5
RECENT_EVENTS_LIMIT = 5


async def _count(db: AsyncSession, stmt: Select[Any]) -> int:
    result = await db.execute(stmt)
    return int(result.scalar_one() or 0)


async def get_company_stats(db: AsyncSession, company_id: str) -> CompanyStats:
    """Rule, user and badge counts plus XP totals for a company."""
    rules_count = await _count(
        db, select(func.count(Rule.id)).where(Rule.company_id == company_id)
    )
    active_rules_count = await _count(
        db,
        select(func.count(Rule.id)).where(Rule.company_id == company_id, Rule.is_active.is_(True)),
    )
    badges_count = await _count(
        db, select(func.count(Badge.id)).where(Badge.company_id == company_id)
    )

    result = await db.execute(select(User.xp).where(User.company_id == company_id))
    xp_values = [int(xp) for xp in result.scalars().all()]
    # Derived from XP, not the stored level column
    average_level = (
        sum(level_for_xp(xp) for xp in xp_values) / len(xp_values) if xp_values else 0.0
    )

    return CompanyStats(
        rules_count=rules_count,
        active_rules_count=active_rules_count,
        users_count=len(xp_values),
        total_xp=sum(xp_values),
        badges_count=badges_count,
        average_level=round(average_level, 2),
    )


async def get_recent_events(
    db: AsyncSession, company_id: str, limit: int = RECENT_EVENTS_LIMIT
) -> list[RecentXpEvent]:
    """Latest XP ledger rows for a company's users, newest first."""
    result = await db.execute(
        select(XpEvent, User, Rule.name)
        .join(User, User.id == XpEvent.user_id)
        .outerjoin(Rule, Rule.id == XpEvent.rule_id)
        .where(User.company_id == company_id)
        .order_by(XpEvent.created_at.desc(), XpEvent.id.desc())
        .limit(limit)
    )
    return [
        RecentXpEvent(
            id=event.id,
            user_id=user.id,
            display_name=display_name_for(user),
            rule_id=event.rule_id,
            rule_name=rule_name,
            xp_amount=event.xp_amount,
            created_at=event.created_at,
        )
        for event, user, rule_name in result.all()
    ]


async def get_dashboard(db: AsyncSession, company_id: str) -> DashboardResponse:
    """Full company overview for operator dashboards."""
    return DashboardResponse(
        company_id=company_id,
        stats=await get_company_stats(db, company_id),
        top_users=await get_leaderboard(db, company_id, limit=TOP_USERS_LIMIT),
        recent_events=await get_recent_events(db, company_id),
    )
