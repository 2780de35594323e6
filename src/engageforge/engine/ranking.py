"""Ranking service — leaderboard pages and individual rank, straight from users.xp.

Two rank notions exist and may disagree for users tied on XP:

- leaderboard position: ``offset + index + 1`` with ties broken by
  (created_at, id), so pages are stable and gapless;
- ``get_user_rank``: ``1 + count(users with strictly greater xp)``, so
  tied users share a rank.

Both are kept as-is; callers pick the one that matches their display.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.db.models import User, UserBadge
from engageforge.engine.schemas import LeaderboardEntry

ANONYMOUS_NAME = "Anonymous"


def display_name_for(user: User) -> str:
    return user.display_name or user.username or ANONYMOUS_NAME


async def get_leaderboard(
    db: AsyncSession,
    company_id: str,
    limit: int = 10,
    offset: int = 0,
) -> list[LeaderboardEntry]:
    """One page of the company leaderboard, highest XP first."""
    if limit < 1:
        msg = f"limit must be >= 1, got {limit}"
        raise ValueError(msg)
    if offset < 0:
        msg = f"offset must be >= 0, got {offset}"
        raise ValueError(msg)

    badge_counts = (
        select(UserBadge.user_id, func.count(UserBadge.id).label("badge_count"))
        .group_by(UserBadge.user_id)
        .subquery()
    )
    result = await db.execute(
        select(User, func.coalesce(badge_counts.c.badge_count, 0))
        .outerjoin(badge_counts, badge_counts.c.user_id == User.id)
        .where(User.company_id == company_id)
        .order_by(User.xp.desc(), User.created_at.asc(), User.id.asc())
        .limit(limit)
        .offset(offset)
    )

    return [
        LeaderboardEntry(
            rank=offset + index + 1,
            user_id=user.id,
            display_name=display_name_for(user),
            xp=user.xp,
            level=user.level,
            badge_count=int(badge_count),
        )
        for index, (user, badge_count) in enumerate(result.all())
    ]


async def get_user_rank(db: AsyncSession, user_id: str, company_id: str) -> int:
    """1 + number of users in the company with strictly more XP.

    A user with no row yet ranks as if they had 0 XP.
    """
    xp_result = await db.execute(
        select(User.xp).where(User.id == user_id, User.company_id == company_id)
    )
    user_xp = xp_result.scalar_one_or_none() or 0

    count_result = await db.execute(
        select(func.count(User.id)).where(
            User.company_id == company_id,
            User.xp > user_xp,
        )
    )
    return int(count_result.scalar_one()) + 1
