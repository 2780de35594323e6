"""User profile assembly — XP, level progress, rank and earned badges."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.db.models import UserBadge
from engageforge.engine.levels import compute_level
from engageforge.engine.ranking import display_name_for, get_user_rank
from engageforge.engine.repositories import get_or_create_user
from engageforge.users.schemas import EarnedBadgeResponse, UserProfileResponse


async def get_profile(db: AsyncSession, user_id: str, company_id: str) -> UserProfileResponse:
    """Build a user's profile, creating the user lazily on first view."""
    user = await get_or_create_user(db, user_id, company_id)
    await db.commit()

    rank = await get_user_rank(db, user.id, user.company_id)
    level_info = compute_level(user.xp)

    result = await db.execute(
        select(UserBadge)
        .where(UserBadge.user_id == user.id)
        .order_by(UserBadge.earned_at.desc(), UserBadge.id.desc())
    )
    badges = [
        EarnedBadgeResponse(
            id=grant.badge.id,
            name=grant.badge.name,
            description=grant.badge.description,
            icon=grant.badge.icon,
            earned_at=grant.earned_at,
        )
        for grant in result.scalars().all()
    ]

    return UserProfileResponse(
        id=user.id,
        display_name=display_name_for(user),
        xp=user.xp,
        level=level_info["level"],
        rank=rank,
        progress=round(level_info["progress"]),
        xp_to_next_level=level_info["xp_ceil"],
        xp_progress=level_info["xp_into_level"],
        badges=badges,
    )
