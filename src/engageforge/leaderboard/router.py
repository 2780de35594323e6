"""Leaderboard endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.config import get_settings
from engageforge.dependencies import get_db
from engageforge.engine.ranking import get_leaderboard
from engageforge.leaderboard.schemas import LeaderboardResponse, Pagination

router = APIRouter(prefix="/api/v1/leaderboard", tags=["Leaderboard"])


@router.get("", response_model=LeaderboardResponse)
async def leaderboard(
    company_id: str = Query(min_length=1),
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> LeaderboardResponse:
    """Get one page of a company's leaderboard, highest XP first."""
    settings = get_settings()
    page_size = min(limit or settings.leaderboard_default_limit, settings.leaderboard_max_limit)

    entries = await get_leaderboard(db, company_id, limit=page_size, offset=offset)
    return LeaderboardResponse(
        leaderboard=entries,
        pagination=Pagination(
            limit=page_size,
            offset=offset,
            has_more=len(entries) == page_size,
        ),
    )
