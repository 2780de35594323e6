"""User profile endpoint — /api/v1/users/{user_id}."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.dependencies import get_db
from engageforge.users.schemas import UserProfileResponse
from engageforge.users.service import get_profile

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.get("/{user_id}", response_model=UserProfileResponse)
async def user_profile(
    user_id: str,
    company_id: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> UserProfileResponse:
    """Get a user's XP, level, rank and badges."""
    return await get_profile(db, user_id, company_id)
