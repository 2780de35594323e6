"""Dashboard endpoint — company overview."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.dashboard.schemas import DashboardResponse
from engageforge.dashboard.service import get_dashboard
from engageforge.dependencies import get_db

router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardResponse)
async def company_dashboard(
    company_id: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> DashboardResponse:
    """Aggregated stats, top users and recent XP events for a company."""
    return await get_dashboard(db, company_id)
