"""Dashboard Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from engageforge.engine.schemas import LeaderboardEntry


class CompanyStats(BaseModel):
    rules_count: int
    active_rules_count: int
    users_count: int
    total_xp: int
    badges_count: int
    average_level: float


class RecentXpEvent(BaseModel):
    """One ledger row with the names needed to display it."""

    id: int
    user_id: str
    display_name: str
    rule_id: str | None = None
    rule_name: str | None = None
    xp_amount: int
    created_at: datetime


class DashboardResponse(BaseModel):
    """Company overview — totals, top members and latest XP awards."""

    company_id: str
    stats: CompanyStats
    top_users: list[LeaderboardEntry]
    recent_events: list[RecentXpEvent]
