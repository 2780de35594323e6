"""Pydantic response models for user profile endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class EarnedBadgeResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    icon: str
    earned_at: datetime


class UserProfileResponse(BaseModel):
    id: str
    display_name: str
    xp: int
    level: int
    rank: int
    progress: int
    xp_to_next_level: int
    xp_progress: int
    badges: list[EarnedBadgeResponse]
