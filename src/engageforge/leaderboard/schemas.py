"""Pydantic response models for leaderboard endpoints."""

from __future__ import annotations

from pydantic import BaseModel

from engageforge.engine.schemas import LeaderboardEntry


class Pagination(BaseModel):
    limit: int
    offset: int
    has_more: bool


class LeaderboardResponse(BaseModel):
    leaderboard: list[LeaderboardEntry]
    pagination: Pagination
