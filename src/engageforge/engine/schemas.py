"""Pydantic models for engine inputs and results."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WebhookEvent(BaseModel):
    """Normalized activity event delivered by the transport."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def user_id(self) -> str | None:
        value = self.data.get("user_id")
        return str(value) if value else None

    @property
    def company_id(self) -> str | None:
        value = self.data.get("company_id")
        return str(value) if value else None


class EventResult(BaseModel):
    """Outcome of processing one event for one user."""

    xp_awarded: int = 0
    badges_earned: list[str] = Field(default_factory=list)
    level_up: bool = False
    new_level: int | None = None

    @classmethod
    def zero(cls) -> EventResult:
        return cls()


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    display_name: str
    xp: int
    level: int
    badge_count: int
