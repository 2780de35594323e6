"""Pydantic response models for rule and badge listings."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class BadgeSummary(BaseModel):
    id: str
    name: str


class RuleResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    event_type: str
    xp_amount: int
    is_active: bool
    badge: BadgeSummary | None = None
    created_at: datetime


class EventTypeOption(BaseModel):
    value: str
    label: str
    description: str


class RulesResponse(BaseModel):
    rules: list[RuleResponse]
    supported_event_types: list[EventTypeOption]


class BadgeResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    icon: str
    earned_count: int = 0
    created_at: datetime


class BadgesResponse(BaseModel):
    badges: list[BadgeResponse]
