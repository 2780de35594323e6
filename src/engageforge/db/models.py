"""ORM models for companies, users, rules, badges, grants and the XP ledger.

Schema is created by the Alembic migration in ``alembic/versions``; tests
build it with ``Base.metadata.create_all`` on SQLite.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from engageforge.db.base import Base

JSONType = JSON().with_variant(JSONB(), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Tenancy
# ---------------------------------------------------------------------------


class Company(Base):
    """A community; owns users, rules and badges."""

    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False, default="Community")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class User(Base):
    """Community member with denormalized XP and level (level == level_for_xp(xp))."""

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_company_xp", "company_id", "xp"),
        CheckConstraint("xp >= 0", name="users_xp_check"),
        CheckConstraint("level >= 1", name="users_level_check"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    company_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    username: Mapped[str | None] = mapped_column(String(64), nullable=True)
    xp: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0, server_default="0")
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    grants: Mapped[list[UserBadge]] = relationship(
        "UserBadge", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )


# ---------------------------------------------------------------------------
# Configuration (managed out-of-band; read-only to the engine)
# ---------------------------------------------------------------------------


class Badge(Base):
    """Named achievement a user can earn at most once."""

    __tablename__ = "badges"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    company_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str] = mapped_column(String(256), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class Rule(Base):
    """Maps an event type to an XP award and an optional badge."""

    __tablename__ = "rules"
    __table_args__ = (
        Index("idx_rules_company_event", "company_id", "event_type", "is_active"),
        CheckConstraint("xp_amount > 0", name="rules_xp_amount_check"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    company_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    xp_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    badge_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("badges.id", ondelete="SET NULL"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    badge: Mapped[Badge | None] = relationship("Badge", lazy="joined")


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class UserBadge(Base):
    """Badge grants — UNIQUE(user_id, badge_id) prevents duplicates."""

    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="user_badges_user_id_badge_id_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    badge_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("badges.id", ondelete="CASCADE"), nullable=False
    )
    earned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    user: Mapped[User] = relationship("User", back_populates="grants")
    badge: Mapped[Badge] = relationship("Badge", lazy="joined")


class XpEvent(Base):
    """Append-only XP ledger; per user, sum(xp_amount) == users.xp."""

    __tablename__ = "xp_events"
    __table_args__ = (
        Index("idx_xp_events_user", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    rule_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("rules.id", ondelete="SET NULL"), nullable=True
    )
    xp_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    event_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
