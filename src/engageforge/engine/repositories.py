"""Storage operations used by the rule engine.

Writes use dialect-native ``INSERT ... ON CONFLICT DO NOTHING`` and an
atomic ``xp = xp + :delta`` increment so that concurrent events for the
same user serialize on the user row instead of losing updates.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Table, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.db.models import Badge, Company, Rule, User, UserBadge, XpEvent

DEFAULT_COMPANY_NAME = "Community"


def _insert(db: AsyncSession, table: Table) -> Any:
    """Return the dialect-specific INSERT construct supporting ON CONFLICT."""
    dialect = db.bind.dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    msg = f"Unsupported database dialect: {dialect}"
    raise NotImplementedError(msg)


# ---------------------------------------------------------------------------
# Rules and badges (read-only)
# ---------------------------------------------------------------------------


async def find_active_by_company_and_type(
    db: AsyncSession, company_id: str, event_type: str
) -> list[Rule]:
    """Active rules for a company and event type, in creation order."""
    result = await db.execute(
        select(Rule)
        .where(
            Rule.company_id == company_id,
            Rule.event_type == event_type,
            Rule.is_active.is_(True),
        )
        .order_by(Rule.created_at.asc(), Rule.id.asc())
    )
    return list(result.scalars().all())


async def get_badge(db: AsyncSession, badge_id: str) -> Badge | None:
    """Fetch a badge from the database, bypassing the identity map."""
    result = await db.execute(
        select(Badge)
        .where(Badge.id == badge_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def existing_rule_ids(db: AsyncSession, rule_ids: list[str]) -> set[str]:
    """Subset of ``rule_ids`` still present in the rules table."""
    if not rule_ids:
        return set()
    result = await db.execute(select(Rule.id).where(Rule.id.in_(rule_ids)))
    return set(result.scalars().all())


# ---------------------------------------------------------------------------
# Companies and users
# ---------------------------------------------------------------------------


async def ensure_company(db: AsyncSession, company_id: str) -> None:
    """Create the company row if it does not exist yet."""
    stmt = (
        _insert(db, Company.__table__)
        .values(id=company_id, name=DEFAULT_COMPANY_NAME, created_at=datetime.now(timezone.utc))
        .on_conflict_do_nothing(index_elements=["id"])
    )
    await db.execute(stmt)


async def ensure_user(db: AsyncSession, user_id: str, company_id: str) -> None:
    """Create the user with xp=0, level=1 if absent. Does not load it."""
    await ensure_company(db, company_id)
    stmt = (
        _insert(db, User.__table__)
        .values(
            id=user_id,
            company_id=company_id,
            xp=0,
            level=1,
            created_at=datetime.now(timezone.utc),
        )
        .on_conflict_do_nothing(index_elements=["id"])
    )
    await db.execute(stmt)


async def get_or_create_user(db: AsyncSession, user_id: str, company_id: str) -> User:
    """Get the user row, creating it lazily."""
    await ensure_user(db, user_id, company_id)
    result = await db.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def increment_xp(db: AsyncSession, user_id: str, delta: int) -> tuple[int, int]:
    """Atomically add ``delta`` XP. Returns (new_xp, stored_level_before_update).

    The UPDATE takes the row lock, so every later statement in the same
    transaction sees a value no concurrent event can overwrite.
    """
    table = User.__table__
    result = await db.execute(
        update(table)
        .where(table.c.id == user_id)
        .values(xp=table.c.xp + delta)
        .returning(table.c.xp, table.c.level)
    )
    new_xp, previous_level = result.one()
    return int(new_xp), int(previous_level)


async def update_level(db: AsyncSession, user_id: str, level: int) -> None:
    table = User.__table__
    await db.execute(update(table).where(table.c.id == user_id).values(level=level))


# ---------------------------------------------------------------------------
# Ledger and grants
# ---------------------------------------------------------------------------


def append_ledger_row(
    db: AsyncSession,
    user_id: str,
    rule_id: str | None,
    xp_amount: int,
    event_data: dict[str, Any],
) -> XpEvent:
    """Stage one immutable ledger row (flushed with the transaction)."""
    row = XpEvent(
        user_id=user_id,
        rule_id=rule_id,
        xp_amount=xp_amount,
        event_data=event_data,
        created_at=datetime.now(timezone.utc),
    )
    db.add(row)
    return row


async def try_insert_grant(db: AsyncSession, user_id: str, badge_id: str) -> bool:
    """Insert a badge grant. Returns False (never raises) if already granted."""
    stmt = (
        _insert(db, UserBadge.__table__)
        .values(user_id=user_id, badge_id=badge_id, earned_at=datetime.now(timezone.utc))
        .on_conflict_do_nothing(index_elements=["user_id", "badge_id"])
    )
    result = await db.execute(stmt)
    return result.rowcount == 1
