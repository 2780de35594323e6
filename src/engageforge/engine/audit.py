"""Ledger audit — checks that stored XP/level agree with the XP ledger."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.db.models import User, XpEvent
from engageforge.engine.levels import level_for_xp
from engageforge.exceptions import LedgerInconsistencyError


async def ledger_sum(db: AsyncSession, user_id: str) -> int:
    """Sum of a user's ledger rows."""
    result = await db.execute(
        select(func.coalesce(func.sum(XpEvent.xp_amount), 0)).where(XpEvent.user_id == user_id)
    )
    return int(result.scalar_one())


async def verify_user_ledger(db: AsyncSession, user_id: str) -> int:
    """Return the user's XP, raising if it disagrees with the ledger.

    Raises:
        LedgerInconsistencyError: users.xp != ledger sum, or users.level != level_for_xp(xp).
    """
    result = await db.execute(
        select(User.xp, User.level).where(User.id == user_id)
    )
    stored_xp, stored_level = result.one()
    total = await ledger_sum(db, user_id)
    expected_level = level_for_xp(stored_xp)
    if stored_xp != total or stored_level != expected_level:
        raise LedgerInconsistencyError(user_id, stored_xp, total, stored_level, expected_level)
    return stored_xp


async def verify_company_ledgers(db: AsyncSession, company_id: str) -> int:
    """Verify every user in a company. Returns the number of users checked."""
    result = await db.execute(select(User.id).where(User.company_id == company_id).order_by(User.id))
    user_ids = list(result.scalars().all())
    for user_id in user_ids:
        await verify_user_ledger(db, user_id)
    return len(user_ids)
