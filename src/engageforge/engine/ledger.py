"""Ledger writer — applies one event's XP and badge grants to a user.

Runs inside the caller's transaction. Nothing here commits, so a failure
at any step leaves no partial state once the caller rolls back.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.db.models import Rule
from engageforge.engine import repositories as repo
from engageforge.engine.levels import level_for_xp
from engageforge.engine.schemas import EventResult

logger = logging.getLogger(__name__)


async def apply_event(
    db: AsyncSession,
    user_id: str,
    company_id: str,
    rules: list[Rule],
    event_data: dict[str, Any],
) -> EventResult:
    """Award XP and badges for ``rules`` to ``user_id``.

    1. Ensure company + user rows exist
    2. Append one ledger row per rule
    3. Insert badge grants (duplicates are skipped, not errors)
    4. Atomically increment XP, then persist the derived level
    """
    if not rules:
        return EventResult.zero()

    await repo.ensure_user(db, user_id, company_id)

    # Rules may have been deleted since matching; keep the XP, drop the reference
    live_rule_ids = await repo.existing_rule_ids(db, [r.id for r in rules])

    total_xp = 0
    for rule in rules:
        rule_id = rule.id if rule.id in live_rule_ids else None
        if rule_id is None:
            logger.warning("Rule %s vanished before write; ledger row kept without rule", rule.id)
        repo.append_ledger_row(db, user_id, rule_id, rule.xp_amount, event_data)
        total_xp += rule.xp_amount

    badges_earned: list[str] = []
    for rule in rules:
        if not rule.badge_id:
            continue
        badge = await repo.get_badge(db, rule.badge_id)
        if badge is None:
            logger.warning(
                "Rule %s references missing badge %s; treating as no badge",
                rule.id, rule.badge_id,
            )
            continue
        if await repo.try_insert_grant(db, user_id, badge.id):
            badges_earned.append(badge.name)
        else:
            logger.info("User %s already has badge %s", user_id, badge.id)

    new_xp, previous_level = await repo.increment_xp(db, user_id, total_xp)
    new_level = level_for_xp(new_xp)
    if new_level != previous_level:
        await repo.update_level(db, user_id, new_level)

    await db.flush()

    level_up = new_level > previous_level
    logger.info(
        "Processed event for user %s: +%d XP, %d badges, level %d -> %d",
        user_id, total_xp, len(badges_earned), previous_level, new_level,
    )

    return EventResult(
        xp_awarded=total_xp,
        badges_earned=badges_earned,
        level_up=level_up,
        new_level=new_level if level_up else None,
    )
