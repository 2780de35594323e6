"""Ranking tests — leaderboard pages and individual rank."""

from __future__ import annotations

import pytest
import pytest_asyncio

from engageforge.engine.ranking import get_leaderboard, get_user_rank

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def twelve_users(seed):
    """U00..U11 with distinct XP except U04/U05 tied at 500 (U04 created first)."""
    xp_values = [1200, 900, 800, 700, 500, 500, 400, 300, 250, 120, 50, 0]
    for i, xp in enumerate(xp_values):
        await seed.user(f"U{i:02d}", xp=xp, display_name=f"Member {i}" if i % 2 == 0 else None)
    await seed.badge("B1", "Early")
    await seed.badge("B2", "Loud")
    return xp_values


class TestLeaderboard:
    async def test_ordered_by_xp_desc(self, twelve_users, db_session):
        page = await get_leaderboard(db_session, "C1", limit=12)
        assert [e.xp for e in page] == sorted(twelve_users, reverse=True)
        assert [e.rank for e in page] == list(range(1, 13))

    async def test_pagination_is_stable_and_gapless(self, twelve_users, db_session):
        first = await get_leaderboard(db_session, "C1", limit=5, offset=0)
        second = await get_leaderboard(db_session, "C1", limit=5, offset=5)

        ids = [e.user_id for e in first + second]
        assert len(ids) == 10
        assert len(set(ids)) == 10
        assert [e.rank for e in first + second] == list(range(1, 11))

        again = await get_leaderboard(db_session, "C1", limit=5, offset=5)
        assert [e.user_id for e in again] == [e.user_id for e in second]

    async def test_ties_broken_by_creation_order(self, twelve_users, db_session):
        page = await get_leaderboard(db_session, "C1", limit=12)
        tied = [e for e in page if e.xp == 500]
        assert [e.user_id for e in tied] == ["U04", "U05"]
        assert [e.rank for e in tied] == [5, 6]

    async def test_display_name_fallbacks(self, seed, db_session):
        await seed.user("A", xp=30, display_name="Alice")
        await seed.user("B", xp=20, username="bob")
        await seed.user("C", xp=10)

        page = await get_leaderboard(db_session, "C1")
        assert [e.display_name for e in page] == ["Alice", "bob", "Anonymous"]

    async def test_badge_count_and_level(self, twelve_users, db_session):
        from engageforge.engine import repositories as repo

        await repo.try_insert_grant(db_session, "U00", "B1")
        await repo.try_insert_grant(db_session, "U00", "B2")
        await db_session.commit()

        page = await get_leaderboard(db_session, "C1", limit=2)
        assert page[0].user_id == "U00"
        assert page[0].badge_count == 2
        assert page[0].level == 4  # 1200 XP
        assert page[1].badge_count == 0

    async def test_scoped_to_company(self, twelve_users, seed, db_session):
        await seed.user("OTHER", xp=99_999, company_id="C2")
        page = await get_leaderboard(db_session, "C1", limit=1)
        assert page[0].user_id == "U00"

    async def test_offset_past_end_is_empty(self, twelve_users, db_session):
        assert await get_leaderboard(db_session, "C1", limit=5, offset=50) == []

    async def test_invalid_paging_rejected(self, db_session):
        with pytest.raises(ValueError):
            await get_leaderboard(db_session, "C1", limit=0)
        with pytest.raises(ValueError):
            await get_leaderboard(db_session, "C1", offset=-1)


class TestUserRank:
    async def test_rank_counts_strictly_greater(self, twelve_users, db_session):
        assert await get_user_rank(db_session, "U00", "C1") == 1
        assert await get_user_rank(db_session, "U03", "C1") == 4

    async def test_tied_users_share_rank_unlike_leaderboard(self, twelve_users, db_session):
        # Leaderboard positions for the tie are 5 and 6; individual rank is 5 for both
        assert await get_user_rank(db_session, "U04", "C1") == 5
        assert await get_user_rank(db_session, "U05", "C1") == 5

    async def test_unknown_user_ranked_as_zero_xp(self, twelve_users, db_session):
        # 11 users have more than 0 XP
        assert await get_user_rank(db_session, "NOBODY", "C1") == 12

    async def test_rank_reflects_latest_committed_xp(self, twelve_users, db_session, processor, seed):
        await seed.rule("R1", "payment.succeeded", 5000)
        await processor.process(
            {"type": "payment.succeeded", "data": {"user_id": "U11", "company_id": "C1"}}, "C1"
        )
        assert await get_user_rank(db_session, "U11", "C1") == 1
