"""User profile API tests."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestUserProfileAPI:
    async def test_profile_created_on_first_view(self, client: AsyncClient, seed, load_user):
        await seed.user("A", xp=300)

        resp = await client.get("/api/v1/users/NEW", params={"company_id": "C1"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == "NEW"
        assert data["display_name"] == "Anonymous"
        assert data["xp"] == 0
        assert data["level"] == 1
        assert data["rank"] == 2
        assert data["progress"] == 0
        assert data["xp_to_next_level"] == 100
        assert data["badges"] == []

        user = await load_user("NEW")
        assert user is not None
        assert user.company_id == "C1"

    async def test_profile_after_events(self, client: AsyncClient, app, seed):
        await seed.badge("B1", "Chatterbox")
        await seed.rule("R1", "chat.message.created", 10)
        await seed.rule("R2", "chat.message.created", 5, badge_id="B1")

        event = {"type": "chat.message.created", "data": {"user_id": "U1", "company_id": "C1"}}
        for _ in range(8):
            await client.post("/api/v1/webhooks", json=event)
        await app.state.dispatcher.drain()

        data = (await client.get("/api/v1/users/U1", params={"company_id": "C1"})).json()
        assert data["xp"] == 120
        assert data["level"] == 2
        assert data["rank"] == 1
        assert data["xp_progress"] == 20
        assert data["xp_to_next_level"] == 400
        assert data["progress"] == 7  # 20 of 300
        assert [b["name"] for b in data["badges"]] == ["Chatterbox"]

    async def test_company_required(self, client: AsyncClient):
        resp = await client.get("/api/v1/users/U1")
        assert resp.status_code == 422
