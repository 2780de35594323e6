"""Webhook intake API tests."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

CHAT_EVENT = {
    "type": "chat.message.created",
    "data": {"user_id": "U1", "company_id": "C1", "content": "hello"},
}


class TestWebhookIntake:
    async def test_event_accepted_and_processed(self, client: AsyncClient, app, seed, load_user):
        await seed.badge("B1", "Chatterbox")
        await seed.rule("R1", "chat.message.created", 10)
        await seed.rule("R2", "chat.message.created", 5, badge_id="B1")

        resp = await client.post("/api/v1/webhooks", json=CHAT_EVENT)
        assert resp.status_code == 200
        assert resp.json() == {"status": "accepted"}

        await app.state.dispatcher.drain()

        user = await load_user("U1")
        assert user.xp == 15
        assert user.level == 1

    async def test_missing_company_is_skipped(self, client: AsyncClient, load_user):
        resp = await client.post(
            "/api/v1/webhooks", json={"type": "chat.message.created", "data": {"user_id": "U1"}}
        )
        assert resp.status_code == 200
        assert resp.json() == {"status": "skipped"}
        assert await load_user("U1") is None

    async def test_unmatched_event_still_accepted(self, client: AsyncClient, app, load_user):
        resp = await client.post(
            "/api/v1/webhooks",
            json={"type": "content.viewed", "data": {"user_id": "U1", "company_id": "C1"}},
        )
        assert resp.json() == {"status": "accepted"}
        await app.state.dispatcher.drain()
        assert await load_user("U1") is None

    async def test_missing_type_rejected(self, client: AsyncClient):
        resp = await client.post("/api/v1/webhooks", json={"data": {"user_id": "U1"}})
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Validation error"

    async def test_webhook_health(self, client: AsyncClient):
        resp = await client.get("/api/v1/webhooks")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["service"] == "EngageForge Webhooks"
        assert "timestamp" in data
