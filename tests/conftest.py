"""Shared test fixtures.

Each test gets its own file-backed SQLite database so that concurrent
sessions really use separate connections (and separate transactions).
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from engageforge.database import Database
from engageforge.db.models import Badge, Company, Rule, User
from engageforge.dispatch import TaskDispatcher
from engageforge.engine.processor import EventProcessor
from engageforge.main import create_app

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


class Seeder:
    """Creates configuration rows with strictly increasing created_at."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._tick = 0

    def _next_time(self) -> datetime:
        self._tick += 1
        return BASE_TIME + timedelta(seconds=self._tick)

    async def company(self, company_id: str = "C1", name: str = "Test Co") -> Company:
        company = await self.session.get(Company, company_id)
        if company is None:
            company = Company(id=company_id, name=name, created_at=self._next_time())
            self.session.add(company)
            await self.session.commit()
        return company

    async def badge(self, badge_id: str, name: str, company_id: str = "C1") -> Badge:
        await self.company(company_id)
        badge = Badge(
            id=badge_id,
            company_id=company_id,
            name=name,
            description=f"{name} badge",
            icon="star",
            created_at=self._next_time(),
        )
        self.session.add(badge)
        await self.session.commit()
        return badge

    async def rule(
        self,
        rule_id: str,
        event_type: str,
        xp_amount: int,
        badge_id: str | None = None,
        company_id: str = "C1",
        is_active: bool = True,
    ) -> Rule:
        await self.company(company_id)
        rule = Rule(
            id=rule_id,
            company_id=company_id,
            name=f"Rule {rule_id}",
            event_type=event_type,
            xp_amount=xp_amount,
            badge_id=badge_id,
            is_active=is_active,
            created_at=self._next_time(),
        )
        self.session.add(rule)
        await self.session.commit()
        return rule

    async def user(
        self,
        user_id: str,
        xp: int = 0,
        company_id: str = "C1",
        display_name: str | None = None,
        username: str | None = None,
    ) -> User:
        from engageforge.engine.levels import level_for_xp

        await self.company(company_id)
        user = User(
            id=user_id,
            company_id=company_id,
            display_name=display_name,
            username=username,
            xp=xp,
            level=level_for_xp(xp),
            created_at=self._next_time(),
        )
        self.session.add(user)
        await self.session.commit()
        return user


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """Fresh SQLite database with all tables created."""
    db = Database(
        f"sqlite+aiosqlite:///{tmp_path / 'engageforge.db'}",
        connect_args={"timeout": 30},
    )
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for seeding and assertions."""
    async with database.session() as session:
        yield session


@pytest_asyncio.fixture
async def seed(db_session: AsyncSession) -> Seeder:
    return Seeder(db_session)


@pytest_asyncio.fixture
async def processor(database: Database) -> EventProcessor:
    return EventProcessor(database)


@pytest_asyncio.fixture
async def app(database: Database, processor: EventProcessor):
    """App with state wired to the test database (lifespan is not run)."""
    application = create_app()
    application.state.database = database
    application.state.redis = None
    application.state.processor = processor
    application.state.dispatcher = TaskDispatcher(processor)
    yield application
    await application.state.dispatcher.drain()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def load_user(database: Database):
    """Return a loader that reads a user through a fresh session."""

    async def _load(user_id: str) -> User | None:
        async with database.session() as session:
            return await session.get(User, user_id)

    return _load
