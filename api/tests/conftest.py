"""Shared test fixtures.

Each test gets its own SQLite database file so tests never share rows. The
app's get_db dependency is overridden to hand out sessions on that database,
with the same commit/rollback behaviour as production.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from kreede.core.auth import create_session_token, hash_password
from kreede.core.config import settings
from kreede.core.database import get_db
from kreede.main import app
from kreede.models import Admin, Base, Event, Membership, MembershipStatus, PlanId, User


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def admin(session_factory):
    async with session_factory() as session:
        admin = Admin(name="Desk Admin", email="desk@example.com", hashed_password=hash_password("secret123"))
        session.add(admin)
        await session.commit()
        return admin


@pytest.fixture
async def anon_client(session_factory):
    """Client with no session cookie."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def client(anon_client, admin):
    """Client signed in as the desk admin."""
    token = create_session_token(str(admin.id), admin.email, admin.name)
    anon_client.cookies.set(settings.auth_cookie_name, token)
    return anon_client


@pytest.fixture
async def event(session_factory):
    """A paid event (entry fee 300)."""
    async with session_factory() as session:
        event = Event(
            title="Saturday Smash",
            start_date=date(2026, 11, 7),
            end_date=date(2026, 11, 7),
            start_time="18:00",
            end_time="21:00",
            entry_fee=Decimal("300"),
            link="https://kreede.example.com/events/smash",
            tags=["doubles"],
        )
        session.add(event)
        await session.commit()
        return event


@pytest.fixture
async def member(session_factory):
    """Asha: a user account with one paid 1M membership (30 games, 2 used)."""
    async with session_factory() as session:
        user = User(user_id="asha", name="Asha Rao", email="asha@example.com", phone="9876543210")
        membership = Membership(
            order_id="mem_asha_1",
            amount=Decimal("1500"),
            plan_id=PlanId.ONE_MONTH,
            plan_name="1 month",
            duration_months=1,
            games=30,
            games_used=2,
            status=MembershipStatus.PAID,
            user_id="asha",
            user_email="asha@example.com",
            user_name="Asha",
            created_at=datetime(2026, 10, 1, tzinfo=UTC),
        )
        session.add_all([user, membership])
        await session.commit()
        return membership
