"""
Shared pytest fixtures for the carnival registry tests.

Sets required environment variables BEFORE any registry module is imported so
that pydantic-settings and SQLAlchemy engine initialisation use safe test values.
"""
from __future__ import annotations

import os
from decimal import Decimal
from typing import AsyncGenerator

# ── Set env vars before any registry import ──────────────────────────────────
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

# ── Third-party ───────────────────────────────────────────────────────────────
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# ── Registry imports (safe after env vars are set) ───────────────────────────
from registry.models.base import Base, enable_sqlite_savepoints
from registry.models.models import Carnival, Club, User


# ── DB fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture
async def async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a fresh AsyncSession backed by an isolated in-memory SQLite database.
    Schema is created fresh for every test function; engine is always disposed
    on teardown, even if the test raises an exception.
    """
    engine = enable_sqlite_savepoints(create_async_engine("sqlite+aiosqlite:///:memory:", echo=False))
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with factory() as session:
            yield session
    finally:
        await engine.dispose()


@pytest.fixture
async def club(async_session) -> Club:
    c = Club(name="Sunshine Coast Masters", state="QLD")
    async_session.add(c)
    await async_session.commit()
    return c


@pytest.fixture
async def other_club(async_session) -> Club:
    c = Club(name="Hunter Valley Old Boys", state="NSW")
    async_session.add(c)
    await async_session.commit()
    return c


@pytest.fixture
async def organiser(async_session, club) -> User:
    u = User(first_name="Pat", last_name="Nguyen", email="pat@sunshinemasters.org.au", club_id=club.id)
    async_session.add(u)
    await async_session.commit()
    return u


@pytest.fixture
async def other_organiser(async_session, other_club) -> User:
    u = User(first_name="Lee", last_name="Walsh", email="lee@hvob.org.au", club_id=other_club.id)
    async_session.add(u)
    await async_session.commit()
    return u


@pytest.fixture
async def carnival(async_session) -> Carnival:
    """An unclaimed carnival charging $50 per team and $10 per player."""
    c = Carnival(
        title="Coolangatta Masters Carnival",
        state="QLD",
        team_registration_fee=Decimal("50.00"),
        per_player_fee=Decimal("10.00"),
        organiser_contact_email="events@mysideline.example",
        original_my_sideline_contact_email="events@mysideline.example",
    )
    async_session.add(c)
    await async_session.commit()
    return c


# ── Event helpers ─────────────────────────────────────────────────────────────

class RecordingEventSink:
    """In-memory EventSink that keeps every published event."""

    def __init__(self) -> None:
        self.events: list = []

    async def publish(self, event) -> None:
        self.events.append(event)

    def of_type(self, cls) -> list:
        return [e for e in self.events if isinstance(e, cls)]


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()
