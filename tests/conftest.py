"""Shared fixtures: in-memory database and a recording host."""

from collections.abc import AsyncGenerator
from uuid import UUID

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from targethook.db.engine import init_db, make_sessionmaker
from targethook.engine import TargetingEngine
from tests.fakes import FakeHost


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database with the targeting tables."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessions(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_sessionmaker(db_engine)


@pytest.fixture
async def db_session(
    sessions: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """A session for service-level tests (not shared with the engine)."""
    async with sessions() as session:
        yield session


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def region(host: FakeHost) -> UUID:
    return host.add_region()


@pytest.fixture
def owner(host: FakeHost, region: UUID) -> UUID:
    """An online player standing in ``region``."""
    player = host.spawn(region)
    host.online.add(player)
    return player


@pytest.fixture
def engine(sessions: async_sessionmaker[AsyncSession], host: FakeHost) -> TargetingEngine:
    return TargetingEngine(sessions, host)
