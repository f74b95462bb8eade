"""Database engine setup."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from targethook.config import get_settings
from targethook.db.models import Base

_engine: AsyncEngine | None = None
_async_session: async_sessionmaker[AsyncSession] | None = None


def create_engine_from_settings(url: str | None = None) -> AsyncEngine:
    """Create an async engine for the configured database URL."""
    settings = get_settings()
    return create_async_engine(
        url or settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,  # Validate connections before use (prevents stale connection errors)
    )


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build a session factory bound to an engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the session factory for the configured database, creating it on first use."""
    global _engine, _async_session
    if _async_session is None:
        _engine = create_engine_from_settings()
        _async_session = make_sessionmaker(_engine)
    return _async_session


async def dispose_engine() -> None:
    """Close the configured engine's connections and forget it.

    The next get_sessionmaker() call re-reads settings. Engines are bound to
    the event loop they were first used on, so call this before the loop ends.
    """
    global _engine, _async_session
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session = None


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session."""
    async with get_sessionmaker()() as session:
        yield session


async def init_db(engine: AsyncEngine) -> None:
    """Create the targeting tables if they do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
