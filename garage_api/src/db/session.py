from __future__ import annotations

import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

_ENGINE: AsyncEngine | None = None
_SESSION_MAKER: async_sessionmaker[AsyncSession] | None = None


def _create_engine(settings: Settings) -> AsyncEngine:
    options: dict = {"echo": settings.SQL_ECHO}
    if not settings.is_sqlite:
        options.update(
            pool_pre_ping=True,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )
    engine = create_async_engine(settings.async_database_url, **options)
    logger.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


# PUBLIC_INTERFACE
def get_engine() -> AsyncEngine:
    """Return the process-wide AsyncEngine, creating it on first use."""
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = _create_engine(get_settings())
    return _ENGINE


# PUBLIC_INTERFACE
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to the global engine.

    Instances stay readable after commit (``expire_on_commit=False``) so
    routers can serialise what a service just saved without another query.
    """
    global _SESSION_MAKER
    if _SESSION_MAKER is None:
        _SESSION_MAKER = async_sessionmaker(bind=get_engine(), expire_on_commit=False, autoflush=False)
    return _SESSION_MAKER


# PUBLIC_INTERFACE
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one AsyncSession per request."""
    async with get_session_maker()() as session:
        yield session


# PUBLIC_INTERFACE
async def dispose_engine() -> None:
    """Close pooled connections; called on application shutdown."""
    global _ENGINE, _SESSION_MAKER
    if _ENGINE is not None:
        await _ENGINE.dispose()
    _ENGINE = None
    _SESSION_MAKER = None
