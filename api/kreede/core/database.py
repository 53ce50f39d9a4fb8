"""Async database engine and session management.

One session per request: committed when the handler returns, rolled back
if it raises. Every admin action is a single unit of work on that session.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from kreede.core.config import settings

logger = logging.getLogger(__name__)


def engine_options(database_url: str) -> dict:
    """Pool sizing for server databases; SQLite (local dev) keeps its default pool."""
    options = {"echo": settings.database_echo}
    if make_url(database_url).get_backend_name() != "sqlite":
        options.update(pool_size=10, max_overflow=10, pool_pre_ping=True)
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session. Used as a FastAPI dependency."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.debug("Rolling back request session", exc_info=True)
            await session.rollback()
            raise
