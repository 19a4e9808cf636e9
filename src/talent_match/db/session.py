"""
Async engine and session factory.
"""

from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from talent_match.config import get_settings


@lru_cache
def get_engine() -> AsyncEngine:
    """Get the cached async engine for the configured database."""
    settings = get_settings()
    return create_async_engine(
        str(settings.database_url),
        echo=settings.database_echo,
        pool_pre_ping=True,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get a session factory bound to the engine."""
    return async_sessionmaker(get_engine(), expire_on_commit=False)
