"""Async engine and session factory for the groups database."""

from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    """Pool and driver options for the configured database."""
    if url.startswith("sqlite"):
        # Local runs and tests; SQLite picks its own pool
        return {}

    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_recycle": settings.db_pool_recycle_seconds,
    }
    # asyncpg's prepared statement cache does not survive transaction-mode
    # pooling (Supavisor), so it is disabled when connecting through the pooler.
    if "pooler.supabase.com" in url:
        options["connect_args"] = {"statement_cache_size": 0}
    return options


engine = create_async_engine(
    settings.async_database_url,
    echo=settings.debug,
    **_engine_options(settings.async_database_url),
)

# Membership writes flush explicitly inside a unit of work
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session for request-scoped reads (health checks)."""
    async with async_session_factory() as session:
        yield session
