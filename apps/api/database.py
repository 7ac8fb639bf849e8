"""
Database engine, session factory and declarative base.

The engine and session maker are process-wide: created once on import,
tables verified by ``init_db`` at startup and the pool released by
``dispose_db`` at shutdown.
"""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from config import require_database_url, settings


def _async_url(url: str) -> str:
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://"):]
    if url.startswith("sqlite://") and not url.startswith("sqlite+aiosqlite://"):
        return "sqlite+aiosqlite://" + url[len("sqlite://"):]
    return url


engine = create_async_engine(
    _async_url(settings.DATABASE_URL or "sqlite+aiosqlite:///./rankmaker.db"),
    pool_pre_ping=True,
)
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def init_db() -> None:
    """Create missing tables when schema bootstrap is enabled."""
    require_database_url()
    if not settings.AUTO_CREATE_DB_SCHEMA:
        return
    import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_db() -> None:
    await engine.dispose()


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield one session per request."""
    require_database_url()
    async with async_session_maker() as session:
        yield session
