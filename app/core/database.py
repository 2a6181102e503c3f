"""
Relational store: async SQLAlchemy engine and request-scoped sessions
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict
import logging

from app.models.base import Base
from .config import settings

logger = logging.getLogger(__name__)

is_sqlite = settings.database_url_async.startswith("sqlite")


def _engine_options() -> Dict[str, Any]:
    if is_sqlite:
        # aiosqlite connections are cheap and must not be shared across event loops
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_timeout": settings.DATABASE_POOL_TIMEOUT,
        "pool_pre_ping": True,
    }


engine = create_async_engine(
    settings.database_url_async,
    echo=settings.DATABASE_ECHO,
    **_engine_options(),
)

if is_sqlite:
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Loaded objects stay usable after commit; the order workflow reads them back
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request dependency: one session per request, rolled back on error"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """Same as get_db, for startup tasks such as seeding"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create missing tables"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database ready ({engine.url.get_backend_name()})")


async def close_db() -> None:
    """Dispose of pooled connections"""
    await engine.dispose()
    logger.info("Database connections closed")
