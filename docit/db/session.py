"""Async engine and session factory"""

import logging
import os
from typing import AsyncGenerator

from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

load_dotenv(dotenv_path=".env")

logger = logging.getLogger(__name__)

# Driver prefixes rewritten to the async drivers used at runtime
_ASYNC_DRIVERS = {
    "postgresql://": "postgresql+psycopg://",
    "postgresql+asyncpg://": "postgresql+psycopg://",
    "postgresql+psycopg://": "postgresql+psycopg://",
    "sqlite://": "sqlite+aiosqlite://",
    "sqlite+aiosqlite://": "sqlite+aiosqlite://",
}


def to_async_url(url: str) -> str:
    """Map a configured database URL onto psycopg (PostgreSQL) or aiosqlite"""
    for prefix, async_prefix in _ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return async_prefix + url[len(prefix):]
    raise ValueError(f"Unsupported database URL format: {url}")


DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is not set")

ASYNC_DATABASE_URL = to_async_url(DATABASE_URL)
IS_SQLITE = ASYNC_DATABASE_URL.startswith("sqlite")

POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5"))
MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
POOL_TIMEOUT = int(os.getenv("DB_POOL_TIMEOUT", "30"))
POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))

if IS_SQLITE:
    # Every session opens its own aiosqlite connection
    engine = create_async_engine(ASYNC_DATABASE_URL, poolclass=NullPool)
else:
    engine = create_async_engine(
        ASYNC_DATABASE_URL,
        pool_pre_ping=True,
        pool_size=POOL_SIZE,
        max_overflow=MAX_OVERFLOW,
        pool_timeout=POOL_TIMEOUT,
        pool_recycle=POOL_RECYCLE,
    )

SessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request"""
    async with SessionLocal() as session:
        yield session


async def init_models() -> None:
    """Create all tables that do not exist yet"""
    from docit.db import models  # noqa: F401  (registers the tables)
    from docit.db.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


def get_pool_stats() -> dict:
    """
    Connection counts of the current pool.

    Pools without counters (SQLite's NullPool) report zero usage and the
    configured capacity.
    """
    pool = engine.sync_engine.pool

    def _count(name: str, default: int) -> int:
        counter = getattr(pool, name, None)
        return int(counter()) if callable(counter) else default

    return {
        "size": _count("size", POOL_SIZE),
        "checked_in": _count("checkedin", 0),
        "checked_out": _count("checkedout", 0),
        # negative while the pool is still filling up
        "overflow": max(0, _count("overflow", 0)),
        "max_overflow": max(0, int(getattr(pool, "_max_overflow", MAX_OVERFLOW))),
    }


@event.listens_for(engine.sync_engine, "invalidate")
def on_invalidate(dbapi_conn, connection_record, exception):
    logger.warning(f"Database connection invalidated: {exception}")
