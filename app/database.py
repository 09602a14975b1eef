"""
Async SQLAlchemy engine and sessions for the menu database.

The collector opens one session per concurrent fetch, so the pool is sized
from settings rather than left at the driver default.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

ASYNC_DRIVER = "postgresql+asyncpg://"
PLAIN_SCHEMES = ("postgres://", "postgresql://")


def get_database_url() -> str:
    """DATABASE_URL rewritten for asyncpg: driver prefix set, sslmode dropped."""
    url = settings.database_url
    if not url:
        return ""

    for scheme in PLAIN_SCHEMES:
        if url.startswith(scheme):
            url = ASYNC_DRIVER + url[len(scheme):]
            break

    # asyncpg rejects sslmode as a query parameter; TLS goes through connect_args
    base, _, query = url.partition("?")
    params = [p for p in query.split("&") if p and not p.startswith("sslmode=")]
    return f"{base}?{'&'.join(params)}" if params else base


def create_engine_if_configured() -> Optional[AsyncEngine]:
    """Create async engine only if DATABASE_URL is configured."""
    db_url = get_database_url()
    if not db_url:
        return None

    return create_async_engine(
        db_url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        connect_args={"ssl": True} if db_url.startswith(ASYNC_DRIVER) else {},
    )


engine = create_engine_if_configured()

async_session_maker = (
    async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    if engine
    else None
)


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the configured session factory or fail loudly."""
    if not async_session_maker:
        raise RuntimeError("Database not configured. Set DATABASE_URL environment variable.")
    return async_session_maker


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """One unit of work: commit on success, roll back on error."""
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create missing tables (demo seeding; production uses alembic)."""
    if not engine:
        return

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    if engine:
        await engine.dispose()
