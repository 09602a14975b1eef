"""
Pytest configuration and fixtures.
"""

import sys
import os
import uuid
from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Add app to path
sys.path.append(os.getcwd())

from app.cache import InMemoryTTLCache
from app.database import Base
from app.services.analytics_collector import AnalyticsCollector
from app.services.analytics_store import AnalyticsStore
from app.services.insights_engine import InsightsGenerator

from factories import fixed_now


@pytest_asyncio.fixture(scope="function")
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """
    File-backed SQLite per test.

    The collector opens one session per concurrent fetch, which an in-memory
    database (one connection) cannot serve.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for a test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def store(session_factory) -> AnalyticsStore:
    return AnalyticsStore(session_factory)


@pytest_asyncio.fixture
async def collector(store) -> AnalyticsCollector:
    return AnalyticsCollector(
        store,
        cache=InMemoryTTLCache(),
        timezone_name="UTC",
        now=fixed_now,
    )


@pytest_asyncio.fixture
async def generator(store) -> InsightsGenerator:
    return InsightsGenerator(store, cache=InMemoryTTLCache(), now=fixed_now)


@pytest_asyncio.fixture
async def owner_id(store) -> uuid.UUID:
    """An owner with a default profile."""
    user_id = uuid.uuid4()
    await store.get_user_profile(user_id)
    return user_id
