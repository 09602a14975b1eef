"""
Tests for the daily insights refresh worker.
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from app.exceptions import AnalyticsFetchError
from app.services.analytics_collector import AnalyticsCollector
from app.workers.refresh_insights import refresh_insights
from factories import add_events, create_menu, view


@pytest.mark.asyncio
async def test_refresh_generates_for_active_owners(store, session_factory):
    owner = uuid.uuid4()
    await store.get_user_profile(owner)
    await create_menu(session_factory, owner, "daily")
    await add_events(session_factory, [view("daily", minutes_ago=5)])

    result = await refresh_insights(days=30, store=store)

    assert result == {"users": 1, "refreshed": 1, "failed": 0}
    assert await store.get_insights_row(owner) is not None


@pytest.mark.asyncio
async def test_refresh_continues_after_fetch_failure(store, session_factory):
    owners = [uuid.uuid4(), uuid.uuid4()]
    for owner in owners:
        await create_menu(session_factory, owner, f"menu-{owner.hex[:6]}")

    real_collect = AnalyticsCollector.collect
    calls = []

    async def flaky_collect(self, user_id, days=30, use_cache=True):
        calls.append(user_id)
        if len(calls) == 1:
            raise AnalyticsFetchError("branding", RuntimeError("timeout"))
        return await real_collect(self, user_id, days, use_cache)

    with patch.object(AnalyticsCollector, "collect", new=flaky_collect):
        result = await refresh_insights(days=30, store=store)

    assert result == {"users": 2, "refreshed": 1, "failed": 1}


@pytest.mark.asyncio
async def test_refresh_counts_persistence_failures(store, session_factory):
    owner = uuid.uuid4()
    await create_menu(session_factory, owner, "solo")

    with patch.object(store, "save_insights", new=AsyncMock(side_effect=RuntimeError("db down"))):
        result = await refresh_insights(days=30, store=store)

    assert result["failed"] == 1
