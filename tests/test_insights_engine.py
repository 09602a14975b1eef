"""
Tests for InsightsGenerator.
"""

import uuid
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest

from app.cache import InMemoryTTLCache
from app.services.insights_engine import (
    InsightsGenerator,
    build_competitive_insights,
    price_sensitivity,
)
from factories import NOW, add_events, click, create_menu, view


async def seed_menu_with_traffic(session_factory, user_id, views=100, clicks=20):
    await create_menu(session_factory, user_id, "cafe", items=[("Latte", 4.5, "Coffee")])
    events = [view("cafe", minutes_ago=30 + i, session_id=f"v{i}", is_mobile=i % 5 != 0) for i in range(views)]
    events += [click("cafe", "Latte", minutes_ago=29 + i, session_id=f"v{i}") for i in range(clicks)]
    await add_events(session_factory, events)


@pytest.mark.asyncio
async def test_generate_end_to_end(collector, generator, session_factory, owner_id):
    await seed_menu_with_traffic(session_factory, owner_id)
    bundle = await collector.collect(owner_id)

    result = await generator.generate(bundle)

    report = result.report
    assert result.persistence_error is None
    assert result.saved is True
    assert report.performance_insights["overall_performance"]["score"] >= 40
    assert report.performance_insights["key_metrics"]["click_through_rate"] == 20.0
    assert report.metadata.user_id == owner_id
    assert report.metadata.analysis_type == "advanced"
    assert report.metadata.confidence == 1.0
    assert report.metadata.generated_at == NOW

    growth = report.predictive_insights["growth_projections"]["traffic_growth"]
    assert growth["projected"] == 120
    # 20 clicks on a 4.50 item
    assert report.predictive_insights["growth_projections"]["revenue_potential"]["estimated_revenue"] == 27

    assert report.behavioral_insights["patterns"]["seasonal_trends"]["current_season"] == "spring"
    assert report.behavioral_insights["customer_journey"]["conversion_rate"] == 20.0
    assert report.summary["restaurant_name"] == "My Restaurant"
    assert report.summary["period"] == "30 days"


@pytest.mark.asyncio
async def test_generate_is_idempotent_apart_from_timestamp(collector, store, session_factory, owner_id):
    await seed_menu_with_traffic(session_factory, owner_id, views=40, clicks=3)
    bundle = await collector.collect(owner_id)

    first = await InsightsGenerator(store, cache=InMemoryTTLCache(), now=lambda: NOW).generate(bundle)
    second = await InsightsGenerator(
        store, cache=InMemoryTTLCache(), now=lambda: NOW + timedelta(minutes=5)
    ).generate(bundle)

    assert first.report.content() == second.report.content()
    assert first.report.metadata.generated_at != second.report.metadata.generated_at


@pytest.mark.asyncio
async def test_generate_without_events(collector, generator, owner_id):
    bundle = await collector.collect(owner_id)

    report = (await generator.generate(bundle)).report

    assert report.metadata.confidence == 0.5
    assert report.metadata.analysis_type == "basic"
    assert report.summary["key_findings"] == ["0 total menu views", "0.0% click-through rate"]
    assert report.predictive_insights["growth_projections"]["traffic_growth"]["projected"] == 0
    assert report.optimization_recommendations["immediate"][0]["action"] == "Improve menu item descriptions"


@pytest.mark.asyncio
async def test_generate_for_active_menu_without_events(collector, generator, session_factory, owner_id):
    await create_menu(session_factory, owner_id, "quiet")
    bundle = await collector.collect(owner_id)

    result = await generator.generate(bundle)

    assert result.saved
    assert result.report.metadata.confidence == 0.5
    assert result.report.metadata.analysis_type == "basic"
    assert result.report.summary["key_findings"][:2] == ["0 total menu views", "0.0% click-through rate"]
    assert result.report.predictive_insights["growth_projections"]["traffic_growth"]["projected"] == 0


@pytest.mark.asyncio
async def test_persisted_row_round_trips(collector, generator, store, session_factory, owner_id):
    await seed_menu_with_traffic(session_factory, owner_id, views=30, clicks=6)
    bundle = await collector.collect(owner_id)
    report = (await generator.generate(bundle)).report

    row = await store.get_insights_row(owner_id)
    assert row["confidence"] == report.metadata.confidence
    assert row["analysis_type"] == report.metadata.analysis_type
    assert row["data_quality"] == report.metadata.data_quality["overall"]

    latest = await generator.latest(owner_id)
    assert latest.content() == report.content()


@pytest.mark.asyncio
async def test_regenerating_overwrites_single_row(collector, generator, store, owner_id):
    bundle = await collector.collect(owner_id)
    await generator.generate(bundle, use_cache=False)
    await generator.generate(bundle, use_cache=False)

    from sqlalchemy import func, select
    from app.models import UserInsights

    async with store.session_factory() as session:
        count = await session.scalar(
            select(func.count()).select_from(UserInsights).where(UserInsights.user_id == owner_id)
        )
    assert count == 1


@pytest.mark.asyncio
async def test_persistence_failure_still_returns_report(collector, generator, store, owner_id):
    bundle = await collector.collect(owner_id)

    with patch.object(store, "save_insights", new=AsyncMock(side_effect=RuntimeError("db down"))):
        result = await generator.generate(bundle)

    assert result.report is not None
    assert isinstance(result.persistence_error, RuntimeError)
    assert result.saved is False
    assert await generator.latest(owner_id) is None


@pytest.mark.asyncio
async def test_generate_served_from_cache(collector, store, owner_id):
    bundle = await collector.collect(owner_id)
    generator = InsightsGenerator(store, cache=InMemoryTTLCache(), now=lambda: NOW)

    first = await generator.generate(bundle)
    with patch.object(store, "save_insights", new=AsyncMock()) as save:
        second = await generator.generate(bundle)

    assert second.cached is True
    save.assert_not_called()
    assert second.report.content() == first.report.content()


@pytest.mark.asyncio
async def test_latest_missing_user_returns_none(generator):
    assert await generator.latest(uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_competitive_defaults_when_industry_ctr_is_zero(collector, owner_id):
    bundle = await collector.collect(owner_id)

    competitive = build_competitive_insights(bundle)

    assert competitive["market_position"]["click_through_rate"]["industry"] == 15.0
    assert competitive["market_position"]["mobile_optimization"]["industry"] == 70.0
    assert "Below industry average engagement" in competitive["gaps"]
    assert competitive["benchmarks"]["click_through_rate"]["percentile"] == 10


def test_price_sensitivity_bands():
    items = [
        {"price": 4.5, "clicks": 3},
        {"price": 12.0, "clicks": 5},
        {"price": None, "clicks": 9},
        {"price": 40.0, "clicks": 1},
    ]
    result = price_sensitivity(items)
    assert result["clicks_by_band"] == {"low_price": 3, "mid_price": 5, "high_price": 1}
    assert result["preferred_band"] == "mid_price"
    assert price_sensitivity([])["preferred_band"] is None
