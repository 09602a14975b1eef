"""
Tests for the dashboard summaries.
"""

import pytest

from app.services.dashboard_summary import DashboardService, period_to_days
from factories import add_events, click, create_menu, fixed_now, view


@pytest.fixture
def dashboard(store):
    return DashboardService(store, timezone_name="UTC", now=fixed_now)


def test_period_to_days():
    assert period_to_days("7d") == 7
    assert period_to_days("30d") == 30
    assert period_to_days("90d") == 90
    assert period_to_days("1y") == 90


@pytest.mark.asyncio
async def test_user_summary_without_menus(dashboard, owner_id):
    summary = await dashboard.user_summary(owner_id, "30d")

    assert summary["summary"]["total_scans"] == 0
    assert summary["summary"]["click_rate"] == "0%"
    assert summary["summary"]["peak_hour"] == "N/A"
    assert summary["daily_scans"] == []
    assert summary["top_items"] == []


@pytest.mark.asyncio
async def test_user_summary_active_menu_without_events(dashboard, session_factory, owner_id):
    await create_menu(session_factory, owner_id, "quiet")

    summary = await dashboard.user_summary(owner_id, "30d")

    assert summary["summary"] == {
        "total_scans": 0,
        "total_clicks": 0,
        "click_rate": "0%",
        "peak_hour": "N/A",
        "top_country": "Unknown",
    }
    assert len(summary["daily_scans"]) == 30
    assert all(row["scans"] == 0 and row["clicks"] == 0 for row in summary["daily_scans"])
    assert summary["device_data"][0] == {"device": "Mobile", "percentage": 0, "count": 0}
    assert summary["top_items"] == []
    assert summary["location_data"] == []
    assert summary["user_menus"] == [{"slug": "quiet", "title": "Main Menu"}]


@pytest.mark.asyncio
async def test_user_summary_counts_active_menus(dashboard, session_factory, owner_id):
    await create_menu(session_factory, owner_id, "open")
    await create_menu(session_factory, owner_id, "closed", is_active=False)
    await add_events(session_factory, [
        view("open", minutes_ago=30, is_mobile=True, country_code="US"),
        view("open", minutes_ago=31, is_mobile=True, country_code="US"),
        view("open", minutes_ago=32, country_code="CA"),
        view("open", minutes_ago=33, is_bot=True),
        click("open", "Pie", minutes_ago=29),
        view("closed", minutes_ago=30),
    ])

    summary = await dashboard.user_summary(owner_id, "7d")

    assert summary["summary"]["total_scans"] == 3
    assert summary["summary"]["total_clicks"] == 1
    assert summary["summary"]["click_rate"] == "33.3%"
    assert summary["summary"]["peak_hour"] == "17:00"
    assert summary["summary"]["top_country"] == "US"
    assert len(summary["daily_scans"]) == 7
    assert summary["daily_scans"][-1] == {"date": "2026-03-18", "scans": 3, "clicks": 1}
    assert len(summary["hourly_data"]) == 24
    assert summary["device_data"][0] == {"device": "Mobile", "percentage": 67, "count": 2}
    assert summary["top_items"] == [{"name": "Pie", "clicks": 1}]
    assert summary["user_menus"] == [{"slug": "open", "title": "Main Menu"}]


@pytest.mark.asyncio
async def test_menu_summary(dashboard, session_factory, owner_id):
    await create_menu(session_factory, owner_id, "cafe")
    await add_events(session_factory, [
        view("cafe", minutes_ago=10, is_mobile=True),
        view("cafe", minutes_ago=20),
        view("cafe", minutes_ago=60 * 24 * 8, is_mobile=True),
        click("cafe", "Tea", minutes_ago=9),
    ])

    summary = await dashboard.menu_summary("cafe")

    assert summary == {
        "total_views": 2,
        "total_clicks": 1,
        "mobile_percentage": 50,
        "period": "7 days",
    }


@pytest.mark.asyncio
async def test_menu_analytics_unknown_slug(dashboard):
    assert await dashboard.menu_analytics("nope") is None


@pytest.mark.asyncio
async def test_menu_analytics(dashboard, session_factory, owner_id):
    await create_menu(session_factory, owner_id, "cafe", title="Cafe")
    await add_events(session_factory, [
        view("cafe", minutes_ago=10),
        click("cafe", "Tea", minutes_ago=9),
        click("cafe", "Tea", minutes_ago=8),
        click("cafe", "Cake", minutes_ago=7),
    ])

    analytics = await dashboard.menu_analytics("cafe", days=7)

    assert analytics["menu"] == {"title": "Cafe", "slug": "cafe"}
    assert analytics["views_by_day"] == {"2026-03-18": 1}
    assert analytics["top_items"][0] == {"name": "Tea", "clicks": 2}
    assert analytics["device_breakdown"]["desktop"] == 1
