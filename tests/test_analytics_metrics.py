"""
Tests for the pure analytics metric derivations.
"""

import uuid
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from app.schemas.analytics import Event, MenuItemSummary, MenuSummary
from app.services.analytics_metrics import (
    assess_data_quality,
    average_session_length,
    categorize_engagement,
    categorize_item_performance,
    categorize_performance,
    click_through_rate,
    find_peak_days,
    find_peak_hours,
    group_by_session,
    has_enough_data,
    hourly_distribution,
    item_performance,
    percentage,
    process_events,
    recommend_analysis_type,
    round_decimal,
    round_half_up,
    view_only_bounce_rate,
    weekly_trends,
)

UTC = timezone.utc
BASE = datetime(2026, 3, 18, 12, 0, tzinfo=UTC)


def make_event(event_type="menu_view", minutes=0, **fields) -> Event:
    return Event(
        event_type=event_type,
        menu_slug=fields.pop("menu_slug", "main"),
        timestamp=BASE + timedelta(minutes=minutes),
        **fields,
    )


def test_round_half_up_matches_half_away_from_zero():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2


def test_percentage_zero_denominator():
    assert percentage(5, 0) == 0.0


def test_percentage_rounds_half_up():
    assert percentage(1, 400) == 0.3
    assert percentage(1, 800, 2) == 0.13
    assert percentage(1, 3) == 33.3
    assert percentage(2, 3) == 66.7


def test_round_decimal_half_up():
    assert round_decimal(0.25, 1) == 0.3
    assert round_decimal(0.125, 2) == 0.13
    assert round_decimal(12.0, 1) == 12.0


@pytest.mark.parametrize("views,clicks,expected", [
    (0, 0, 0.0),
    (0, 7, 0.0),
    (100, 20, 20.0),
    (3, 1, 33.33),
    (800, 1, 0.13),
])
def test_click_through_rate(views, clicks, expected):
    assert click_through_rate(views, clicks) == expected


@pytest.mark.parametrize("ctr,category", [
    (20, "excellent"),
    (19.99, "good"),
    (15, "good"),
    (14.99, "average"),
    (10, "average"),
    (5, "below-average"),
    (4.99, "poor"),
    (0, "poor"),
])
def test_categorize_performance_boundaries(ctr, category):
    assert categorize_performance(ctr) == category


@pytest.mark.parametrize("clicks,category", [
    (20, "star-performer"),
    (19, "high-performer"),
    (10, "high-performer"),
    (5, "average"),
    (2, "low-performer"),
    (1, "underperforming"),
])
def test_categorize_item_performance(clicks, category):
    assert categorize_item_performance(clicks) == category


def test_categorize_engagement_uses_fraction():
    assert categorize_engagement(0.2) == "high"
    assert categorize_engagement(0.15) == "medium"
    assert categorize_engagement(0.1) == "low"
    assert categorize_engagement(0.05) == "very-low"


def test_peak_hours_ties_keep_hour_order():
    events = [make_event(minutes=60 * h) for h in (3, 1, 5)]
    hourly = hourly_distribution(events, UTC)

    peaks = find_peak_hours(hourly)

    # 13:00, 15:00, 17:00 all have one view; canonical hour order wins
    assert [p["hour"] for p in peaks] == [13, 15, 17]
    assert find_peak_hours(hourly) == peaks


def test_peak_hours_do_not_reorder_hourly():
    hourly = hourly_distribution([make_event(minutes=60)], UTC)
    find_peak_hours(hourly)
    assert [h["hour"] for h in hourly] == list(range(24))


def test_peak_days_ties_keep_first_seen_order():
    peaks = find_peak_days({"2026-03-02": 2, "2026-03-01": 2, "2026-03-03": 5})
    assert [p["day"] for p in peaks] == ["2026-03-03", "2026-03-02", "2026-03-01"]


def test_hourly_buckets_use_reporting_timezone():
    chicago = ZoneInfo("America/Chicago")
    hourly = hourly_distribution([make_event()], chicago)
    # 12:00 UTC in March (CDT, UTC-5)
    assert hourly[7]["count"] == 1


def test_weekly_trends_sunday_is_zero():
    sunday = Event(
        event_type="menu_view",
        menu_slug="main",
        timestamp=datetime(2026, 3, 15, 12, 0, tzinfo=UTC),
    )
    weekly = weekly_trends([sunday], UTC)
    assert weekly[0] == {"day": "Sunday", "day_index": 0, "count": 1}


def test_naive_timestamps_are_utc():
    event = Event(event_type="menu_view", menu_slug="main", timestamp=datetime(2026, 3, 18, 12, 0))
    assert event.timestamp.tzinfo is not None
    assert event.timestamp.utcoffset() == timedelta(0)


def test_session_spans_are_never_negative():
    # Newest first, the order the store returns
    events = [
        make_event(minutes=10, session_id="a"),
        make_event("item_click", minutes=4, session_id="a", item_name="Soup"),
        make_event(minutes=0, session_id="a"),
    ]
    sessions = group_by_session(events)

    assert [e.timestamp for e in sessions[0]] == sorted(e.timestamp for e in events)
    assert average_session_length(sessions) == 10


def test_missing_session_ids_collapse_into_one_session():
    events = [make_event(minutes=m) for m in (0, 1, 2)]
    assert len(group_by_session(events)) == 1


def test_view_only_bounce_rate_ignores_anonymous_events():
    views = [
        make_event(session_id="a"),
        make_event(session_id="b"),
        make_event(),
    ]
    clicks = [make_event("item_click", session_id="a", item_name="Soup")]
    assert view_only_bounce_rate(views, clicks) == 50.0


def test_item_performance_joins_catalogue_and_defaults_category():
    menu_id = uuid.uuid4()
    items = [
        MenuItemSummary(id=uuid.uuid4(), menu_id=menu_id, name="Soup", price=6.5, category=None),
        MenuItemSummary(id=uuid.uuid4(), menu_id=menu_id, name="Steak", price=30.0, category="Mains"),
    ]
    clicks = [make_event("item_click", item_name="Steak")] + [
        make_event("item_click", item_name="Soup") for _ in range(3)
    ] + [make_event("item_click", item_name="Mystery")]

    rows = item_performance(clicks, items)

    assert [r["name"] for r in rows] == ["Soup", "Steak", "Mystery"]
    assert rows[0]["category"] == "Menu"
    assert rows[0]["price"] == 6.5
    assert rows[1]["category"] == "Mains"
    assert rows[2]["price"] is None
    assert rows[0]["performance"] == "low-performer"


def test_process_events_empty():
    processed = process_events([], [], [], UTC)

    assert processed["summary"] == {
        "total_views": 0,
        "total_clicks": 0,
        "click_through_rate": 0.0,
        "average_session_duration": 0,
        "bounce_rate": 0.0,
    }
    assert processed["device_analysis"]["mobile"]["percentage"] == 0.0
    assert processed["engagement"]["engagement_level"] == "very-low"


def test_process_events_totals_exclude_bots():
    menu = MenuSummary(id=uuid.uuid4(), title="Main", slug="main")
    events = [
        make_event(),
        make_event(is_bot=True),
        make_event("item_click", item_name="Soup"),
        make_event("item_click", item_name="Soup", is_bot=True),
    ]

    processed = process_events(events, [menu], [], UTC)

    assert processed["summary"]["total_views"] == 1
    assert processed["summary"]["total_clicks"] == 1
    assert processed["menu_analysis"][0]["click_through_rate"] == 100.0


def test_data_quality_and_recommendations():
    events = [make_event(minutes=m) for m in range(12)]
    quality = assess_data_quality(events, [object()])

    assert quality["data_volume"] == "fair"
    assert quality["menu_coverage"] == "good"
    assert quality["overall"] == "low"

    assert recommend_analysis_type(9, 3) == "basic"
    assert recommend_analysis_type(99, 3) == "standard"
    assert recommend_analysis_type(100, 2) == "comprehensive"
    assert recommend_analysis_type(100, 1) == "advanced"
    assert has_enough_data(10) is True
    assert has_enough_data(9) is False
