"""
Analytics Metrics - pure derivations over menu events.

Every function here is a deterministic function of its inputs: no database,
no clock. Ratios never divide by zero; an empty denominator yields 0.
"""

import math
from collections import Counter
from datetime import tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from app.models.analytics_event import EventType
from app.schemas.analytics import Event, MenuItemSummary, MenuSummary

# Events without a session id all land in this one pseudo-session
ANONYMOUS_SESSION = "anonymous"

# Sunday-first, matching day index 0-6
WEEKDAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values."""
    return int(math.floor(value + 0.5))


def round_decimal(value: float, digits: int) -> float:
    """Round to a fixed number of decimals, .5 away from zero."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: float, whole: float, digits: int = 1) -> float:
    """part / whole as a rounded percentage, 0 when whole is 0."""
    if whole <= 0:
        return 0.0
    return round_decimal(part * 100 / whole, digits)


def split_events(events: Iterable[Event]) -> Tuple[List[Event], List[Event]]:
    """Split non-bot events into (menu views, item clicks)."""
    views: List[Event] = []
    clicks: List[Event] = []
    for event in events:
        if event.is_bot:
            continue
        if event.event_type == EventType.MENU_VIEW:
            views.append(event)
        elif event.event_type == EventType.ITEM_CLICK:
            clicks.append(event)
    return views, clicks


def click_through_rate(views: int, clicks: int) -> float:
    """Clicks per view as a percentage with two decimals."""
    return percentage(clicks, views, 2)


# === Time distributions ===

def hourly_distribution(events: Sequence[Event], tz: tzinfo) -> List[Dict[str, int]]:
    hourly = [0] * 24
    for event in events:
        hourly[event.timestamp.astimezone(tz).hour] += 1
    return [{"hour": hour, "count": count} for hour, count in enumerate(hourly)]


def daily_distribution(events: Sequence[Event], tz: tzinfo) -> Dict[str, int]:
    """Counts per calendar date, keys in first-seen order."""
    daily: Dict[str, int] = {}
    for event in events:
        day = event.timestamp.astimezone(tz).strftime("%Y-%m-%d")
        daily[day] = daily.get(day, 0) + 1
    return daily


def weekly_trends(events: Sequence[Event], tz: tzinfo) -> List[Dict[str, Any]]:
    weekly = [0] * 7
    for event in events:
        # Python's weekday() is Monday=0; shift to Sunday=0
        weekly[(event.timestamp.astimezone(tz).weekday() + 1) % 7] += 1
    return [
        {"day": WEEKDAY_NAMES[index], "day_index": index, "count": count}
        for index, count in enumerate(weekly)
    ]


def find_peak_hours(hourly: Sequence[Dict[str, int]], top: int = 3) -> List[Dict[str, int]]:
    """Busiest hours; equal counts keep hour order (sorted() is stable)."""
    ranked = sorted(hourly, key=lambda h: h["count"], reverse=True)
    return [{"hour": h["hour"], "count": h["count"]} for h in ranked[:top]]


def find_peak_days(daily: Dict[str, int], top: int = 3) -> List[Dict[str, Any]]:
    """Busiest dates; equal counts keep first-seen order."""
    ranked = sorted(daily.items(), key=lambda item: item[1], reverse=True)
    return [{"day": day, "count": count} for day, count in ranked[:top]]


def find_peak_hour(events: Sequence[Event], tz: tzinfo) -> int:
    """Single busiest hour, the earliest one on ties."""
    best = {"hour": 0, "count": 0}
    for bucket in hourly_distribution(events, tz):
        if bucket["count"] > best["count"]:
            best = bucket
    return best["hour"]


# === Devices & geography ===

def device_breakdown(events: Sequence[Event]) -> Dict[str, Dict[str, float]]:
    mobile = sum(1 for e in events if e.is_mobile)
    desktop = len(events) - mobile
    return {
        "mobile": {"count": mobile, "percentage": percentage(mobile, len(events))},
        "desktop": {"count": desktop, "percentage": percentage(desktop, len(events))},
    }


def geographic_breakdown(events: Sequence[Event]) -> List[Dict[str, Any]]:
    countries: Dict[str, int] = {}
    for event in events:
        country = event.country_code or "Unknown"
        countries[country] = countries.get(country, 0) + 1

    rows = [
        {"country": country, "count": count, "percentage": percentage(count, len(events))}
        for country, count in countries.items()
    ]
    return sorted(rows, key=lambda r: r["count"], reverse=True)


# === Menu & item performance ===

def categorize_performance(ctr: float) -> str:
    if ctr >= 20:
        return "excellent"
    if ctr >= 15:
        return "good"
    if ctr >= 10:
        return "average"
    if ctr >= 5:
        return "below-average"
    return "poor"


def categorize_item_performance(clicks: int) -> str:
    if clicks >= 20:
        return "star-performer"
    if clicks >= 10:
        return "high-performer"
    if clicks >= 5:
        return "average"
    if clicks >= 2:
        return "low-performer"
    return "underperforming"


def categorize_engagement(rate: float) -> str:
    """Engagement level from clicks per view (a fraction, not a percentage)."""
    if rate >= 0.2:
        return "high"
    if rate >= 0.15:
        return "medium"
    if rate >= 0.1:
        return "low"
    return "very-low"


def menu_performance(
    views: Sequence[Event],
    clicks: Sequence[Event],
    menus: Sequence[MenuSummary],
) -> List[Dict[str, Any]]:
    view_counts = Counter(e.menu_slug for e in views)
    click_counts = Counter(e.menu_slug for e in clicks)

    results = []
    for menu in menus:
        menu_views = view_counts.get(menu.slug, 0)
        menu_clicks = click_counts.get(menu.slug, 0)
        ctr = click_through_rate(menu_views, menu_clicks)
        results.append({
            "menu_id": str(menu.id),
            "title": menu.title,
            "slug": menu.slug,
            "views": menu_views,
            "clicks": menu_clicks,
            "click_through_rate": ctr,
            "performance": categorize_performance(ctr),
        })
    return results


def item_performance(
    clicks: Sequence[Event],
    menu_items: Sequence[MenuItemSummary],
) -> List[Dict[str, Any]]:
    """Clicks per item name, joined with the catalogue entry of the same name."""
    stats: Dict[str, Dict[str, Any]] = {}
    for event in clicks:
        if not event.item_name:
            continue
        if event.item_name not in stats:
            stats[event.item_name] = {
                "name": event.item_name,
                "clicks": 0,
                "views": 0,
                "menu_item_id": None,
                "menu_slug": event.menu_slug,
                "category": None,
                "price": None,
            }
        stats[event.item_name]["clicks"] += 1

    for item in menu_items:
        entry = stats.get(item.name)
        if entry is None:
            continue
        entry["menu_item_id"] = str(item.id)
        entry["menu_slug"] = item.menu_slug or entry["menu_slug"]
        entry["category"] = item.category or "Menu"
        entry["price"] = item.price

    rows = [
        {**entry, "performance": categorize_item_performance(entry["clicks"])}
        for entry in stats.values()
    ]
    return sorted(rows, key=lambda r: r["clicks"], reverse=True)


# === Sessions & engagement ===

def session_key(event: Event) -> str:
    return event.session_id or ANONYMOUS_SESSION


def group_by_session(events: Sequence[Event]) -> List[List[Event]]:
    """
    Group events into visits, each ordered oldest first.

    All events lacking a session id collapse into one pseudo-session.
    This understates the session count for anonymous traffic.
    """
    sessions: Dict[str, List[Event]] = {}
    for event in events:
        sessions.setdefault(session_key(event), []).append(event)
    return [sorted(session, key=lambda e: e.timestamp) for session in sessions.values()]


def average_session_length(sessions: Sequence[Sequence[Event]]) -> int:
    """Mean visit span in whole minutes; single-event visits count as 0."""
    if not sessions:
        return 0

    total_seconds = 0.0
    for session in sessions:
        if len(session) < 2:
            continue
        timestamps = [e.timestamp for e in session]
        total_seconds += (max(timestamps) - min(timestamps)).total_seconds()

    return round_half_up(total_seconds / len(sessions) / 60)


def bounce_rate_from_sessions(sessions: Sequence[Sequence[Event]]) -> float:
    """Share of visits with exactly one event."""
    single = sum(1 for s in sessions if len(s) == 1)
    return percentage(single, len(sessions))


def view_only_bounce_rate(views: Sequence[Event], clicks: Sequence[Event]) -> float:
    """
    Share of identified sessions that viewed a menu but never clicked an item.
    Events without a session id are ignored.
    """
    bounced = {e.session_id for e in views if e.session_id}
    engaged = {e.session_id for e in clicks if e.session_id}
    bounced -= engaged
    return percentage(len(bounced), len(bounced) + len(engaged))


def _events_per_session(events: Sequence[Event]) -> Tuple[int, float]:
    unique_sessions = len({session_key(e) for e in events})
    if unique_sessions == 0:
        return 0, 0.0
    return unique_sessions, len(events) / unique_sessions


def conversion_potential(views: int, clicks: int) -> Dict[str, float]:
    base_rate = clicks / views if views > 0 else 0.0
    potential = min(base_rate * 1.5, 0.3)  # Max 30% potential
    return {
        "current": round_decimal(base_rate * 100, 1),
        "potential": round_decimal(potential * 100, 1),
        "improvement": round_decimal((potential - base_rate) * 100, 1),
    }


def user_retention(events: Sequence[Event]) -> Dict[str, Any]:
    unique_sessions, per_session = _events_per_session(events)
    return {
        "unique_sessions": unique_sessions,
        "average_events_per_session": round_decimal(per_session, 1),
        "retention_score": min(per_session / 3, 1.0),
    }


def return_visitors(events: Sequence[Event]) -> Dict[str, Any]:
    unique_sessions, per_session = _events_per_session(events)
    rate = min(per_session / 5, 0.3)  # Max 30%
    return {
        "estimated_return_visitors": round_half_up(unique_sessions * rate),
        "return_visitor_rate": round_decimal(rate * 100, 1),
        "confidence": "high" if per_session > 2 else "medium",
    }


def user_journey(sessions: Sequence[Sequence[Event]]) -> Dict[str, Any]:
    if not sessions:
        return {"average_journey_length": 0, "conversion_rate": 0.0, "common_paths": []}

    paths = [" → ".join(e.event_type for e in session) for session in sessions]
    converted = sum(
        1 for session in sessions
        if any(e.event_type == EventType.ITEM_CLICK for e in session)
    )

    path_counts: Dict[str, int] = {}
    for path in paths:
        path_counts[path] = path_counts.get(path, 0) + 1
    common = sorted(path_counts.items(), key=lambda item: item[1], reverse=True)[:5]

    return {
        "average_journey_length": round_decimal(sum(len(s) for s in sessions) / len(sessions), 2),
        "conversion_rate": percentage(converted, len(sessions)),
        "common_paths": [{"path": path, "count": count} for path, count in common],
    }


def engagement_metrics(views: Sequence[Event], clicks: Sequence[Event]) -> Dict[str, Any]:
    total_views = len(views)
    total_clicks = len(clicks)
    rate = total_clicks / total_views if total_views > 0 else 0.0
    return {
        "click_through_rate": click_through_rate(total_views, total_clicks),
        "engagement_level": categorize_engagement(rate),
        "conversion_potential": conversion_potential(total_views, total_clicks),
        "user_retention": user_retention(views),
    }


def behavioral_patterns(events: Sequence[Event]) -> Dict[str, Any]:
    sessions = group_by_session(events)
    return {
        "average_session_length": average_session_length(sessions),
        "bounce_rate": bounce_rate_from_sessions(sessions),
        "user_journey": user_journey(sessions),
        "return_visitors": return_visitors(events),
    }


# === Whole-bundle processing ===

def process_events(
    events: Sequence[Event],
    menus: Sequence[MenuSummary],
    menu_items: Sequence[MenuItemSummary],
    tz: tzinfo,
) -> Dict[str, Any]:
    """First-pass metrics for a tenant's events in the lookback window."""
    events = [e for e in events if not e.is_bot]
    views, clicks = split_events(events)

    hourly = hourly_distribution(views, tz)
    daily = daily_distribution(views, tz)

    return {
        "time_analysis": {
            "hourly": hourly,
            "daily": daily,
            "weekly": weekly_trends(views, tz),
            "peak_hours": find_peak_hours(hourly),
            "peak_days": find_peak_days(daily),
        },
        "device_analysis": device_breakdown(views),
        "geographic_analysis": geographic_breakdown(events),
        "menu_analysis": menu_performance(views, clicks, menus),
        "item_analysis": item_performance(clicks, menu_items),
        "engagement": engagement_metrics(views, clicks),
        "behavior": behavioral_patterns(events),
        "summary": {
            "total_views": len(views),
            "total_clicks": len(clicks),
            "click_through_rate": click_through_rate(len(views), len(clicks)),
            "average_session_duration": average_session_length(group_by_session(events)),
            "bounce_rate": view_only_bounce_rate(views, clicks),
        },
    }


# === Data quality ===

def assess_time_range(events: Sequence[Event]) -> str:
    if not events:
        return "poor"

    timestamps = [e.timestamp for e in events]
    days = (max(timestamps) - min(timestamps)).total_seconds() / 86400

    if days >= 30:
        return "excellent"
    if days >= 14:
        return "good"
    if days >= 7:
        return "fair"
    return "poor"


def assess_event_types(events: Sequence[Event]) -> str:
    kinds = {e.event_type for e in events}
    if len(kinds) >= 3:
        return "excellent"
    if len(kinds) >= 2:
        return "good"
    return "fair"


def assess_data_volume(count: int) -> str:
    if count >= 100:
        return "excellent"
    if count >= 50:
        return "good"
    if count >= 10:
        return "fair"
    return "poor"


def assess_data_quality(events: Sequence[Event], menus: Sequence[Any]) -> Dict[str, str]:
    """Four independent axes plus an overall high / medium / low verdict."""
    axes = {
        "data_volume": assess_data_volume(len(events)),
        "time_range": assess_time_range(events),
        "menu_coverage": "good" if len(menus) >= 1 else "poor",
        "event_types": assess_event_types(events),
    }

    strong = sum(1 for value in axes.values() if value in ("excellent", "good")) / len(axes)
    if strong >= 0.75:
        overall = "high"
    elif strong >= 0.5:
        overall = "medium"
    else:
        overall = "low"

    return {**axes, "overall": overall}


def recommend_analysis_type(event_count: int, menu_count: int) -> str:
    if event_count < 10:
        return "basic"
    if event_count < 100:
        return "standard"
    if menu_count > 1:
        return "comprehensive"
    return "advanced"


def has_enough_data(event_count: int, threshold: int = 10) -> bool:
    return event_count >= threshold
