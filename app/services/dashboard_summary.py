"""
Dashboard Summary - lightweight widgets for the owner dashboard.

Unlike the collector these read only events, and never substitute sample
data when a window is empty.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from zoneinfo import ZoneInfo

from app.config import settings
from app.schemas.analytics import Event
from app.services.analytics_collector import as_uuid, utc_now
from app.services.analytics_metrics import (
    geographic_breakdown,
    hourly_distribution,
    percentage,
    round_half_up,
    split_events,
)
from app.services.analytics_store import AnalyticsStore

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90}


def period_to_days(period: str) -> int:
    """7d / 30d map directly; anything else is 90 days."""
    return PERIOD_DAYS.get(period, 90)


def mobile_share(views: Sequence[Event]) -> int:
    """Whole-number mobile percentage of views."""
    if not views:
        return 0
    return round_half_up(sum(1 for v in views if v.is_mobile) / len(views) * 100)


def empty_user_summary() -> Dict[str, Any]:
    return {
        "summary": {
            "total_scans": 0,
            "total_clicks": 0,
            "click_rate": "0%",
            "peak_hour": "N/A",
            "top_country": "Unknown",
        },
        "daily_scans": [],
        "hourly_data": [],
        "device_data": [],
        "top_items": [],
        "location_data": [],
    }


class DashboardService:
    """Per-menu and per-owner summaries over the event log."""

    def __init__(
        self,
        store: AnalyticsStore,
        timezone_name: Optional[str] = None,
        now: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.tz = ZoneInfo(timezone_name or settings.default_timezone)
        self.now = now

    async def menu_summary(self, slug: str) -> Dict[str, Any]:
        """Views, clicks and mobile share of one menu over the last 7 days."""
        since = self.now() - timedelta(days=7)
        views, clicks = split_events(await self.store.get_events([slug], since))
        return {
            "total_views": len(views),
            "total_clicks": len(clicks),
            "mobile_percentage": mobile_share(views),
            "period": "7 days",
        }

    async def menu_analytics(self, slug: str, days: int = 30) -> Optional[Dict[str, Any]]:
        """Detailed analytics of one menu; None when the slug is unknown."""
        menu = await self.store.get_menu_by_slug(slug)
        if menu is None:
            return None

        end_date = self.now()
        start_date = end_date - timedelta(days=days)
        views, clicks = split_events(await self.store.get_events([slug], start_date, end_date))

        views_by_day: Dict[str, int] = {}
        for view in sorted(views, key=lambda e: e.timestamp):
            day = view.timestamp.astimezone(self.tz).date().isoformat()
            views_by_day[day] = views_by_day.get(day, 0) + 1

        mobile = sum(1 for v in views if v.is_mobile)
        return {
            "menu": {"title": menu.title, "slug": slug},
            "period": {
                "start": start_date.isoformat(),
                "end": end_date.isoformat(),
                "days": days,
            },
            "total_views": len(views),
            "total_clicks": len(clicks),
            "views_by_day": views_by_day,
            "top_items": self._top_items(clicks, limit=10),
            "device_breakdown": {
                "mobile": mobile,
                "desktop": len(views) - mobile,
                "mobile_percentage": mobile_share(views),
            },
        }

    async def user_summary(
        self,
        user_id: Union[str, uuid.UUID],
        period: str = "7d",
    ) -> Dict[str, Any]:
        """Dashboard summary over the owner's active menus."""
        user_id = as_uuid(user_id)
        days = period_to_days(period)
        end_date = self.now()
        start_date = end_date - timedelta(days=days)

        menus = [m for m in await self.store.get_user_menus(user_id) if m.is_active]
        if not menus:
            return empty_user_summary()

        events = await self.store.get_events([m.slug for m in menus], start_date, end_date)
        views, clicks = split_events(events)

        hourly = hourly_distribution(views, self.tz)
        peak = hourly[0]
        for bucket in hourly:
            if bucket["count"] > peak["count"]:
                peak = bucket

        locations = geographic_breakdown(views)
        total_scans = len(views)
        mobile = sum(1 for v in views if v.is_mobile)
        desktop = total_scans - mobile

        return {
            "summary": {
                "total_scans": total_scans,
                "total_clicks": len(clicks),
                "click_rate": (
                    f"{percentage(len(clicks), total_scans)}%" if total_scans else "0%"
                ),
                "peak_hour": f"{peak['hour']:02d}:00" if peak["count"] else "N/A",
                "top_country": locations[0]["country"] if locations else "Unknown",
            },
            "daily_scans": self._daily_scans(views, clicks, end_date, days),
            "hourly_data": [
                {"hour": f"{h['hour']:02d}:00", "scans": h["count"]} for h in hourly
            ],
            "device_data": [
                {
                    "device": "Mobile",
                    "percentage": round_half_up(percentage(mobile, total_scans)),
                    "count": mobile,
                },
                {
                    "device": "Desktop",
                    "percentage": round_half_up(percentage(desktop, total_scans)),
                    "count": desktop,
                },
            ],
            "top_items": self._top_items(clicks, limit=5),
            "location_data": [
                {"country": loc["country"], "scans": loc["count"]} for loc in locations
            ],
            "user_menus": [{"slug": m.slug, "title": m.title} for m in menus],
            "period": {
                "days": days,
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
            },
        }

    def _daily_scans(
        self,
        views: Sequence[Event],
        clicks: Sequence[Event],
        end_date: datetime,
        days: int,
    ) -> List[Dict[str, Any]]:
        """One row per calendar day of the window, oldest first."""
        scans: Dict[str, int] = {}
        taps: Dict[str, int] = {}
        for bucket, events in ((scans, views), (taps, clicks)):
            for event in events:
                day = event.timestamp.astimezone(self.tz).date().isoformat()
                bucket[day] = bucket.get(day, 0) + 1

        last_day = end_date.astimezone(self.tz).date()
        rows = []
        for offset in range(days - 1, -1, -1):
            day = (last_day - timedelta(days=offset)).isoformat()
            rows.append({"date": day, "scans": scans.get(day, 0), "clicks": taps.get(day, 0)})
        return rows

    @staticmethod
    def _top_items(clicks: Sequence[Event], limit: int) -> List[Dict[str, Any]]:
        counts: Dict[str, int] = {}
        for click in clicks:
            if click.item_name:
                counts[click.item_name] = counts.get(click.item_name, 0) + 1
        ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
        return [{"name": name, "clicks": count} for name, count in ranked[:limit]]
