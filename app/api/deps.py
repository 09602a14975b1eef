from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from app.cache import TTLCache, create_cache
from app.config import settings
from app.database import get_session_factory
from app.services.analytics_collector import AnalyticsCollector
from app.services.analytics_store import AnalyticsStore
from app.services.dashboard_summary import DashboardService
from app.services.event_tracking import EventTracker
from app.services.insights_engine import InsightsGenerator


async def verify_admin_key(
    x_admin_key: Optional[str] = Header(None, alias="X-Admin-Key"),
) -> str:
    """
    Validate the service key from the X-Admin-Key header.
    Returns the key if valid, raises 401 otherwise.
    """
    if not x_admin_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Admin Key",
        )

    valid_key = settings.admin_api_key
    if not valid_key or x_admin_key != valid_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Admin Key",
        )

    return x_admin_key


@lru_cache
def get_cache() -> TTLCache:
    """One cache per process, shared by collector and generator."""
    return create_cache()


def get_store() -> AnalyticsStore:
    return AnalyticsStore(get_session_factory())


def get_collector(
    store: AnalyticsStore = Depends(get_store),
    cache: TTLCache = Depends(get_cache),
) -> AnalyticsCollector:
    return AnalyticsCollector(store, cache=cache)


def get_insights_generator(
    store: AnalyticsStore = Depends(get_store),
    cache: TTLCache = Depends(get_cache),
) -> InsightsGenerator:
    return InsightsGenerator(store, cache=cache)


def get_dashboard_service(store: AnalyticsStore = Depends(get_store)) -> DashboardService:
    return DashboardService(store)


def get_event_tracker(store: AnalyticsStore = Depends(get_store)) -> EventTracker:
    return EventTracker(store)
