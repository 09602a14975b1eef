"""Services package."""

from app.services.user_service import UserService
from app.services.analytics_store import AnalyticsStore
from app.services.analytics_collector import AnalyticsCollector
from app.services.insights_engine import GenerationResult, InsightsGenerator
from app.services.dashboard_summary import DashboardService
from app.services.event_tracking import EventTracker

__all__ = [
    "UserService",
    "AnalyticsStore",
    "AnalyticsCollector",
    "GenerationResult",
    "InsightsGenerator",
    "DashboardService",
    "EventTracker",
]
