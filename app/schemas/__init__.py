"""Pydantic schemas shared by services and API routers."""

from app.schemas.analytics import (
    AnalyticsBundle,
    AnalyticsPeriod,
    BundleMetadata,
    Event,
    InsightsMetadata,
    InsightsReport,
    MenuItemSummary,
    MenusOverview,
    MenuSummary,
    UserProfile,
)

__all__ = [
    "AnalyticsBundle",
    "AnalyticsPeriod",
    "BundleMetadata",
    "Event",
    "InsightsMetadata",
    "InsightsReport",
    "MenuItemSummary",
    "MenusOverview",
    "MenuSummary",
    "UserProfile",
]
