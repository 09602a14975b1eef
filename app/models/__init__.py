"""Models package for database models."""

from app.models.user import User
from app.models.menu import Menu, MenuItem
from app.models.analytics_event import AnalyticsEvent, EventType
from app.models.subscription import Subscription
from app.models.branding import BrandingSettings
from app.models.organization import Organization, Location, OrganizationMember
from app.models.user_insights import UserInsights

__all__ = [
    "User",
    "Menu",
    "MenuItem",
    "AnalyticsEvent",
    "EventType",
    "Subscription",
    "BrandingSettings",
    "Organization",
    "Location",
    "OrganizationMember",
    "UserInsights",
]
