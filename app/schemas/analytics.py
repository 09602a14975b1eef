"""
Pydantic types passed between the collector, the insights engine and the API.

Both bundle and report round-trip through JSON (`model_dump(mode="json")` /
`model_validate`) so they can live in either cache backend.
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _assume_utc(value: datetime) -> datetime:
    """Stored timestamps without an offset are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Event(BaseModel):
    """One observed interaction on a public menu."""

    model_config = ConfigDict(from_attributes=True)

    event_type: str
    menu_slug: str
    item_name: Optional[str] = None
    timestamp: datetime
    is_mobile: bool = False
    is_bot: bool = False
    session_id: Optional[str] = None
    ip_hash: Optional[str] = None
    country_code: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return _assume_utc(value)


class MenuSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    title: str
    slug: str
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    organization_id: Optional[uuid.UUID] = None
    location_id: Optional[uuid.UUID] = None


class MenuItemSummary(BaseModel):
    """A menu item flattened with its menu's title and slug."""

    id: uuid.UUID
    menu_id: uuid.UUID
    name: str
    description: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    emoji: Optional[str] = None
    image_url: Optional[str] = None
    is_available: bool = True
    sort_order: int = 0
    menu_title: Optional[str] = None
    menu_slug: Optional[str] = None


class UserProfile(BaseModel):
    id: uuid.UUID
    email: Optional[str] = None
    restaurant_name: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    subscription: Dict[str, Any] = Field(default_factory=dict)


class MenusOverview(BaseModel):
    total: int = 0
    active: int = 0
    data: List[MenuSummary] = Field(default_factory=list)


class AnalyticsPeriod(BaseModel):
    start: datetime
    end: datetime
    days: int


class BundleMetadata(BaseModel):
    collected_at: datetime
    data_quality: Dict[str, str]
    has_enough_data: bool
    recommended_analysis: str


class AnalyticsBundle(BaseModel):
    """Everything known about one tenant for one lookback window."""

    user: UserProfile
    menus: MenusOverview
    menu_items: List[MenuItemSummary] = Field(default_factory=list)
    events: List[Event] = Field(default_factory=list)
    period: AnalyticsPeriod
    processed: Dict[str, Any]
    branding: Optional[Dict[str, Any]] = None
    organization: Optional[Dict[str, Any]] = None
    sample_data: Dict[str, Any] = Field(default_factory=dict)
    metadata: BundleMetadata

    @property
    def total_events(self) -> int:
        return len(self.events)


class InsightsMetadata(BaseModel):
    generated_at: datetime
    confidence: float
    data_quality: Dict[str, str]
    analysis_type: str
    user_id: uuid.UUID


class InsightsReport(BaseModel):
    """The six insight categories plus generation metadata."""

    performance_insights: Dict[str, Any]
    behavioral_insights: Dict[str, Any]
    predictive_insights: Dict[str, Any]
    optimization_recommendations: Dict[str, Any]
    competitive_insights: Dict[str, Any]
    summary: Dict[str, Any]
    metadata: InsightsMetadata

    def content(self) -> Dict[str, Any]:
        """Report body without the generation timestamp."""
        data = self.model_dump(mode="json")
        data["metadata"].pop("generated_at", None)
        return data

    def to_row(self) -> Dict[str, Any]:
        """Shape stored in the user_insights table."""
        return {
            "user_id": self.metadata.user_id,
            "insights": json.dumps(self.model_dump(mode="json")),
            "generated_at": self.metadata.generated_at,
            "confidence": self.metadata.confidence,
            "data_quality": self.metadata.data_quality.get("overall", "low"),
            "analysis_type": self.metadata.analysis_type,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "InsightsReport":
        """Rebuild a report from a stored user_insights row."""
        insights = row["insights"]
        if isinstance(insights, str):
            insights = json.loads(insights)
        return cls.model_validate(insights)
