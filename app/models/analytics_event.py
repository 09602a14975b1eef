"""AnalyticsEvent model - append-only log of public menu interactions."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Boolean, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class EventType:
    """Event types recorded by the public menu pages."""
    MENU_VIEW = "menu_view"
    ITEM_CLICK = "item_click"


class AnalyticsEvent(Base):
    """
    One observed interaction on a public menu.

    Used to analyze:
    - Views and item clicks per menu
    - Traffic by hour / day / weekday
    - Device mix and session behavior
    """

    __tablename__ = "analytics_events"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # menu_view or item_click
    event_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )

    menu_slug: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    # Only set for item_click
    item_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    session_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    referrer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    country_code: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)

    is_bot: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_mobile: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Truncated SHA-256 of the client IP
    ip_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<AnalyticsEvent {self.event_type} {self.menu_slug}>"
