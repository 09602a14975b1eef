"""BrandingSettings model - visual customization of public menus."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import String, DateTime, Boolean, Integer, Text, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class BrandingSettings(Base):
    """One branding row per user (upserted by the branding editor)."""

    __tablename__ = "branding_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )

    logo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    primary_color: Mapped[str] = mapped_column(String(7), default="#1F2937", nullable=False)
    secondary_color: Mapped[str] = mapped_column(String(7), default="#F9FAFB", nullable=False)
    accent_color: Mapped[str] = mapped_column(String(7), default="#F59E0B", nullable=False)
    font_family: Mapped[str] = mapped_column(String(50), default="inter", nullable=False)
    menu_layout: Mapped[str] = mapped_column(String(50), default="single-column", nullable=False)
    corner_radius: Mapped[int] = mapped_column(Integer, default=12, nullable=False)
    show_item_images: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<BrandingSettings {self.user_id}>"
