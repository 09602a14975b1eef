"""UserInsights model - latest generated insights report per user."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Float, Text, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class UserInsights(Base):
    """
    One row per user; a new report overwrites the previous one.
    The full report is stored as serialized JSON text.
    """

    __tablename__ = "user_insights"

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
        index=True,
    )

    insights: Mapped[str] = mapped_column(Text, nullable=False)

    generated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    confidence: Mapped[float] = mapped_column(Float, nullable=False)

    # high / medium / low
    data_quality: Mapped[str] = mapped_column(String(20), nullable=False)

    # basic / standard / advanced / comprehensive
    analysis_type: Mapped[str] = mapped_column(String(20), nullable=False)

    def __repr__(self) -> str:
        return f"<UserInsights {self.user_id} confidence={self.confidence}>"
