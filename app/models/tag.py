"""Tag model and the insight/tag join table."""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base

if TYPE_CHECKING:
    from app.models.insight import Insight


DEFAULT_TAG_COLOR = "#6b7280"


class Tag(Base):
    """Reusable free-form label. Names are stored lowercase and trimmed."""

    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    color_code: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    insight_tags: Mapped[List["InsightTag"]] = relationship(
        "InsightTag",
        back_populates="tag",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Tag(id={self.id}, name={self.name})>"


class InsightTag(Base):
    """Link between an insight and a tag; the pair is unique."""

    __tablename__ = "insight_tags"
    __table_args__ = (
        UniqueConstraint("insight_id", "tag_id", name="uq_insight_tags_insight_tag"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    insight_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("insights.id", ondelete="CASCADE"),
        index=True,
    )
    tag_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("tags.id", ondelete="CASCADE"),
        index=True,
    )

    # Relationships
    insight: Mapped["Insight"] = relationship("Insight", back_populates="insight_tags")
    tag: Mapped["Tag"] = relationship("Tag", back_populates="insight_tags")

    def __repr__(self) -> str:
        return f"<InsightTag(insight_id={self.insight_id}, tag_id={self.tag_id})>"
