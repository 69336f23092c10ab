"""Insight model: one atomic piece of extracted user feedback."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String, Text, DateTime, Enum as SQLEnum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base

if TYPE_CHECKING:
    from app.models.theme import Theme
    from app.models.tag import InsightTag, Tag


MAX_INSIGHT_CONTENT_LENGTH = 2000


class SourceType(str, Enum):
    """Where a piece of feedback came from."""
    REDDIT = "reddit"
    DISCORD = "discord"
    INTERVIEW = "interview"
    SLACK = "slack"
    OTHER = "other"


class Insight(Base):
    """Insight filed under a confirmed theme, with the LLM's suggestion kept aside."""

    __tablename__ = "insights"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    content: Mapped[str] = mapped_column(Text)
    source_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    source_type: Mapped[Optional[SourceType]] = mapped_column(
        SQLEnum(SourceType),
        nullable=True,
    )

    # Confirmed theme (board column) and the LLM's opinion
    theme_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("themes.id"),
        index=True,
    )
    suggested_theme_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("themes.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Mod author (optional, resolved from a Nexus Mods profile URL)
    mod_author_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    mod_author_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    mod_author_avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    # Relationships
    theme: Mapped["Theme"] = relationship(
        "Theme",
        back_populates="insights",
        foreign_keys=[theme_id],
    )
    suggested_theme: Mapped[Optional["Theme"]] = relationship(
        "Theme",
        foreign_keys=[suggested_theme_id],
    )
    insight_tags: Mapped[List["InsightTag"]] = relationship(
        "InsightTag",
        back_populates="insight",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def tags(self) -> List["Tag"]:
        return [link.tag for link in self.insight_tags if link.tag is not None]

    def __repr__(self) -> str:
        return f"<Insight(id={self.id}, theme_id={self.theme_id})>"
