"""Theme model: the fixed taxonomy insights are filed under."""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base

if TYPE_CHECKING:
    from app.models.insight import Insight


UNCATEGORISED_THEME = "Uncategorised"

# Seed order defines board column order
DEFAULT_THEMES = [
    UNCATEGORISED_THEME,
    "Mod installation",
    "Mod upload",
    "Mod Browsing",
    "Community",
    "Nexus premium",
    "Mod collections",
]


class Theme(Base):
    """Top-level category; every insight belongs to exactly one."""

    __tablename__ = "themes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(100), unique=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0)

    # Relationships
    insights: Mapped[List["Insight"]] = relationship(
        "Insight",
        back_populates="theme",
        foreign_keys="Insight.theme_id",
    )

    def __repr__(self) -> str:
        return f"<Theme(id={self.id}, name={self.name})>"
