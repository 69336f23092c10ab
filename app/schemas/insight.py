"""Insight schemas for API validation."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.insight import Insight, SourceType
from app.schemas.tag import TagResponse


class InsightResponse(BaseModel):
    """Insight with its resolved theme names and tags (board card / list row)."""
    id: str
    content: str
    source_url: Optional[str] = None
    source_type: Optional[SourceType] = None
    theme_id: str
    theme_name: Optional[str] = None
    suggested_theme_id: Optional[str] = None
    suggested_theme_name: Optional[str] = None
    created_at: datetime
    mod_author_url: Optional[str] = None
    mod_author_name: Optional[str] = None
    mod_author_avatar_url: Optional[str] = None
    tags: List[TagResponse] = []

    @classmethod
    def from_model(cls, insight: Insight) -> "InsightResponse":
        """Build from an ORM row whose theme/suggested_theme/tags are loaded."""
        return cls(
            id=insight.id,
            content=insight.content,
            source_url=insight.source_url,
            source_type=insight.source_type,
            theme_id=insight.theme_id,
            theme_name=insight.theme.name if insight.theme else None,
            suggested_theme_id=insight.suggested_theme_id,
            suggested_theme_name=insight.suggested_theme.name if insight.suggested_theme else None,
            created_at=insight.created_at,
            mod_author_url=insight.mod_author_url,
            mod_author_name=insight.mod_author_name,
            mod_author_avatar_url=insight.mod_author_avatar_url,
            tags=[TagResponse.model_validate(tag) for tag in insight.tags],
        )


class InsightListResponse(BaseModel):
    """Schema for the list/board view."""
    items: List[InsightResponse]
    total: int


class InsightThemeUpdate(BaseModel):
    """Board move: the column the card was dropped on."""
    theme_id: Optional[str] = None


class InsightThemeResponse(BaseModel):
    """Authoritative theme state after a move."""
    id: str
    theme_id: str
    suggested_theme_id: Optional[str] = None

    class Config:
        from_attributes = True


class ModAuthorUpdate(BaseModel):
    """Nexus Mods profile URL of the mod author an insight is about."""
    profile_url: Optional[str] = Field(None, max_length=500)


class TagSuggestionResponse(BaseModel):
    suggestion: str
