"""Database models."""

from app.models.theme import Theme, DEFAULT_THEMES, UNCATEGORISED_THEME
from app.models.tag import Tag, InsightTag, DEFAULT_TAG_COLOR
from app.models.insight import Insight, SourceType, MAX_INSIGHT_CONTENT_LENGTH
from app.models.access_code import AccessCode

__all__ = [
    "Theme",
    "DEFAULT_THEMES",
    "UNCATEGORISED_THEME",
    "Tag",
    "InsightTag",
    "DEFAULT_TAG_COLOR",
    "Insight",
    "SourceType",
    "MAX_INSIGHT_CONTENT_LENGTH",
    "AccessCode",
]
