"""Pydantic schemas for API request/response validation."""

from app.schemas.theme import ThemeResponse
from app.schemas.tag import TagCreate, TagResponse
from app.schemas.insight import (
    InsightResponse,
    InsightListResponse,
    InsightThemeUpdate,
    InsightThemeResponse,
    ModAuthorUpdate,
    TagSuggestionResponse,
)
from app.schemas.analyze import AnalyzeRequest, AnalyzeResponse, ExtractedInsight
from app.schemas.ask import AskRequest, AskResponse
from app.schemas.analytics import TagCountRow, TagFrequencyResponse
from app.schemas.auth import AccessCodeRequest, AuthOkResponse

__all__ = [
    "ThemeResponse",
    "TagCreate",
    "TagResponse",
    "InsightResponse",
    "InsightListResponse",
    "InsightThemeUpdate",
    "InsightThemeResponse",
    "ModAuthorUpdate",
    "TagSuggestionResponse",
    "AnalyzeRequest",
    "AnalyzeResponse",
    "ExtractedInsight",
    "AskRequest",
    "AskResponse",
    "TagCountRow",
    "TagFrequencyResponse",
    "AccessCodeRequest",
    "AuthOkResponse",
]
