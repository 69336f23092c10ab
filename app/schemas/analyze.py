"""Schemas for feedback analysis (insight extraction)."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.insight import SourceType


class AnalyzeRequest(BaseModel):
    """Raw feedback to extract insights from."""
    text: Optional[str] = None
    source_url: Optional[str] = Field(None, alias="sourceUrl", max_length=2048)
    source_type: Optional[SourceType] = Field(None, alias="sourceType")

    class Config:
        populate_by_name = True


class AnalyzeResponse(BaseModel):
    """Outcome of one extraction batch."""
    count: int
    insight_ids: List[str] = Field(default_factory=list, alias="insightIds")

    class Config:
        populate_by_name = True


class ExtractedInsight(BaseModel):
    """One item of the LLM's JSON array. Anything else in the item is rejected."""
    model_config = ConfigDict(extra="forbid", strict=True)

    content: str
    suggested_theme: str
    suggested_tags: List[str]
