"""Analytics schemas."""

from typing import Dict, List, Optional

from pydantic import BaseModel

from app.schemas.theme import ThemeResponse


class TagCountRow(BaseModel):
    """How often a tag is used, overall and per confirmed theme."""
    tag_id: str
    tag_name: str
    color_code: Optional[str] = None
    count_all: int = 0
    count_by_theme: Dict[str, int] = {}


class TagFrequencyResponse(BaseModel):
    themes: List[ThemeResponse]
    tags: List[TagCountRow]
