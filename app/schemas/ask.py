"""Schemas for question answering over stored insights."""

from typing import List, Optional

from pydantic import BaseModel

from app.schemas.insight import InsightResponse


class AskRequest(BaseModel):
    question: Optional[str] = None


class AskResponse(BaseModel):
    """The answer and exactly the insights that were given to the LLM."""
    answer: str
    sources: List[InsightResponse]
