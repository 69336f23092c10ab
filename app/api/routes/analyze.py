"""Feedback analysis endpoint."""

import logging

from fastapi import APIRouter, Depends

from app.core.dependencies import DbSession
from app.schemas.analyze import AnalyzeRequest, AnalyzeResponse
from app.services.extraction_service import ExtractionService

logger = logging.getLogger(__name__)
router = APIRouter()


def get_extraction_service() -> ExtractionService:
    """Per-request service; raises ConfigurationError when the LLM key is missing."""
    return ExtractionService()


@router.post("", response_model=AnalyzeResponse)
async def analyze_feedback(
    body: AnalyzeRequest,
    db: DbSession,
    extraction_service: ExtractionService = Depends(get_extraction_service),
):
    """
    Extract atomic insights from raw feedback and store them.

    New insights land in "Uncategorised" with the LLM's theme kept as a
    suggestion. Returns how many were stored and their ids.
    """
    return await extraction_service.analyze(
        db,
        text=body.text,
        source_url=body.source_url,
        source_type=body.source_type,
    )
