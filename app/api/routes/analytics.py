"""Analytics endpoints."""

from fastapi import APIRouter

from app.core.dependencies import DbSession
from app.schemas.analytics import TagFrequencyResponse
from app.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/tag-frequency", response_model=TagFrequencyResponse)
async def tag_frequency(db: DbSession):
    """How often each tag is used, overall and per theme (feeds the frequency chart)."""
    return await AnalyticsService.tag_frequency(db)
