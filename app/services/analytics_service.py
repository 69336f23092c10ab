"""Tag-frequency analytics."""

import logging
from collections import defaultdict
from typing import Dict

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StoreReadError
from app.models.insight import Insight
from app.models.tag import InsightTag
from app.schemas.analytics import TagCountRow, TagFrequencyResponse
from app.schemas.theme import ThemeResponse
from app.services.tag_service import TagService
from app.services.theme_service import ThemeService

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Service for aggregate views over insights and tags."""

    @staticmethod
    async def tag_frequency(db: AsyncSession) -> TagFrequencyResponse:
        """
        Usage count of every tag, overall and per confirmed theme.

        Every theme appears in every row's count_by_theme, zero-filled.
        """
        themes = await ThemeService.list_themes(db)
        try:
            tags = await TagService.list_tags(db)
            result = await db.execute(
                select(InsightTag.tag_id, Insight.theme_id, func.count(InsightTag.id))
                .join(Insight, Insight.id == InsightTag.insight_id)
                .group_by(InsightTag.tag_id, Insight.theme_id)
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load analytics: {e}")
            raise StoreReadError("Failed to load analytics", details=str(e))

        counts: Dict[str, Dict[str, int]] = defaultdict(dict)
        for tag_id, theme_id, count in result.all():
            counts[tag_id][theme_id] = count

        rows = []
        for tag in tags:
            by_theme = {theme.id: counts[tag.id].get(theme.id, 0) for theme in themes}
            rows.append(TagCountRow(
                tag_id=tag.id,
                tag_name=tag.name,
                color_code=tag.color_code,
                count_all=sum(counts[tag.id].values()),
                count_by_theme=by_theme,
            ))

        return TagFrequencyResponse(
            themes=[ThemeResponse.model_validate(t) for t in themes],
            tags=rows,
        )
