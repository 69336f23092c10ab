"""Insight board and list operations."""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import InvalidInputError, NotFoundError, StoreReadError
from app.models.insight import Insight
from app.models.tag import InsightTag, Tag
from app.services.tag_service import TagService
from app.services.theme_service import ThemeService

logger = logging.getLogger(__name__)


def insight_query() -> Select:
    """SELECT of insights with theme, suggested theme and tags eagerly loaded."""
    return select(Insight).options(
        selectinload(Insight.theme),
        selectinload(Insight.suggested_theme),
        selectinload(Insight.insight_tags).selectinload(InsightTag.tag),
    )


class InsightService:
    """Service for reading and reorganising stored insights."""

    @staticmethod
    async def list_insights(
        db: AsyncSession,
        theme_id: Optional[str] = None,
        tag_ids: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
    ) -> List[Insight]:
        """Insights newest first, optionally limited to a theme and/or any of some tags."""
        query = insight_query()
        if theme_id:
            query = query.where(Insight.theme_id == theme_id)
        if tag_ids:
            query = query.where(
                Insight.id.in_(
                    select(InsightTag.insight_id).where(InsightTag.tag_id.in_(list(tag_ids)))
                )
            )
        query = query.order_by(Insight.created_at.desc())
        if limit:
            query = query.limit(limit)

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load insights: {e}")
            raise StoreReadError("Failed to load insights", details=str(e))
        return list(result.scalars().all())

    @staticmethod
    async def get_insight(db: AsyncSession, insight_id: str) -> Insight:
        """Single insight with relations, fresh from the database."""
        result = await db.execute(
            insight_query()
            .where(Insight.id == insight_id)
            .execution_options(populate_existing=True)
        )
        insight = result.scalar_one_or_none()
        if insight is None:
            raise NotFoundError("Insight not found")
        return insight

    @staticmethod
    async def move_to_theme(db: AsyncSession, insight_id: str, theme_id: Optional[str]) -> Insight:
        """
        Board move: confirm a theme for the insight.

        The LLM's suggestion is cleared on every theme change.
        """
        if not isinstance(theme_id, str) or not theme_id:
            raise InvalidInputError("theme_id required")

        insight = await db.get(Insight, insight_id)
        if insight is None:
            raise NotFoundError("Insight not found")
        if await ThemeService.get_theme(db, theme_id) is None:
            raise InvalidInputError("Unknown theme_id")

        insight.theme_id = theme_id
        insight.suggested_theme_id = None
        await db.flush()
        logger.info(f"Moved insight {insight_id} to theme {theme_id}")
        return insight

    @staticmethod
    async def delete_insight(db: AsyncSession, insight_id: str) -> None:
        insight = await db.get(Insight, insight_id)
        if insight is None:
            raise NotFoundError("Insight not found")
        await db.delete(insight)
        await db.flush()
        logger.info(f"Deleted insight {insight_id}")

    @staticmethod
    async def add_tag(db: AsyncSession, insight_id: str, tag_id: str) -> Insight:
        """Attach an existing tag; attaching twice is a no-op."""
        if await db.get(Insight, insight_id) is None:
            raise NotFoundError("Insight not found")
        if await db.get(Tag, tag_id) is None:
            raise NotFoundError("Tag not found")
        await TagService.link_tag(db, insight_id, tag_id)
        return await InsightService.get_insight(db, insight_id)

    @staticmethod
    async def remove_tag(db: AsyncSession, insight_id: str, tag_id: str) -> None:
        if await db.get(Insight, insight_id) is None:
            raise NotFoundError("Insight not found")
        await TagService.unlink_tag(db, insight_id, tag_id)

    @staticmethod
    async def set_mod_author(
        db: AsyncSession,
        insight_id: str,
        mod_author_url: Optional[str],
        mod_author_name: Optional[str],
        mod_author_avatar_url: Optional[str],
    ) -> Insight:
        insight = await db.get(Insight, insight_id)
        if insight is None:
            raise NotFoundError("Insight not found")
        insight.mod_author_url = mod_author_url
        insight.mod_author_name = mod_author_name
        insight.mod_author_avatar_url = mod_author_avatar_url
        await db.flush()
        return await InsightService.get_insight(db, insight_id)
