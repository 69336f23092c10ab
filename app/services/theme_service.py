"""Theme taxonomy lookups and startup seeding."""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StoreReadError
from app.models.theme import Theme, DEFAULT_THEMES, UNCATEGORISED_THEME

logger = logging.getLogger(__name__)


class ThemeService:
    """Service for the fixed theme taxonomy."""

    @staticmethod
    async def list_themes(db: AsyncSession) -> List[Theme]:
        """All themes in board order."""
        try:
            result = await db.execute(select(Theme).order_by(Theme.order_index))
        except SQLAlchemyError as e:
            logger.error(f"Failed to load themes: {e}")
            raise StoreReadError("Failed to load themes", details=str(e))
        return list(result.scalars().all())

    @staticmethod
    def find_uncategorised(themes: List[Theme]) -> Optional[Theme]:
        return next((t for t in themes if t.name == UNCATEGORISED_THEME), None)

    @staticmethod
    async def get_theme(db: AsyncSession, theme_id: str) -> Optional[Theme]:
        return await db.get(Theme, theme_id)

    @staticmethod
    async def seed_default_themes(db: AsyncSession) -> int:
        """Insert any missing default themes. Returns how many were added."""
        result = await db.execute(select(Theme.name))
        existing = set(result.scalars().all())

        added = 0
        for order_index, name in enumerate(DEFAULT_THEMES):
            if name in existing:
                continue
            db.add(Theme(name=name, order_index=order_index))
            added += 1

        if added:
            await db.flush()
            logger.info(f"Seeded {added} theme(s)")
        return added
