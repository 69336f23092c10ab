"""Tag vocabulary: normalisation, race-safe creation and insight links."""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from app.models.tag import Tag, InsightTag, DEFAULT_TAG_COLOR

logger = logging.getLogger(__name__)

MAX_TAGS_PER_INSIGHT = 3


def normalize_tag_name(name: Any) -> str:
    """Canonical form of a tag name: trimmed and lowercased."""
    if name is None:
        return ""
    return str(name).strip().lower()


def normalize_tags(raw: Optional[Iterable[Any]], limit: int = MAX_TAGS_PER_INSIGHT) -> List[str]:
    """
    Canonical tag set for one insight.

    Drops falsy and blank entries, lowercases and trims the rest, collapses
    duplicates keeping first-seen order, and keeps at most `limit` names.
    Never raises: a non-iterable input gives an empty list.
    """
    if not raw or isinstance(raw, (str, bytes)):
        return []
    try:
        items = list(raw)
    except TypeError:
        return []

    tags: List[str] = []
    for item in items:
        if not item:
            continue
        name = normalize_tag_name(item)
        if name and name not in tags:
            tags.append(name)
        if len(tags) == limit:
            break
    return tags


class TagService:
    """Service for the shared tag vocabulary."""

    @staticmethod
    async def list_tags(db: AsyncSession) -> List[Tag]:
        result = await db.execute(select(Tag).order_by(Tag.name))
        return list(result.scalars().all())

    @staticmethod
    async def get_tag_ids_by_name(db: AsyncSession) -> Dict[str, str]:
        """Current vocabulary as {name: id}."""
        result = await db.execute(select(Tag.id, Tag.name))
        return {name: tag_id for tag_id, name in result.all()}

    @staticmethod
    async def get_tag_by_name(db: AsyncSession, name: str) -> Optional[Tag]:
        result = await db.execute(select(Tag).where(Tag.name == normalize_tag_name(name)))
        return result.scalar_one_or_none()

    @staticmethod
    async def _insert_tag(db: AsyncSession, name: str, color_code: Optional[str]) -> Tag:
        """Insert inside a savepoint so a unique violation leaves the session usable."""
        async with db.begin_nested():
            tag = Tag(name=name, color_code=color_code)
            db.add(tag)
            await db.flush()
        return tag

    @staticmethod
    async def create_tag(
        db: AsyncSession,
        name: Optional[str],
        color_code: Optional[str] = None,
    ) -> Tag:
        """Create a tag by hand. A duplicate name is reported to the caller."""
        name = normalize_tag_name(name)
        if not name:
            raise InvalidInputError("Enter a tag name.")
        try:
            return await TagService._insert_tag(db, name, color_code or DEFAULT_TAG_COLOR)
        except IntegrityError:
            raise ConflictError("A tag with this name already exists.")

    @staticmethod
    async def get_or_create_tag_id(
        db: AsyncSession,
        name: str,
        color_code: str = DEFAULT_TAG_COLOR,
    ) -> Optional[str]:
        """
        Id of the tag called `name`, creating it if needed.

        A unique violation means another writer created it first: re-read its id.
        Returns None when the tag can be neither created nor found.
        """
        name = normalize_tag_name(name)
        if not name:
            return None
        try:
            tag = await TagService._insert_tag(db, name, color_code)
            logger.info(f"Created tag '{name}'")
            return tag.id
        except IntegrityError:
            logger.debug(f"Tag '{name}' already exists, re-resolving")

        existing = await TagService.get_tag_by_name(db, name)
        if existing is None:
            logger.warning(f"Tag '{name}' could not be created or found")
            return None
        return existing.id

    @staticmethod
    async def link_tag(db: AsyncSession, insight_id: str, tag_id: str) -> bool:
        """
        Attach a tag to an insight if not attached already.

        Returns True when a new link row was written.
        """
        result = await db.execute(
            select(InsightTag.id)
            .where(InsightTag.insight_id == insight_id)
            .where(InsightTag.tag_id == tag_id)
        )
        if result.scalar_one_or_none() is not None:
            return False
        try:
            async with db.begin_nested():
                db.add(InsightTag(insight_id=insight_id, tag_id=tag_id))
                await db.flush()
        except IntegrityError:
            # Linked concurrently
            return False
        return True

    @staticmethod
    async def unlink_tag(db: AsyncSession, insight_id: str, tag_id: str) -> None:
        await db.execute(
            delete(InsightTag)
            .where(InsightTag.insight_id == insight_id)
            .where(InsightTag.tag_id == tag_id)
        )

    @staticmethod
    async def delete_tag(db: AsyncSession, tag_id: str) -> None:
        """Delete a tag and every link to it."""
        tag = await db.get(Tag, tag_id)
        if tag is None:
            raise NotFoundError("Tag not found")
        await db.execute(delete(InsightTag).where(InsightTag.tag_id == tag_id))
        await db.delete(tag)
        await db.flush()
        logger.info(f"Deleted tag '{tag.name}'")
