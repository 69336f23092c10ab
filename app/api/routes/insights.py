"""Insight board and list endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.dependencies import DbSession
from app.core.exceptions import InvalidInputError, NotFoundError
from app.schemas.insight import (
    InsightListResponse,
    InsightResponse,
    InsightThemeResponse,
    InsightThemeUpdate,
    ModAuthorUpdate,
    TagSuggestionResponse,
)
from app.services.insight_service import InsightService
from app.services.nexus_service import NexusService, parse_username_from_profile_url
from app.services.search import suggest_tag_name

router = APIRouter()


def get_nexus_service() -> NexusService:
    return NexusService()


@router.get("", response_model=InsightListResponse)
async def list_insights(
    db: DbSession,
    theme_id: Optional[str] = None,
    tag_id: Optional[List[str]] = Query(None),
):
    """
    List insights newest first.

    Filter by confirmed theme and/or by tags (an insight matches if it has
    any of the given tags).
    """
    insights = await InsightService.list_insights(db, theme_id=theme_id, tag_ids=tag_id)
    return InsightListResponse(
        items=[InsightResponse.from_model(i) for i in insights],
        total=len(insights),
    )


@router.get("/{insight_id}", response_model=InsightResponse)
async def get_insight(insight_id: str, db: DbSession):
    insight = await InsightService.get_insight(db, insight_id)
    return InsightResponse.from_model(insight)


@router.patch("/{insight_id}", response_model=InsightThemeResponse)
async def move_insight(insight_id: str, body: InsightThemeUpdate, db: DbSession):
    """
    Move an insight to another theme (board drag-and-drop).

    Clears the suggested theme. The response is the authoritative state the
    client should reconcile against.
    """
    insight = await InsightService.move_to_theme(db, insight_id, body.theme_id)
    return InsightThemeResponse.model_validate(insight)


@router.delete("/{insight_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_insight(insight_id: str, db: DbSession):
    await InsightService.delete_insight(db, insight_id)


@router.put("/{insight_id}/tags/{tag_id}", response_model=InsightResponse)
async def add_tag_to_insight(insight_id: str, tag_id: str, db: DbSession):
    """Attach an existing tag. Attaching an already attached tag changes nothing."""
    insight = await InsightService.add_tag(db, insight_id, tag_id)
    return InsightResponse.from_model(insight)


@router.delete("/{insight_id}/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_tag_from_insight(insight_id: str, tag_id: str, db: DbSession):
    await InsightService.remove_tag(db, insight_id, tag_id)


@router.get("/{insight_id}/tag-suggestion", response_model=TagSuggestionResponse)
async def suggest_tag(insight_id: str, db: DbSession):
    """Pre-fill for the "new tag" form, derived from the insight's content."""
    insight = await InsightService.get_insight(db, insight_id)
    return TagSuggestionResponse(suggestion=suggest_tag_name(insight.content))


@router.post("/{insight_id}/mod-author", response_model=InsightResponse)
async def set_mod_author(
    insight_id: str,
    body: ModAuthorUpdate,
    db: DbSession,
    nexus_service: NexusService = Depends(get_nexus_service),
):
    """Attach the mod author an insight is about, from a Nexus Mods profile URL."""
    if not parse_username_from_profile_url(body.profile_url):
        raise InvalidInputError("profile_url must be a Nexus Mods profile URL")

    # 404 before calling out to Nexus
    await InsightService.get_insight(db, insight_id)

    author = await nexus_service.resolve_mod_author(body.profile_url)
    if author is None:
        raise NotFoundError("Could not resolve mod author")

    insight = await InsightService.set_mod_author(
        db,
        insight_id,
        mod_author_url=author.url,
        mod_author_name=author.name,
        mod_author_avatar_url=author.avatar_url,
    )
    return InsightResponse.from_model(insight)


@router.delete("/{insight_id}/mod-author", response_model=InsightResponse)
async def clear_mod_author(insight_id: str, db: DbSession):
    insight = await InsightService.set_mod_author(db, insight_id, None, None, None)
    return InsightResponse.from_model(insight)
