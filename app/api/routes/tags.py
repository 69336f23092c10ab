"""Tag vocabulary endpoints."""

from typing import List

from fastapi import APIRouter, status

from app.core.dependencies import DbSession
from app.schemas.tag import TagCreate, TagResponse
from app.services.tag_service import TagService

router = APIRouter()


@router.get("", response_model=List[TagResponse])
async def list_tags(db: DbSession):
    tags = await TagService.list_tags(db)
    return [TagResponse.model_validate(t) for t in tags]


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(body: TagCreate, db: DbSession):
    """Create a tag by hand. Names are stored lowercase; duplicates are rejected."""
    tag = await TagService.create_tag(db, body.name, body.color_code)
    return TagResponse.model_validate(tag)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(tag_id: str, db: DbSession):
    """Delete a tag everywhere it is used."""
    await TagService.delete_tag(db, tag_id)
