"""Theme endpoints (read-only taxonomy)."""

from typing import List

from fastapi import APIRouter

from app.core.dependencies import DbSession
from app.schemas.theme import ThemeResponse
from app.services.theme_service import ThemeService

router = APIRouter()


@router.get("", response_model=List[ThemeResponse])
async def list_themes(db: DbSession):
    """Themes in board column order."""
    themes = await ThemeService.list_themes(db)
    return [ThemeResponse.model_validate(t) for t in themes]
