"""Question answering endpoint."""

from fastapi import APIRouter, Depends

from app.core.dependencies import DbSession
from app.schemas.ask import AskRequest, AskResponse
from app.services.ask_service import AskService

router = APIRouter()


def get_ask_service() -> AskService:
    return AskService()


@router.post("", response_model=AskResponse)
async def ask_question(
    body: AskRequest,
    db: DbSession,
    ask_service: AskService = Depends(get_ask_service),
):
    """Answer a question from stored insights, returning the insights used as sources."""
    return await ask_service.ask(db, body.question)
