"""FastAPI dependencies shared by the route modules."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import AuthenticationError
from app.db.session import get_db
from app.services.auth_service import AuthService

DbSession = Annotated[AsyncSession, Depends(get_db)]


async def require_session(request: Request) -> None:
    """Reject the request unless auth is disabled or a valid session cookie is sent."""
    settings = get_settings()
    if not settings.require_auth:
        return
    token = request.cookies.get(settings.session_cookie_name)
    if AuthService.verify_session_token(token) is None:
        raise AuthenticationError("Not authenticated")


AuthenticatedSession = Depends(require_session)
