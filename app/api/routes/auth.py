"""Access-code authentication endpoints."""

import logging

from fastapi import APIRouter, Request, Response

from app.core.config import get_settings
from app.core.dependencies import DbSession
from app.core.exceptions import AuthenticationError, InvalidInputError, RateLimitedError
from app.core.rate_limiter import rate_limiter, get_client_ip
from app.schemas.auth import AccessCodeRequest, AuthOkResponse
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)
router = APIRouter()


def check_rate_limit(request: Request, limit_type: str) -> str:
    """Raise RateLimitedError if the client IP is over the limit. Returns the IP."""
    client_ip = get_client_ip(request)
    allowed, retry_after = rate_limiter.is_allowed(limit_type, client_ip)
    if not allowed:
        logger.warning(f"Rate limit exceeded for {limit_type}: {client_ip}")
        raise RateLimitedError(retry_after)
    return client_ip


# ─────────────────────────────────────────────
# Validate access code
# ─────────────────────────────────────────────

@router.post("/validate-code", response_model=AuthOkResponse)
async def validate_code(
    body: AccessCodeRequest,
    request: Request,
    response: Response,
    db: DbSession,
):
    """
    Exchange an access code for a session cookie.
    """
    code = body.code.strip() if body.code else ""
    if not code:
        raise InvalidInputError("Code is required")

    client_ip = check_rate_limit(request, "access_code_ip")

    if not await AuthService.validate_access_code(db, code):
        raise AuthenticationError("Invalid access code")

    settings = get_settings()
    token = AuthService.create_session_token()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
        max_age=settings.session_max_age_seconds,
    )
    rate_limiter.reset("access_code_ip", client_ip)
    return AuthOkResponse(ok=True)


# ─────────────────────────────────────────────
# Logout
# ─────────────────────────────────────────────

@router.post("/logout", response_model=AuthOkResponse)
async def logout(response: Response):
    """Clear the session cookie."""
    settings = get_settings()
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )
    return AuthOkResponse(ok=True)
