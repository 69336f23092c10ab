"""Access-code authentication with a signed session cookie."""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import ConfigurationError
from app.models.access_code import AccessCode

logger = logging.getLogger(__name__)

settings = get_settings()

SESSION_ALGORITHM = "HS256"
MIN_SECRET_LENGTH = 32


class AuthService:
    """Access codes in, session tokens out."""

    # ─── Secret ─────────────────────────────────
    @staticmethod
    def _secret() -> str:
        secret = settings.session_secret
        if not secret or len(secret) < MIN_SECRET_LENGTH:
            raise ConfigurationError(
                f"SESSION_SECRET must be set and at least {MIN_SECRET_LENGTH} characters"
            )
        return secret

    # ─── Session token ──────────────────────────
    @staticmethod
    def create_session_token() -> str:
        expire = datetime.now(timezone.utc) + timedelta(seconds=settings.session_max_age_seconds)
        payload = {"ok": True, "exp": expire}
        return jwt.encode(payload, AuthService._secret(), algorithm=SESSION_ALGORITHM)

    @staticmethod
    def verify_session_token(token: Optional[str]) -> Optional[dict]:
        """Decoded payload of a valid, unexpired session token; otherwise None."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, AuthService._secret(), algorithms=[SESSION_ALGORITHM])
        except JWTError:
            return None
        if payload.get("ok") is not True:
            return None
        return payload

    # ─── Access codes ───────────────────────────
    @staticmethod
    async def validate_access_code(db: AsyncSession, code: str) -> bool:
        result = await db.execute(select(AccessCode.id).where(AccessCode.code == code))
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def seed_access_codes(db: AsyncSession, codes: List[str]) -> int:
        """Insert configured access codes that are not stored yet."""
        if not codes:
            return 0
        result = await db.execute(select(AccessCode.code))
        existing = set(result.scalars().all())

        added = 0
        for code in dict.fromkeys(codes):
            if code not in existing:
                db.add(AccessCode(code=code))
                added += 1
        if added:
            await db.flush()
            logger.info(f"Seeded {added} access code(s)")
        return added
