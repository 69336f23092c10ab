"""Resolve Nexus Mods profile URLs to a display name and avatar."""

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse

import httpx

from app.core.config import get_settings

logger = logging.getLogger(__name__)

_NEXUS_HOST_RE = re.compile(r"^(www\.)?nexusmods\.com$", re.IGNORECASE)
_PROFILE_PATH_RE = re.compile(r"^/profile/([^/?#]+)", re.IGNORECASE)

USER_BY_NAME_QUERY = """
query userByName($name: String!) {
  userByName(name: $name) {
    name
    avatar
    memberId
  }
}
"""


@dataclass
class ModAuthor:
    url: str
    name: str
    avatar_url: str


def parse_username_from_profile_url(url: Optional[str]) -> Optional[str]:
    """e.g. https://www.nexusmods.com/profile/toebeann -> "toebeann"."""
    if not url or not isinstance(url, str):
        return None
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not _NEXUS_HOST_RE.match(parsed.hostname or ""):
        return None
    match = _PROFILE_PATH_RE.match(parsed.path)
    return unquote(match.group(1)) if match else None


class NexusService:
    """Client for the Nexus Mods GraphQL API (userByName only)."""

    def __init__(self, graphql_url: Optional[str] = None, timeout: float = 10.0):
        self.graphql_url = graphql_url or get_settings().nexus_graphql_url
        self.timeout = timeout

    async def fetch_user(self, username: str) -> Optional[dict]:
        """The userByName record, or None when missing or the API fails."""
        if not username or not username.strip():
            return None
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.graphql_url,
                    json={"query": USER_BY_NAME_QUERY, "variables": {"name": username.strip()}},
                )
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Nexus user lookup failed for '{username}': {e}")
            return None

        if payload.get("errors") or not (payload.get("data") or {}).get("userByName"):
            return None
        return payload["data"]["userByName"]

    async def resolve_mod_author(self, profile_url: str) -> Optional[ModAuthor]:
        username = parse_username_from_profile_url(profile_url)
        if not username:
            return None
        user = await self.fetch_user(username)
        if not user:
            return None

        member_id = user.get("memberId") or 0
        return ModAuthor(
            url=profile_url.strip(),
            name=user.get("name") or username,
            avatar_url=user.get("avatar") or f"https://avatars.nexusmods.com/{member_id}/100",
        )
