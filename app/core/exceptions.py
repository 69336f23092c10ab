"""
Custom exceptions for the insights API.

Every exception carries the HTTP status it maps to, so routes can let them
propagate and the handler in main.py renders a uniform error payload.
"""

from typing import Optional


class InsightsError(Exception):
    """Base exception for all insights API errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        raw: Optional[str] = None,
    ):
        self.message = message
        self.details = details
        self.raw = raw
        super().__init__(message)

    def to_payload(self) -> dict:
        payload = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        if self.raw is not None:
            payload["raw"] = self.raw
        return payload


# =============================================================================
# Configuration / input
# =============================================================================

class ConfigurationError(InsightsError):
    """Raised when a required setting or seed row is missing."""
    status_code = 500


class InvalidInputError(InsightsError):
    """Raised when the request body is missing or malformed."""
    status_code = 400


class AuthenticationError(InsightsError):
    """Raised when a session or access code is missing or invalid."""
    status_code = 401


class NotFoundError(InsightsError):
    """Raised when a requested row does not exist."""
    status_code = 404


class ConflictError(InsightsError):
    """Raised when a unique constraint would be violated by a user action."""
    status_code = 409


class RateLimitedError(InsightsError):
    """Raised when a client exceeds a rate limit."""
    status_code = 429

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(f"Too many requests. Please try again in {retry_after} seconds.")


# =============================================================================
# Upstream collaborators
# =============================================================================

class StoreReadError(InsightsError):
    """Raised when the database cannot be read."""
    status_code = 500


class StoreWriteError(InsightsError):
    """Raised when the database refuses writes (locked, unavailable)."""
    status_code = 500


class LLMServiceError(InsightsError):
    """Raised when the LLM provider call itself fails (network, quota)."""
    status_code = 500


class LLMResponseError(InsightsError):
    """Raised when the LLM answered but the answer is unusable."""
    status_code = 500
