"""
Simple In-Memory Rate Limiter for the access-code endpoint.

Uses a sliding window approach to limit attempts per client IP.
For production with multiple instances, consider Redis-based rate limiting.
"""

import time
import logging
from collections import defaultdict
from typing import Dict, List, Tuple
from dataclasses import dataclass
from threading import Lock

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""
    max_requests: int  # Maximum requests allowed
    window_seconds: int  # Time window in seconds


class RateLimiter:
    """
    Thread-safe in-memory rate limiter using sliding window.

    For production with multiple backend instances, replace with Redis.
    """

    def __init__(self):
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._lock = Lock()

        self.configs = {
            # Access code guessing: 10 attempts per 15 minutes per IP
            "access_code_ip": RateLimitConfig(max_requests=10, window_seconds=900),
        }

    def _cleanup_old_requests(self, key: str, window_seconds: int) -> None:
        """Remove timestamps outside the current window."""
        cutoff = time.time() - window_seconds
        self._requests[key] = [ts for ts in self._requests[key] if ts > cutoff]

    def is_allowed(self, limit_type: str, identifier: str) -> Tuple[bool, int]:
        """
        Check if a request is allowed under rate limiting.

        Args:
            limit_type: Type of rate limit (e.g., "access_code_ip")
            identifier: Unique identifier (IP address)

        Returns:
            Tuple of (is_allowed: bool, retry_after_seconds: int)
        """
        if limit_type not in self.configs:
            logger.warning(f"Unknown rate limit type: {limit_type}")
            return True, 0

        config = self.configs[limit_type]
        key = f"{limit_type}:{identifier}"

        with self._lock:
            now = time.time()
            self._cleanup_old_requests(key, config.window_seconds)

            if len(self._requests[key]) >= config.max_requests:
                oldest_request = min(self._requests[key])
                retry_after = int(oldest_request + config.window_seconds - now) + 1
                return False, max(retry_after, 1)

            self._requests[key].append(now)
            return True, 0

    def reset(self, limit_type: str, identifier: str) -> None:
        """Reset rate limit for a specific key (e.g., after a successful login)."""
        key = f"{limit_type}:{identifier}"
        with self._lock:
            self._requests.pop(key, None)


# Global rate limiter instance
rate_limiter = RateLimiter()


def get_client_ip(request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Take the first IP (client IP)
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"
