"""Rate limiting for login endpoints.

Implements sliding window rate limiting so the login-link and one-time-code
endpoints cannot be used to flood inboxes or guess codes. Uses Redis for
distributed rate limiting across multiple API instances.
"""

import hashlib
import time
from typing import Optional

from fastapi import HTTPException, Request, status
from redis import Redis
from redis.exceptions import RedisError

from ..config import get_settings
from ..observability.logging_config import get_logger

logger = get_logger(__name__)


def get_redis_client() -> Optional[Redis]:
    """Get Redis client for rate limiting.

    Returns None if REDIS_URL is empty or Redis is not reachable, allowing
    graceful degradation.
    """
    redis_url = get_settings().REDIS_URL
    if not redis_url:
        return None

    try:
        client = Redis.from_url(redis_url, decode_responses=True, socket_connect_timeout=1)
        client.ping()
        return client
    except RedisError as e:
        logger.warning(f"Redis unavailable, rate limiting disabled: {e}")
        return None


def _get_client_identifier(request: Request) -> str:
    """Extract a unique identifier for the client.

    Uses a combination of IP address and User-Agent to create a fingerprint.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    elif request.client:
        ip = request.client.host
    else:
        ip = "unknown"

    user_agent = request.headers.get("User-Agent", "")

    # Create hash for privacy
    fingerprint = f"{ip}:{user_agent}"
    return hashlib.sha256(fingerprint.encode()).hexdigest()[:32]


def _get_rate_limit_key(identifier: str, endpoint: str) -> str:
    """Generate Redis key for rate limiting."""
    return f"rate_limit:{endpoint}:{identifier}"


def _get_email_key(email: str, endpoint: str) -> str:
    """Generate Redis key for per-address limits."""
    digest = hashlib.sha256(email.lower().encode()).hexdigest()[:32]
    return f"rate_limit:{endpoint}:email:{digest}"


class RateLimiter:
    """Rate limiter using Redis sliding window algorithm."""

    def __init__(self, redis: Optional[Redis] = None):
        self.redis = redis

    def _count(self, key: str, window_seconds: int) -> int:
        window_start = int(time.time()) - window_seconds
        self.redis.zremrangebyscore(key, 0, window_start)
        return self.redis.zcard(key)

    def _record(self, key: str, window_seconds: int) -> None:
        now = time.time()
        self.redis.zadd(key, {f"{now:.6f}": now})
        self.redis.expire(key, window_seconds)

    def hit(self, key: str) -> bool:
        """Record an attempt against key.

        Returns:
            True if the attempt exceeds the limit (and was not recorded)
        """
        if not self.redis:
            # Graceful degradation: no rate limiting if Redis unavailable
            return False

        settings = get_settings()
        try:
            if self._count(key, settings.RATE_LIMIT_WINDOW) >= settings.RATE_LIMIT_MAX_ATTEMPTS:
                return True
            self._record(key, settings.RATE_LIMIT_WINDOW)
        except RedisError as e:
            logger.warning(f"Rate limit check skipped, Redis error: {e}")
        return False

    def hit_client(self, request: Request, endpoint: str) -> bool:
        return self.hit(_get_rate_limit_key(_get_client_identifier(request), endpoint))

    def hit_email(self, email: str, endpoint: str) -> bool:
        return self.hit(_get_email_key(email, endpoint))


# Global rate limiter instance
rate_limiter = RateLimiter(get_redis_client())


def _too_many_requests(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=detail,
        headers={"Retry-After": str(get_settings().RATE_LIMIT_WINDOW)},
    )


def check_rate_limit(request: Request) -> None:
    """Per-client limit for login endpoints.

    Use as a dependency in FastAPI endpoints:

        @router.post("/login-link")
        async def request_login_link(
            request: Request,
            _: None = Depends(check_rate_limit)
        ):
            ...
    """
    if rate_limiter.hit_client(request, request.url.path):
        raise _too_many_requests("Too many login attempts. Please wait before trying again.")


def check_email_rate_limit(email: str, endpoint: str) -> None:
    """Per-address limit, applied once the request body is parsed."""
    if rate_limiter.hit_email(email, endpoint):
        raise _too_many_requests("Too many login attempts for this email. Please wait before trying again.")
