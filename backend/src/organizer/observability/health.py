"""Health checks for the ORGanizer backend.

The database is required; Redis only backs rate limiting and the Celery
broker, so losing it degrades the service rather than taking it down.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

import redis
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from .logging_config import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def check_database_health(db: Session) -> ComponentHealth:
    """Run SELECT 1 against the configured database.

    Args:
        db: Database session

    Returns:
        ComponentHealth: HEALTHY with latency, or UNHEALTHY with the error
    """
    try:
        start = time.perf_counter()
        db.execute(text("SELECT 1"))
        latency_ms = (time.perf_counter() - start) * 1000
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}", exc_info=True)
        return ComponentHealth(status=HealthStatus.UNHEALTHY, message="Database unavailable")

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Database connection OK",
        latency_ms=round(latency_ms, 2),
    )


def check_redis_health() -> ComponentHealth:
    """Ping Redis. An unconfigured or unreachable Redis reports DEGRADED."""
    redis_url = get_settings().REDIS_URL
    if not redis_url:
        return ComponentHealth(status=HealthStatus.DEGRADED, message="Redis not configured")

    try:
        client = redis.from_url(redis_url, socket_connect_timeout=1)
        start = time.perf_counter()
        client.ping()
        latency_ms = (time.perf_counter() - start) * 1000
    except redis.RedisError as e:
        logger.warning(f"Redis health check failed: {e}")
        return ComponentHealth(status=HealthStatus.DEGRADED, message="Redis unavailable")

    return ComponentHealth(
        status=HealthStatus.HEALTHY,
        message="Redis connection OK",
        latency_ms=round(latency_ms, 2),
    )


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Worst component status wins."""
    statuses = [c.status for c in components.values()]
    if HealthStatus.UNHEALTHY in statuses:
        return HealthStatus.UNHEALTHY
    if HealthStatus.DEGRADED in statuses:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY
