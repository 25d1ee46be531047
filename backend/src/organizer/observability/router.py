"""Metrics and health endpoints."""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import Session

from ..database import get_db
from .health import (
    HealthStatus,
    check_database_health,
    check_redis_health,
    get_overall_health,
)

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    """Expose Prometheus metrics in the text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get(
    "/health",
    summary="Health check endpoint",
    description="Returns health status of the database and Redis",
)
def health_check(db: Session = Depends(get_db)):
    """Check health of the database and Redis.

    Returns 200 when healthy or degraded, 503 when the database is down.

    Args:
        db: Database session

    Returns:
        JSONResponse: overall status plus one entry per component
    """
    components = {
        "database": check_database_health(db),
        "redis": check_redis_health(),
    }
    overall_status = get_overall_health(components)

    response_data = {
        "status": overall_status.value,
        "components": {
            name: {
                "status": comp.status.value,
                "message": comp.message,
                "latency_ms": comp.latency_ms,
            }
            for name, comp in components.items()
        },
    }
    status_code = 503 if overall_status == HealthStatus.UNHEALTHY else 200
    return JSONResponse(content=response_data, status_code=status_code)
