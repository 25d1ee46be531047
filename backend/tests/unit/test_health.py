"""Unit tests for health checks"""

from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from organizer.observability.health import (
    ComponentHealth,
    HealthStatus,
    check_database_health,
    check_redis_health,
    get_overall_health,
)


class TestComponentChecks:

    def test_database_healthy(self, db_session: Session):
        health = check_database_health(db_session)

        assert health.status == HealthStatus.HEALTHY
        assert health.latency_ms is not None

    def test_database_unhealthy(self):
        db = MagicMock()
        db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))

        assert check_database_health(db).status == HealthStatus.UNHEALTHY

    def test_redis_not_configured_is_degraded(self):
        health = check_redis_health()

        assert health.status == HealthStatus.DEGRADED
        assert health.message == "Redis not configured"


class TestOverallHealth:

    def test_worst_status_wins(self):
        healthy = ComponentHealth(status=HealthStatus.HEALTHY)
        degraded = ComponentHealth(status=HealthStatus.DEGRADED)
        unhealthy = ComponentHealth(status=HealthStatus.UNHEALTHY)

        assert get_overall_health({"a": healthy}) == HealthStatus.HEALTHY
        assert get_overall_health({"a": healthy, "b": degraded}) == HealthStatus.DEGRADED
        assert get_overall_health({"a": degraded, "b": unhealthy}) == HealthStatus.UNHEALTHY
