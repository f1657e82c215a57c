"""
Liveness and readiness checks.

- `ApplicationLivenessCheck`: the process is up and serving Python code.
  Always reports UP.
- `DatabaseReadinessCheck`: a database connection can be obtained. Reports
  DOWN, with the exception message, iff obtaining the connection raises.

Checks return `HealthCheckResponse` values; `core.views` renders them for the
`/health/` endpoints used by orchestrator health checks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from django.db import connections, DEFAULT_DB_ALIAS

logger = logging.getLogger("peahdb.health")

UP = "UP"
DOWN = "DOWN"


@dataclass(frozen=True)
class HealthCheckResponse:
    name: str
    status: str
    message: str

    @property
    def is_up(self) -> bool:
        return self.status == UP

    @classmethod
    def up(cls, name: str, message: str) -> "HealthCheckResponse":
        return cls(name=name, status=UP, message=message)

    @classmethod
    def down(cls, name: str, message: str) -> "HealthCheckResponse":
        return cls(name=name, status=DOWN, message=message)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "status": self.status, "data": {"message": self.message}}


class ApplicationLivenessCheck:
    name = "application"

    def call(self) -> HealthCheckResponse:
        return HealthCheckResponse.up(self.name, "Simple health check")


class DatabaseReadinessCheck:
    name = "database"

    def __init__(self, alias: str = DEFAULT_DB_ALIAS) -> None:
        self.alias = alias

    def call(self) -> HealthCheckResponse:
        try:
            connections[self.alias].ensure_connection()
        except Exception as exc:
            logger.warning("Database readiness check failed: %s", exc)
            return HealthCheckResponse.down(self.name, f"Database connection failed: {exc}")
        return HealthCheckResponse.up(self.name, "Database connection ready")


LIVENESS_CHECKS = (ApplicationLivenessCheck(),)
READINESS_CHECKS = (DatabaseReadinessCheck(),)


def run_checks(checks: Iterable) -> tuple[str, List[HealthCheckResponse]]:
    """Run every check; the overall status is UP only if all checks are UP."""
    results = [check.call() for check in checks]
    status = UP if all(r.is_up for r in results) else DOWN
    return status, results
