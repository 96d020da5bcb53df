"""Health checks for the trade stores and the worker process.

  liveness_check()   -> the process is up
  readiness_check()  -> every store answered its health_check()
  ensure_ready()     -> readiness_check(), raising WorkerNotReadyError when
                        any store is down; run_worker() calls it before
                        connecting to Temporal
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol, final, runtime_checkable

from tradebook.core.errors import PersistenceError
from tradebook.core.result import Err, Ok
from tradebook.logging_config import get_logger

log = get_logger("infra.health")


@final
@dataclass(frozen=True, slots=True)
class HealthStatus:
    healthy: bool
    component: str
    message: str
    checked_at: datetime
    latency_ms: float


@final
@dataclass(frozen=True, slots=True)
class SystemHealth:
    overall_healthy: bool
    checks: tuple[HealthStatus, ...]
    checked_at: datetime

    @property
    def failed(self) -> tuple[HealthStatus, ...]:
        return tuple(c for c in self.checks if not c.healthy)


@runtime_checkable
class HealthCheckable(Protocol):
    def health_check(self) -> Ok[HealthStatus] | Err[PersistenceError]: ...


class WorkerNotReadyError(RuntimeError):
    """Raised by ensure_ready() with the failed SystemHealth attached."""

    def __init__(self, health: SystemHealth) -> None:
        names = ", ".join(c.component for c in health.failed)
        super().__init__(f"Dependencies not ready: {names}")
        self.health = health


def liveness_check() -> HealthStatus:
    return HealthStatus(
        healthy=True, component="process", message="alive",
        checked_at=datetime.now(tz=UTC), latency_ms=0.0,
    )


def readiness_check(dependencies: tuple[HealthCheckable, ...]) -> SystemHealth:
    """Run every dependency's check; one failure makes the system unready."""
    checks: list[HealthStatus] = []
    for dep in dependencies:
        match dep.health_check():
            case Ok(status):
                checks.append(status)
            case Err(error):
                log.warning(
                    "health check failed",
                    extra={"component": error.source, "error_code": error.code},
                )
                checks.append(HealthStatus(
                    healthy=False, component=error.source,
                    message=f"Health check failed: {error.message}",
                    checked_at=datetime.now(tz=UTC), latency_ms=0.0,
                ))
    return SystemHealth(
        overall_healthy=all(c.healthy for c in checks),
        checks=tuple(checks),
        checked_at=datetime.now(tz=UTC),
    )


def ensure_ready(dependencies: tuple[HealthCheckable, ...]) -> SystemHealth:
    health = readiness_check(dependencies)
    if not health.overall_healthy:
        raise WorkerNotReadyError(health)
    log.info(
        "dependencies ready",
        extra={"components": [c.component for c in health.checks]},
    )
    return health
