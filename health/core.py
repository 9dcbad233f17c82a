# ============================================================================
# HEALTH CHECK CORE TYPES
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Check results, reports and the dependency check base class
# PURPOSE: Typed outcomes for probes and the binary pass/fail policy
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Core Types

Defines the check interface and result types for the probes.

Status policy (binary):
- healthy: every check passed
- unhealthy: at least one check failed

DEGRADED exists for API completeness but the aggregation never produces it;
there is no partial credit and no weighting between checks.

Transport mapping:
- healthy -> 200
- anything else -> 503
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_z(moment: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class HealthStatus(str, Enum):
    """Overall report status values."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @classmethod
    def from_results(cls, results: Iterable["CheckResult"]) -> "HealthStatus":
        """Logical AND of every healthy flag (empty set is healthy)."""
        if all(result.healthy for result in results):
            return cls.HEALTHY
        return cls.UNHEALTHY

    @property
    def http_status_code(self) -> int:
        return status_to_http_code(self)


def status_to_http_code(status: HealthStatus) -> int:
    """Map health status to HTTP status code."""
    if status == HealthStatus.HEALTHY:
        return 200
    return 503


@dataclass(frozen=True)
class CheckResult:
    """
    Result from a single check.

    latency_ms is set only when a collaborator operation was timed. detail
    holds context fields (connection name, host, path, statistics) and is
    read-only once the result exists.
    """
    name: str
    healthy: bool
    latency_ms: Optional[float] = None
    detail: Mapping[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "detail", MappingProxyType(dict(self.detail)))

    @classmethod
    def success(
        cls,
        name: str,
        latency_ms: Optional[float] = None,
        **detail,
    ) -> "CheckResult":
        """Create healthy result."""
        return cls(name=name, healthy=True, latency_ms=latency_ms, detail=detail)

    @classmethod
    def failure(cls, name: str, error: Optional[str], **detail) -> "CheckResult":
        """Create unhealthy result."""
        return cls(name=name, healthy=False, detail=detail, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result: Dict[str, Any] = {"healthy": self.healthy}
        if self.latency_ms is not None:
            result["response_time_ms"] = round(self.latency_ms, 2)
        if self.error is not None:
            result["error"] = self.error
        for key, value in self.detail.items():
            result.setdefault(key, value)
        return result


@dataclass(frozen=True)
class HealthReport:
    """Aggregated result from a set of checks."""
    overall_status: HealthStatus
    checks: Tuple[CheckResult, ...]
    generated_at: datetime = field(default_factory=utc_now)
    response_time_ms: float = 0.0

    @classmethod
    def from_results(
        cls,
        results: Iterable[CheckResult],
        response_time_ms: float = 0.0,
    ) -> "HealthReport":
        checks = tuple(results)
        return cls(
            overall_status=HealthStatus.from_results(checks),
            checks=checks,
            response_time_ms=round(response_time_ms, 2),
        )

    @property
    def healthy(self) -> bool:
        return self.overall_status == HealthStatus.HEALTHY

    @property
    def http_status_code(self) -> int:
        return self.overall_status.http_status_code

    def checks_dict(self) -> Dict[str, Dict[str, Any]]:
        """Checks keyed by name, in evaluation order."""
        return {result.name: result.to_dict() for result in self.checks}


class DependencyCheck(ABC):
    """
    Base class for checks against one external collaborator.

    Subclasses implement probe() with exactly one representative operation
    and may override context() with fields known before the call. run() is
    the only entry point callers use: it times the operation, bounds it with
    a timeout and converts every failure into an unhealthy CheckResult.
    Nothing raised by probe() escapes run().

    Attributes:
        name: Key of the check in reports
        timeout_seconds: Default bound for a single run
        critical: If True, the check gates readiness

    Example:
        class QueueCheck(DependencyCheck):
            name = "queue"

            async def probe(self):
                await self.client.ping()
    """

    name: str = "unnamed"
    timeout_seconds: float = 2.0
    critical: bool = True

    def context(self) -> Dict[str, Any]:
        """Detail fields reported whether or not the operation succeeds."""
        return {}

    @abstractmethod
    async def probe(self) -> Optional[Dict[str, Any]]:
        """
        Perform the check operation.

        Returns:
            Optional extra detail for a healthy result

        Raises:
            Any exception to signal failure
        """

    async def run(self, timeout: Optional[float] = None) -> CheckResult:
        """Run probe() once, bounded by timeout, and return its outcome."""
        timeout = self.timeout_seconds if timeout is None else timeout
        context = self.context()
        start = time.perf_counter()

        try:
            extra = await asyncio.wait_for(self.probe(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Check {self.name} timed out after {timeout}s")
            return CheckResult.failure(self.name, f"Timeout after {timeout}s", **context)
        except Exception as e:
            logger.warning(f"Check {self.name} failed: {e}")
            return CheckResult.failure(self.name, str(e) or type(e).__name__, **context)

        latency_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"Check {self.name}: healthy ({latency_ms:.1f}ms)")
        return CheckResult.success(
            self.name,
            latency_ms=round(latency_ms, 2),
            **{**context, **(extra or {})},
        )


__all__ = [
    "HealthStatus",
    "CheckResult",
    "HealthReport",
    "DependencyCheck",
    "status_to_http_code",
    "utc_now",
    "isoformat_z",
]
