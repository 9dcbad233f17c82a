# ============================================================================
# PROBE AGGREGATOR
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Liveness, readiness and full health composition
# PURPOSE: Run checks concurrently and combine them into one verdict
# CREATED: 19 OCT 2026
# ============================================================================
"""
Probe Aggregator

Composes dependency checks and resource introspection into the three probe
tiers:

- ping():   constant time, no dependency calls (liveness)
- ready():  critical dependency checks only (readiness)
- health(): dependency checks plus introspection checks (monitoring)

Execution Strategy:
1. Start every applicable dependency check as its own task
2. Each check is bounded by its own timeout (DependencyCheck.run)
3. The whole set is bounded by an overall deadline; checks still pending
   at the deadline are cancelled and reported unhealthy
4. Results keep the input order
5. Overall status is the logical AND of the healthy flags
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Sequence

from core.runtime import RuntimeDescriptor
from health.core import (
    CheckResult,
    DependencyCheck,
    HealthReport,
    isoformat_z,
    utc_now,
)
from health.introspection import ResourceIntrospector

logger = logging.getLogger(__name__)


class ProbeAggregator:
    """
    Runs probe tiers over a fixed set of checks.

    Args:
        checks: Dependency checks, in report order
        introspector: Source of the introspection-only checks
        runtime: Runtime descriptor (server_type reporting)
        ready_timeout: Overall deadline for ready()
        health_timeout: Overall deadline for the dependency part of health()
    """

    def __init__(
        self,
        checks: Sequence[DependencyCheck],
        introspector: ResourceIntrospector,
        runtime: RuntimeDescriptor,
        ready_timeout: float = 5.0,
        health_timeout: float = 10.0,
    ):
        self.checks = list(checks)
        self.introspector = introspector
        self.runtime = runtime
        self.ready_timeout = ready_timeout
        self.health_timeout = health_timeout

    @property
    def server_type(self) -> str:
        return self.runtime.identity

    @property
    def critical_checks(self) -> List[DependencyCheck]:
        return [check for check in self.checks if check.critical]

    # ------------------------------------------------------------------------
    # PROBE TIERS
    # ------------------------------------------------------------------------

    def ping(self) -> Dict[str, Any]:
        """Liveness payload. Touches no dependency."""
        return {
            "status": "pong",
            "timestamp": isoformat_z(utc_now()),
            "server_type": self.server_type,
        }

    async def ready(self) -> HealthReport:
        """Readiness report over the critical dependencies."""
        start = time.perf_counter()
        results = await self.run_checks(self.critical_checks, self.ready_timeout)
        report = HealthReport.from_results(
            results,
            response_time_ms=(time.perf_counter() - start) * 1000,
        )
        if not report.healthy:
            failed = [r.name for r in report.checks if not r.healthy]
            logger.warning(f"Readiness failed: {', '.join(failed)}")
        return report

    async def health(self) -> HealthReport:
        """Full report: every dependency check plus introspection."""
        start = time.perf_counter()
        results = await self.run_checks(self.checks, self.health_timeout)

        snapshot = self.introspector.snapshot()
        results.append(snapshot.bytecode_cache)
        results.append(snapshot.memory)

        report = HealthReport.from_results(
            results,
            response_time_ms=(time.perf_counter() - start) * 1000,
        )
        if not report.healthy:
            failed = [r.name for r in report.checks if not r.healthy]
            logger.warning(f"Health check unhealthy: {', '.join(failed)}")
        return report

    # ------------------------------------------------------------------------
    # EXECUTION
    # ------------------------------------------------------------------------

    async def run_checks(
        self,
        checks: Sequence[DependencyCheck],
        overall_timeout: float,
    ) -> List[CheckResult]:
        """
        Run checks concurrently under an overall deadline.

        Returns:
            One result per check, in input order
        """
        if not checks:
            return []

        tasks = [asyncio.create_task(check.run()) for check in checks]

        try:
            done, pending = await asyncio.wait(tasks, timeout=overall_timeout)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

        for task in pending:
            task.cancel()
        if pending:
            logger.warning(
                f"Probe deadline ({overall_timeout}s) exceeded, "
                f"{len(pending)} check(s) cancelled"
            )
            await asyncio.gather(*pending, return_exceptions=True)

        results: List[CheckResult] = []
        for check, task in zip(checks, tasks):
            if task in done and not task.cancelled() and task.exception() is None:
                results.append(task.result())
            elif task in done and not task.cancelled():
                # run() converts failures itself; this only covers a broken check class
                error = task.exception()
                logger.error(f"Check {check.name} raised past its boundary: {error}")
                results.append(CheckResult.failure(check.name, str(error), **check.context()))
            else:
                results.append(
                    CheckResult.failure(
                        check.name,
                        f"Timeout after {overall_timeout}s",
                        **check.context(),
                    )
                )
        return results


__all__ = [
    "ProbeAggregator",
]
