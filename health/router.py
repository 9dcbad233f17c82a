# ============================================================================
# HEALTH CHECK ROUTER
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: API - FastAPI probe endpoints
# PURPOSE: Kubernetes probes and health monitoring endpoints
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Router

FastAPI router providing three probe tiers:

Endpoints:
    GET /ping    - Liveness probe (is the process alive?)
                   Always 200. Kubernetes restarts the container when
                   this stops answering.

    GET /ready   - Readiness probe (can we take traffic?)
                   200 if every critical dependency passes, else 503.
                   Kubernetes removes the pod from the load balancer on 503.

    GET /health  - Full health status (dependencies + introspection)
                   200 if every check passes, else 503.

Response Codes:
    200 - Healthy
    503 - Unhealthy (service unavailable)
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.schemas import PingResponse
from core.config import ServiceDefaults
from core.logging import log_context
from health.aggregator import ProbeAggregator
from health.core import isoformat_z

logger = logging.getLogger(__name__)


def create_health_router(
    aggregator: ProbeAggregator,
    service: ServiceDefaults,
) -> APIRouter:
    """
    Create the probe router.

    Args:
        aggregator: Probe aggregator wired with the service's checks
        service: Service identity reported by /health

    Returns:
        APIRouter exposing /ping, /ready and /health
    """
    router = APIRouter(tags=["Health"])

    # ========================================================================
    # LIVENESS PROBE
    # ========================================================================

    @router.get("/ping", response_model=PingResponse)
    async def liveness_probe():
        """
        Kubernetes liveness probe.

        No external checks - just confirms the request path is responsive.
        """
        return aggregator.ping()

    # ========================================================================
    # READINESS PROBE
    # ========================================================================

    @router.get("/ready")
    async def readiness_probe():
        """
        Kubernetes readiness probe.

        Checks the critical dependencies: database, cache, storage.
        """
        with log_context(probe="ready"):
            report = await aggregator.ready()

        return JSONResponse(
            status_code=report.http_status_code,
            content={
                "status": "ready" if report.healthy else "not_ready",
                "checks": report.checks_dict(),
                "timestamp": isoformat_z(report.generated_at),
                "server_type": aggregator.server_type,
            },
        )

    # ========================================================================
    # FULL HEALTH CHECK
    # ========================================================================

    @router.get("/health")
    async def full_health_check():
        """
        Comprehensive health check.

        Runs the dependency checks plus the bytecode cache and memory
        introspection checks. For dashboards and debugging.
        """
        with log_context(probe="health"):
            report = await aggregator.health()

        return JSONResponse(
            status_code=report.http_status_code,
            content={
                "status": "healthy" if report.healthy else "unhealthy",
                "version": service.version,
                "environment": service.environment,
                "server_type": aggregator.server_type,
                "timestamp": isoformat_z(report.generated_at),
                "checks": report.checks_dict(),
                "response_time_ms": report.response_time_ms,
            },
        )

    return router


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "create_health_router",
]
