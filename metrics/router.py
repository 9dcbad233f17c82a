# ============================================================================
# METRICS ROUTER
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: API - Prometheus scrape endpoint
# PURPOSE: Collect and render the registry on GET /metrics
# CREATED: 19 OCT 2026
# ============================================================================
"""
Metrics Router

Endpoints:
    GET /metrics - Prometheus text exposition (version 0.0.4)
"""

import logging

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from metrics.collectors import MetricsCollector
from metrics.registry import MetricsRegistry

logger = logging.getLogger(__name__)

MEDIA_TYPE = "text/plain; version=0.0.4"


def create_metrics_router(
    registry: MetricsRegistry,
    collector: MetricsCollector,
) -> APIRouter:
    """
    Create the scrape router.

    Args:
        registry: Registry rendered by the endpoint
        collector: Producers run before each render
    """
    router = APIRouter(tags=["Metrics"])

    @router.get("/metrics", response_class=PlainTextResponse)
    async def scrape():
        """Refresh the producer gauges and render every metric."""
        await collector.collect()
        return PlainTextResponse(registry.render(), media_type=MEDIA_TYPE)

    return router


__all__ = [
    "create_metrics_router",
    "MEDIA_TYPE",
]
