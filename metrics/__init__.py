# ============================================================================
# METRICS MODULE
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Prometheus metrics exposition
# PURPOSE: Registry, producers, request counting and scrape endpoint
# CREATED: 19 OCT 2026
# ============================================================================
"""
Metrics module for the probe service.

Usage:
    from metrics import MetricsRegistry, MetricsCollector, create_metrics_router

    registry = MetricsRegistry(namespace="app")
    collector = MetricsCollector(registry, runtime, memory_source=memory)
    app.include_router(create_metrics_router(registry, collector))
"""

from metrics.registry import (
    CONTENT_TYPE_LATEST,
    Metric,
    MetricKind,
    MetricSample,
    MetricsRegistry,
    render_text,
)
from metrics.collectors import MetricsCollector, register_request_counter
from metrics.middleware import RequestMetricsMiddleware
from metrics.router import create_metrics_router

__all__ = [
    "CONTENT_TYPE_LATEST",
    "Metric",
    "MetricKind",
    "MetricSample",
    "MetricsRegistry",
    "render_text",
    "MetricsCollector",
    "register_request_counter",
    "RequestMetricsMiddleware",
    "create_metrics_router",
]
