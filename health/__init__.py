# ============================================================================
# HEALTH CHECK MODULE
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Probe aggregation
# PURPOSE: Kubernetes probes and comprehensive health reporting
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Module

Probe system for the service:
- /ping: Process alive (instant, for Kubernetes liveness probe)
- /ready: Critical dependencies reachable (readiness probe)
- /health: Dependencies plus memory and bytecode cache introspection

Architecture:
- DependencyCheck: Base class, converts every failure into a CheckResult
- ResourceIntrospector: Memory, bytecode cache, runtime identity
- ProbeAggregator: Concurrent execution with timeouts, binary verdict
- create_health_router: FastAPI endpoints

Usage:
    from health import ProbeAggregator, create_health_router

    aggregator = ProbeAggregator(checks, introspector, runtime)
    app.include_router(create_health_router(aggregator, service))
"""

from health.core import (
    HealthStatus,
    CheckResult,
    HealthReport,
    DependencyCheck,
    status_to_http_code,
)
from health.introspection import ResourceIntrospector, ResourceSnapshot, evaluate_memory
from health.aggregator import ProbeAggregator
from health.router import create_health_router

__all__ = [
    # Core types
    "HealthStatus",
    "CheckResult",
    "HealthReport",
    "DependencyCheck",
    "status_to_http_code",
    # Introspection
    "ResourceIntrospector",
    "ResourceSnapshot",
    "evaluate_memory",
    # Aggregation
    "ProbeAggregator",
    # Router
    "create_health_router",
]
