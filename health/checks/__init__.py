# ============================================================================
# HEALTH CHECK PLUGINS
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Health check implementations
# PURPOSE: Concrete checks wired into the probe aggregator
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Plugins

Dependency checks (readiness and full health):
- database: SELECT 1 through the query executor
- redis: cache PING
- storage: marker file round-trip

Introspection checks (full health only) are produced by
health.introspection.ResourceIntrospector.
"""

from health.checks.dependencies import DatabaseCheck, RedisCheck, StorageCheck

__all__ = [
    "DatabaseCheck",
    "RedisCheck",
    "StorageCheck",
]
