# ============================================================================
# VERSION - PROBE SERVICE
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# ============================================================================
"""
Version information for the Probe Service.

This is the single source of truth for the application version.
Updated manually for each release.
"""
# Version format: major.minor.patch
__version__ = "1.0.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-19"

SERVICE_NAME = "probe-service"
EPOCH = 1
CODENAME = "Probes & Metrics"
