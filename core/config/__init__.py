# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the probe service.
"""

from core.config.defaults import (
    ServiceDefaults,
    ProbeDefaults,
    StressDefaults,
    ConnectionDefaults,
    MetricsDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "ServiceDefaults",
    "ProbeDefaults",
    "StressDefaults",
    "ConnectionDefaults",
    "MetricsDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
