# ============================================================================
# STRESS MODULE
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Synthetic load generation
# PURPOSE: Bounded CPU/memory workload and its HTTP surface
# CREATED: 19 OCT 2026
# ============================================================================
"""
Stress module for the probe service.

Usage:
    from stress import StressWorkload, create_stress_router

    workload = StressWorkload(defaults.stress, memory_source)
    app.include_router(create_stress_router(workload, runtime))
"""

from stress.workload import (
    PerformanceOutcome,
    StressOutcome,
    StressWorkload,
    clamp,
    parse_int,
)
from stress.router import create_stress_router

__all__ = [
    "PerformanceOutcome",
    "StressOutcome",
    "StressWorkload",
    "clamp",
    "parse_int",
    "create_stress_router",
]
