# ============================================================================
# RESOURCE INTROSPECTION
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Process and runtime facts as check results
# PURPOSE: Memory, bytecode cache and runtime identity for /health
# CREATED: 19 OCT 2026
# ============================================================================
"""
Resource Introspection

Reads process-level facts without network or disk I/O and reports them as
check results. Bytecode cache statistics come from the reader's last
background scan. Nothing here raises: an unreadable fact becomes an
unhealthy result carrying the reason.

Memory policy:
    healthy = usage < threshold * limit        (threshold defaults to 0.9)
    usage_percentage = usage / limit * 100     (2 decimals)
An unbounded limit is sys.maxsize, so the check always passes.
"""

import logging
import sys
from dataclasses import dataclass
from typing import Optional

from core.errors import ResourceIntrospectionUnavailable
from core.runtime import RuntimeDescriptor
from health.core import CheckResult
from health.ports import BytecodeCacheReader, MemorySource
from infrastructure.process import bytes_to_mb

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceSnapshot:
    """Introspection results for one request."""
    memory: CheckResult
    bytecode_cache: CheckResult
    runtime_identity: str


def evaluate_memory(
    usage: int,
    peak: int,
    limit: Optional[int],
    threshold: float = 0.9,
    name: str = "memory",
) -> CheckResult:
    """
    Apply the memory policy to raw byte counts.

    Args:
        usage: Current usage in bytes
        peak: Peak usage in bytes
        limit: Configured limit in bytes, None for unbounded
        threshold: Fraction of the limit above which the check fails
    """
    effective_limit = sys.maxsize if limit is None or limit <= 0 else limit
    detail = {
        "memory_limit_mb": bytes_to_mb(effective_limit),
        "memory_usage_mb": bytes_to_mb(usage),
        "memory_peak_mb": bytes_to_mb(peak),
        "usage_percentage": round(usage / effective_limit * 100, 2),
    }
    return CheckResult(
        name=name,
        healthy=usage < effective_limit * threshold,
        detail=detail,
    )


class ResourceIntrospector:
    """
    Produces the introspection-only checks of the full health report.

    Args:
        runtime: Runtime descriptor resolved at startup
        memory_source: Current/peak memory readings
        bytecode_reader: Bytecode cache statistics
        memory_limit: Limit in bytes (sys.maxsize or None when unbounded)
        memory_threshold: Failing fraction of the limit
    """

    def __init__(
        self,
        runtime: RuntimeDescriptor,
        memory_source: MemorySource,
        bytecode_reader: BytecodeCacheReader,
        memory_limit: Optional[int] = None,
        memory_threshold: float = 0.9,
    ):
        self.runtime = runtime
        self.memory_source = memory_source
        self.bytecode_reader = bytecode_reader
        self.memory_limit = memory_limit
        self.memory_threshold = memory_threshold

    def memory_check(self) -> CheckResult:
        try:
            usage = self.memory_source.usage()
            peak = self.memory_source.peak()
        except Exception as e:
            logger.warning(f"Memory introspection failed: {e}")
            return CheckResult.failure("memory", f"Memory usage not available: {e}")
        return evaluate_memory(usage, peak, self.memory_limit, self.memory_threshold)

    def bytecode_cache_check(self) -> CheckResult:
        try:
            status = self.bytecode_reader.status()
            if status is None:
                raise ResourceIntrospectionUnavailable("Bytecode cache not available")
        except ResourceIntrospectionUnavailable as e:
            return CheckResult.failure("bytecode_cache", str(e))
        except Exception as e:
            logger.warning(f"Bytecode cache introspection failed: {e}")
            return CheckResult.failure("bytecode_cache", f"Bytecode cache not available: {e}")

        return CheckResult(
            name="bytecode_cache",
            healthy=True,
            detail={
                "enabled": status.enabled,
                "hit_rate": status.hit_rate,
                "cached_scripts": status.cached_scripts,
                "memory_usage": {
                    "used_memory": status.used_memory,
                    "free_memory": status.free_memory,
                    "wasted_memory": status.wasted_memory,
                },
            },
        )

    def snapshot(self) -> ResourceSnapshot:
        return ResourceSnapshot(
            memory=self.memory_check(),
            bytecode_cache=self.bytecode_cache_check(),
            runtime_identity=self.runtime.identity,
        )


__all__ = [
    "ResourceSnapshot",
    "ResourceIntrospector",
    "evaluate_memory",
]
