# ============================================================================
# STRESS WORKLOAD
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Bounded synthetic CPU and memory load
# PURPOSE: Drive autoscaling tests with predictable resource pressure
# CREATED: 19 OCT 2026
# ============================================================================
"""
Stress Workload

Synthetic load used to exercise horizontal autoscaling:

run(duration, memory):
    1. Record start time and resident memory
    2. Hash a fresh 1 KiB random buffer with SHA-256 until the deadline
    3. Allocate `memory` blocks of 1 MiB of written bytes, held until return
    4. Report wall time, memory delta and peak memory

run_performance(iterations):
    Build `iterations` records each holding the SHA-256 of "test-<i>" and
    report throughput.

Inputs are clamped to configured bounds, never rejected. Both operations
block the calling thread; the HTTP layer runs them off the event loop.
"""

import hashlib
import logging
import os
import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from core.config import StressDefaults
from health.core import isoformat_z, utc_now
from health.ports import MemorySource
from infrastructure.process import bytes_to_mb

logger = logging.getLogger(__name__)


# ============================================================================
# OUTCOMES
# ============================================================================

@dataclass(frozen=True)
class StressOutcome:
    """Result of one stress run."""
    duration_requested_s: int
    duration_actual_s: float
    memory_requested_mb: int
    memory_used_mb: float
    peak_memory_mb: float
    timestamp: str
    cancelled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PerformanceOutcome:
    """Result of one performance benchmark."""
    iterations: int
    execution_time_ms: float
    memory_used_mb: float
    operations_per_second: float
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ============================================================================
# INPUT HELPERS
# ============================================================================

def parse_int(value: Any, default: int) -> int:
    """
    Lenient integer parsing for query parameters.

    None -> default; non-numeric -> 0; fractional -> truncated toward zero.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return 0


def clamp(value: int, upper: int, lower: int = 0) -> int:
    return max(lower, min(value, upper))


# ============================================================================
# WORKLOAD
# ============================================================================

class StressWorkload:
    """
    Bounded CPU and memory pressure generator.

    Args:
        defaults: Bounds and block sizes
        memory_source: Resident memory readings
    """

    def __init__(self, defaults: StressDefaults, memory_source: MemorySource):
        self.defaults = defaults
        self.memory_source = memory_source

    def clamp_duration(self, seconds: int) -> int:
        return clamp(int(seconds), self.defaults.max_duration_seconds)

    def clamp_memory(self, megabytes: int) -> int:
        return clamp(int(megabytes), self.defaults.max_memory_mb)

    def clamp_iterations(self, iterations: int) -> int:
        return clamp(int(iterations), self.defaults.max_iterations)

    def run(
        self,
        duration: int,
        memory: int,
        cancel: Optional[threading.Event] = None,
    ) -> StressOutcome:
        """
        Burn CPU for `duration` seconds, then hold `memory` MiB.

        Args:
            duration: Requested seconds (clamped)
            memory: Requested megabytes (clamped)
            cancel: Set by the caller to stop the CPU phase early
        """
        duration = self.clamp_duration(duration)
        memory = self.clamp_memory(memory)
        logger.info(f"Stress run starting: duration={duration}s memory={memory}MB")

        start = time.monotonic()
        start_memory = self.memory_source.usage()

        deadline = start + duration
        buffer_size = self.defaults.hash_buffer_bytes
        cancelled = False
        while time.monotonic() < deadline:
            if cancel is not None and cancel.is_set():
                cancelled = True
                break
            hashlib.sha256(os.urandom(buffer_size)).digest()

        blocks = []
        if not cancelled:
            block_size = self.defaults.block_size_bytes
            for _ in range(memory):
                blocks.append(b"x" * block_size)

        end = time.monotonic()
        end_memory = self.memory_source.usage()
        peak_memory = self.memory_source.peak()

        outcome = StressOutcome(
            duration_requested_s=duration,
            duration_actual_s=round(end - start, 2),
            memory_requested_mb=memory,
            memory_used_mb=bytes_to_mb(end_memory - start_memory),
            peak_memory_mb=bytes_to_mb(peak_memory),
            timestamp=isoformat_z(utc_now()),
            cancelled=cancelled,
        )
        del blocks

        if cancelled:
            logger.warning(f"Stress run cancelled after {outcome.duration_actual_s}s")
        else:
            logger.info(
                f"Stress run completed: {outcome.duration_actual_s}s, "
                f"{outcome.memory_used_mb}MB used, peak {outcome.peak_memory_mb}MB"
            )
        return outcome

    def run_performance(self, iterations: int) -> PerformanceOutcome:
        """Hash `iterations` small strings and report throughput."""
        iterations = self.clamp_iterations(iterations)

        start = time.perf_counter()
        start_memory = self.memory_source.usage()

        results = []
        for i in range(iterations):
            results.append({
                "iteration": i,
                "hash": hashlib.sha256(f"test-{i}".encode()).hexdigest(),
                "timestamp": time.time(),
            })

        elapsed = time.perf_counter() - start
        end_memory = self.memory_source.usage()

        return PerformanceOutcome(
            iterations=iterations,
            execution_time_ms=round(elapsed * 1000, 2),
            memory_used_mb=bytes_to_mb(end_memory - start_memory),
            operations_per_second=round(iterations / elapsed, 2) if elapsed > 0 else 0.0,
            timestamp=isoformat_z(utc_now()),
        )


__all__ = [
    "StressOutcome",
    "PerformanceOutcome",
    "StressWorkload",
    "parse_int",
    "clamp",
]
