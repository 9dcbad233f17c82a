# ============================================================================
# PROCESS MEMORY SOURCE
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Infrastructure - Process memory readings
# PURPOSE: Current and peak resident memory of this process
# CREATED: 19 OCT 2026
# ============================================================================
"""
Process Memory Source

Current usage is the resident set size reported by psutil. Peak usage is
the high-water mark since process start (peak working set on Windows,
ru_maxrss elsewhere).
"""

import sys
from typing import Optional

import psutil

_MB = 1024 * 1024


class ProcessMemorySource:
    """Reads memory figures for a process (the current one by default)."""

    def __init__(self, process: Optional[psutil.Process] = None):
        self._process = process or psutil.Process()

    def usage(self) -> int:
        """Resident set size in bytes."""
        return self._process.memory_info().rss

    def peak(self) -> int:
        """Peak resident set size in bytes since process start."""
        info = self._process.memory_info()
        peak_wset = getattr(info, "peak_wset", None)
        if peak_wset is not None:
            return peak_wset

        import resource

        max_rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        # ru_maxrss is bytes on macOS, kilobytes on Linux
        if sys.platform == "darwin":
            return max(max_rss, info.rss)
        return max(max_rss * 1024, info.rss)


def bytes_to_mb(value: float) -> float:
    return round(value / _MB, 2)


def parse_memory_limit(limit: str) -> int:
    """
    Convert a memory limit string to bytes.

    Accepts "-1" (unbounded, returned as sys.maxsize), a raw byte count, or
    a number with a k/m/g suffix (case-insensitive).

    Raises:
        ValueError: If the string is not a valid limit
    """
    text = str(limit).strip()
    if text == "-1":
        return sys.maxsize

    unit = text[-1:].lower()
    multipliers = {"k": 1024, "m": 1024 ** 2, "g": 1024 ** 3}
    if unit in multipliers:
        return int(text[:-1]) * multipliers[unit]
    return int(text)


__all__ = [
    "ProcessMemorySource",
    "bytes_to_mb",
    "parse_memory_limit",
]
