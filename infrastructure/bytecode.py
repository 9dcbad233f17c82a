# ============================================================================
# BYTECODE CACHE STATUS
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Infrastructure - CPython bytecode cache reader
# PURPOSE: Hit/miss and size statistics of the __pycache__ of loaded modules
# CREATED: 19 OCT 2026
# ============================================================================
"""
Bytecode Cache Status

CPython caches compiled modules as .pyc files under __pycache__. For every
loaded source module this reader checks whether its cached bytecode exists
(hit) or not (miss) and sums the cache file sizes.

- used_memory: bytes of up-to-date .pyc files
- wasted_memory: bytes of .pyc files older than their source
- free_memory: always 0 (the cache has no fixed capacity)

When bytecode writing is disabled (PYTHONDONTWRITEBYTECODE) the cache is
reported as not available.

Scanning touches the filesystem, so it runs in a background task; request
handlers only read the last result.
"""

import asyncio
import logging
import os
import sys
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BytecodeCacheStatus:
    """Snapshot of the bytecode cache."""
    enabled: bool
    cached_scripts: int
    hits: int
    misses: int
    used_memory: int
    free_memory: int
    wasted_memory: int

    @property
    def hit_rate(self) -> float:
        """Percentage of loaded source modules served from cache."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return round(self.hits / total * 100, 2)


class PycacheStatusReader:
    """
    Bytecode cache statistics for the currently loaded modules.

    scan() stats the source and cache files of every loaded module. It is
    run off the event loop by refresh(), at startup and then periodically by
    run(). status() only returns the result of the latest scan and performs
    no I/O.

    Args:
        modules: Module table to inspect (defaults to sys.modules)
        dont_write_bytecode: Override of sys.dont_write_bytecode
    """

    def __init__(
        self,
        modules: Optional[Mapping[str, object]] = None,
        dont_write_bytecode: Optional[bool] = None,
    ):
        self._modules = modules
        self._dont_write_bytecode = dont_write_bytecode
        self._latest: Optional[BytecodeCacheStatus] = None

    @property
    def available(self) -> bool:
        disabled = (
            sys.dont_write_bytecode
            if self._dont_write_bytecode is None
            else self._dont_write_bytecode
        )
        return not disabled

    def status(self) -> Optional[BytecodeCacheStatus]:
        """
        Latest scanned statistics.

        Returns:
            BytecodeCacheStatus, or None when the cache is disabled.
            Before the first scan all counters are zero.
        """
        if not self.available:
            return None
        if self._latest is None:
            return EMPTY_STATUS
        return self._latest

    def scan(self) -> Optional[BytecodeCacheStatus]:
        """Stat every loaded module's source and cache file. Blocking."""
        if not self.available:
            self._latest = None
            return None

        modules = sys.modules if self._modules is None else self._modules
        hits = misses = used = wasted = 0

        for module in list(modules.values()):
            source = getattr(module, "__file__", None)
            cached = getattr(module, "__cached__", None)
            if not source or not cached or not source.endswith(".py"):
                continue
            try:
                cached_stat = os.stat(cached)
            except OSError:
                misses += 1
                continue
            hits += 1
            try:
                stale = os.stat(source).st_mtime > cached_stat.st_mtime
            except OSError:
                stale = False
            if stale:
                wasted += cached_stat.st_size
            else:
                used += cached_stat.st_size

        self._latest = BytecodeCacheStatus(
            enabled=True,
            cached_scripts=hits,
            hits=hits,
            misses=misses,
            used_memory=used,
            free_memory=0,
            wasted_memory=wasted,
        )
        return self._latest

    async def refresh(self) -> Optional[BytecodeCacheStatus]:
        """Run scan() in a worker thread."""
        return await asyncio.to_thread(self.scan)

    async def run(self, stop_event: asyncio.Event, interval: float) -> None:
        """Rescan every `interval` seconds until stop_event is set."""
        logger.info(f"Starting bytecode cache refresh loop (interval={interval}s)")
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.refresh()
            except Exception as e:
                logger.warning(f"Bytecode cache scan failed: {e}")
        logger.info("Bytecode cache refresh loop stopped")


EMPTY_STATUS = BytecodeCacheStatus(
    enabled=True,
    cached_scripts=0,
    hits=0,
    misses=0,
    used_memory=0,
    free_memory=0,
    wasted_memory=0,
)


__all__ = [
    "BytecodeCacheStatus",
    "PycacheStatusReader",
]
