# ============================================================================
# DEPENDENCY HEALTH CHECKS
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Checks against critical external dependencies
# PURPOSE: Database, cache and storage connectivity for readiness
# CREATED: 19 OCT 2026
# ============================================================================
"""
Dependency Health Checks

Critical dependencies gating readiness:
- DatabaseCheck: no-op query (SELECT 1)
- RedisCheck: PING round-trip
- StorageCheck: write, read back and delete a marker file
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from core.errors import DependencyUnavailable
from health.core import DependencyCheck
from health.ports import CacheClient, QueryExecutor, ScratchStorage

logger = logging.getLogger(__name__)


class DatabaseCheck(DependencyCheck):
    """Relational database connectivity."""

    name = "database"
    critical = True

    def __init__(self, executor: QueryExecutor, timeout_seconds: Optional[float] = None):
        self.executor = executor
        if timeout_seconds is not None:
            self.timeout_seconds = timeout_seconds

    def context(self) -> Dict[str, Any]:
        return {"connection": self.executor.connection_name}

    async def probe(self) -> None:
        await self.executor.execute("SELECT 1")


class RedisCheck(DependencyCheck):
    """Key-value cache connectivity."""

    name = "redis"
    critical = True

    def __init__(self, cache: CacheClient, timeout_seconds: Optional[float] = None):
        self.cache = cache
        if timeout_seconds is not None:
            self.timeout_seconds = timeout_seconds

    def context(self) -> Dict[str, Any]:
        return {"host": self.cache.host}

    async def probe(self) -> None:
        await self.cache.ping()


class StorageCheck(DependencyCheck):
    """
    Writable local storage.

    Healthy only if the marker file reads back exactly as written.
    """

    name = "storage"
    critical = True

    MARKER_FILE = "health-check.tmp"
    MARKER_CONTENT = "health-check"

    def __init__(self, storage: ScratchStorage, timeout_seconds: Optional[float] = None):
        self.storage = storage
        if timeout_seconds is not None:
            self.timeout_seconds = timeout_seconds

    def context(self) -> Dict[str, Any]:
        return {"path": self.storage.path}

    def _round_trip(self) -> str:
        self.storage.write(self.MARKER_FILE, self.MARKER_CONTENT)
        try:
            return self.storage.read(self.MARKER_FILE)
        finally:
            self.storage.delete(self.MARKER_FILE)

    async def probe(self) -> None:
        content = await asyncio.to_thread(self._round_trip)
        if content != self.MARKER_CONTENT:
            raise DependencyUnavailable("storage", "Marker file content mismatch")


__all__ = [
    "DatabaseCheck",
    "RedisCheck",
    "StorageCheck",
]
