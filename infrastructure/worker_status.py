# ============================================================================
# WORKER MANAGER STATUS CLIENT
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Infrastructure - Worker-manager status page reader
# PURPOSE: Read active/idle/total worker counters over HTTP
# CREATED: 19 OCT 2026
# ============================================================================
"""
Worker Manager Status Client

Reads process counters from a JSON status page exposed by the worker
manager. Both short keys ("active", "idle", "total") and the php-fpm style
keys ("active processes", ...) are understood.
"""

import logging
from typing import Dict

import httpx

from core.errors import DependencyUnavailable

logger = logging.getLogger(__name__)

_KEYS = {
    "active": ("active", "active processes"),
    "idle": ("idle", "idle processes"),
    "total": ("total", "total processes"),
}


class WorkerStatusClient:
    """Fetches worker counters from a status URL."""

    def __init__(self, url: str, timeout: float = 1.0):
        self.url = url
        self.timeout = timeout

    async def fetch(self) -> Dict[str, int]:
        """
        Fetch the counters present on the status page.

        Raises:
            DependencyUnavailable: If the page cannot be read or parsed
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise DependencyUnavailable("worker_manager", str(e)) from e

        counters: Dict[str, int] = {}
        for state, candidates in _KEYS.items():
            for key in candidates:
                if key in data:
                    counters[state] = int(data[key])
                    break
        return counters


__all__ = [
    "WorkerStatusClient",
]
