# ============================================================================
# COLLABORATOR PORTS
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Narrow interfaces of external collaborators
# PURPOSE: What checks, introspection and collectors need from the outside
# CREATED: 19 OCT 2026
# ============================================================================
"""
Collaborator Ports

Protocols the probe and metrics components depend on. Concrete adapters
live in infrastructure/; tests substitute simple fakes.
"""

from typing import Dict, Optional, Protocol, runtime_checkable

from infrastructure.bytecode import BytecodeCacheStatus


@runtime_checkable
class QueryExecutor(Protocol):
    """Relational database access limited to probe needs."""

    connection_name: str

    async def execute(self, sql: str) -> None:
        """Execute a statement, discarding the result."""
        ...

    async def active_connections(self) -> int:
        """Number of active backend connections."""
        ...


@runtime_checkable
class CacheClient(Protocol):
    """Key-value cache access limited to probe needs."""

    driver: str

    @property
    def host(self) -> Optional[str]:
        ...

    @property
    def store(self) -> str:
        ...

    async def ping(self) -> None:
        ...


@runtime_checkable
class ScratchStorage(Protocol):
    """Filesystem area used by the storage check."""

    @property
    def path(self) -> str:
        ...

    def write(self, name: str, content: str) -> None:
        ...

    def read(self, name: str) -> str:
        ...

    def delete(self, name: str) -> None:
        ...


@runtime_checkable
class MemorySource(Protocol):
    """Process memory readings in bytes."""

    def usage(self) -> int:
        ...

    def peak(self) -> int:
        ...


@runtime_checkable
class BytecodeCacheReader(Protocol):
    """Bytecode cache statistics; None when the cache is unavailable."""

    def status(self) -> Optional[BytecodeCacheStatus]:
        ...


@runtime_checkable
class WorkerStatusSource(Protocol):
    """Worker-manager process counters (active, idle, total)."""

    async def fetch(self) -> Dict[str, int]:
        ...


__all__ = [
    "QueryExecutor",
    "CacheClient",
    "ScratchStorage",
    "MemorySource",
    "BytecodeCacheReader",
    "WorkerStatusSource",
]
