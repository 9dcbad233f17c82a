# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Infrastructure - External collaborator adapters
# PURPOSE: Database, cache, filesystem and runtime readers used by probes
# CREATED: 19 OCT 2026
# ============================================================================
"""
Infrastructure module for the probe service.

Provides:
- PostgresQueryExecutor: no-op query and connection count (psycopg_pool)
- RedisCacheClient: ping and identity (redis.asyncio)
- LocalScratchStorage: marker-file write/read/delete
- PycacheStatusReader: CPython bytecode cache statistics
- ProcessMemorySource: current and peak RSS (psutil)
- WorkerStatusClient: worker-manager counters over HTTP (httpx)
"""

from infrastructure.postgresql import PostgresQueryExecutor
from infrastructure.cache import RedisCacheClient
from infrastructure.storage import LocalScratchStorage
from infrastructure.bytecode import BytecodeCacheStatus, PycacheStatusReader
from infrastructure.process import ProcessMemorySource, bytes_to_mb, parse_memory_limit
from infrastructure.worker_status import WorkerStatusClient

__all__ = [
    "PostgresQueryExecutor",
    "RedisCacheClient",
    "LocalScratchStorage",
    "BytecodeCacheStatus",
    "PycacheStatusReader",
    "ProcessMemorySource",
    "bytes_to_mb",
    "parse_memory_limit",
    "WorkerStatusClient",
]
