# ============================================================================
# METRIC COLLECTORS
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Scrape-time metric producers
# PURPOSE: Push current collaborator and process values into the registry
# CREATED: 19 OCT 2026
# ============================================================================
"""
Metric Collectors

Each producer reads one source and overwrites its gauge samples in the
registry right before a scrape renders. Producers never fail the scrape:
a source that cannot be read is logged at DEBUG and its samples are
removed, so a scrape never shows a value left over from an earlier one.

Producers:
    database     - database_connections_active{connection}
    cache        - cache_info{store, driver}
    queue        - queue_info{connection, driver}
    memory       - process_memory_usage_bytes{type}
    bytecode     - bytecode_cache_memory_bytes{type}, bytecode_cache_statistics{type}
    workers      - worker_manager_processes{state} (worker-manager runtime)
    uptime       - process_uptime_seconds
    embedded     - embedded_server_stats{type} (embedded-server runtime)
    server_info  - server_info{server_type, python_version, framework_version}

The request counter (http_requests_total) is registered here so it always
appears in the output; it is incremented by RequestMetricsMiddleware.
"""

import logging
from typing import Callable, Dict, Mapping, Optional, Set

from core.runtime import RuntimeDescriptor, RuntimeKind
from health.ports import (
    BytecodeCacheReader,
    CacheClient,
    MemorySource,
    QueryExecutor,
    WorkerStatusSource,
)
from metrics.registry import Metric, MetricsRegistry

logger = logging.getLogger(__name__)

REQUEST_LABELS = ("method", "endpoint", "status_code", "server_type")

# Optional hook returning live embedded-server counters (connections, workers, ...)
ServerStatsProvider = Callable[[], Mapping[str, float]]


def register_request_counter(registry: MetricsRegistry) -> Metric:
    return registry.counter(
        "http_requests_total",
        "Total number of HTTP requests",
        REQUEST_LABELS,
    )


class MetricsCollector:
    """
    Scrape-time producer set.

    Every collaborator is optional; a missing collaborator means its
    metric is registered but carries no samples.

    Args:
        registry: Registry to write into
        runtime: Runtime descriptor resolved at startup
        executor: Database access (active connection count)
        cache: Cache client (store and driver identity)
        queue_connection: Configured queue connection name
        queue_driver: Driver of the queue connection
        memory_source: Process memory readings
        bytecode_reader: Bytecode cache statistics
        worker_status: Worker-manager status page
        server_stats: Embedded server counters
    """

    def __init__(
        self,
        registry: MetricsRegistry,
        runtime: RuntimeDescriptor,
        executor: Optional[QueryExecutor] = None,
        cache: Optional[CacheClient] = None,
        queue_connection: Optional[str] = None,
        queue_driver: Optional[str] = None,
        memory_source: Optional[MemorySource] = None,
        bytecode_reader: Optional[BytecodeCacheReader] = None,
        worker_status: Optional[WorkerStatusSource] = None,
        server_stats: Optional[ServerStatsProvider] = None,
    ):
        self.registry = registry
        self.runtime = runtime
        self.executor = executor
        self.cache = cache
        self.queue_connection = queue_connection
        self.queue_driver = queue_driver
        self.memory_source = memory_source
        self.bytecode_reader = bytecode_reader
        self.worker_status = worker_status
        self.server_stats = server_stats
        self._server_stat_names: Set[str] = set()

    def _drop(self, *names: str) -> None:
        """Remove all samples of metrics whose source could not be read."""
        for name in names:
            metric = self.registry.get(name)
            if metric is not None:
                metric.clear()

    async def collect(self) -> None:
        """Run every producer once."""
        register_request_counter(self.registry)
        await self.collect_database()
        self.collect_cache()
        self.collect_queue()
        self.collect_memory()
        self.collect_bytecode_cache()
        await self.collect_workers()
        self.collect_uptime()
        self.collect_embedded_server()
        self.collect_server_info()

    # ------------------------------------------------------------------------
    # APPLICATION
    # ------------------------------------------------------------------------

    async def collect_database(self) -> None:
        if self.executor is None:
            return
        try:
            active = await self.executor.active_connections()
        except Exception as e:
            logger.debug(f"Skipping database_connections_active: {e}")
            self._drop("database_connections_active")
            return
        gauge = self.registry.gauge(
            "database_connections_active",
            "Number of active database connections",
            ["connection"],
        )
        gauge.set([self.executor.connection_name], active)

    def collect_cache(self) -> None:
        if self.cache is None:
            return
        try:
            labels = [self.cache.store, self.cache.driver]
        except Exception as e:
            logger.debug(f"Skipping cache_info: {e}")
            self._drop("cache_info")
            return
        gauge = self.registry.gauge(
            "cache_info",
            "Cache store information",
            ["store", "driver"],
        )
        gauge.set(labels, 1)

    def collect_queue(self) -> None:
        if not self.queue_connection:
            return
        gauge = self.registry.gauge(
            "queue_info",
            "Queue connection information",
            ["connection", "driver"],
        )
        gauge.set([self.queue_connection, self.queue_driver or ""], 1)

    # ------------------------------------------------------------------------
    # PROCESS
    # ------------------------------------------------------------------------

    def collect_memory(self) -> None:
        if self.memory_source is None:
            return
        try:
            current = self.memory_source.usage()
            peak = self.memory_source.peak()
        except Exception as e:
            logger.debug(f"Skipping process_memory_usage_bytes: {e}")
            self._drop("process_memory_usage_bytes")
            return
        gauge = self.registry.gauge(
            "process_memory_usage_bytes",
            "Process memory usage in bytes",
            ["type"],
        )
        gauge.set(["current"], current)
        gauge.set(["peak"], peak)

    def collect_bytecode_cache(self) -> None:
        if self.bytecode_reader is None:
            return
        try:
            status = self.bytecode_reader.status()
        except Exception as e:
            logger.debug(f"Skipping bytecode cache metrics: {e}")
            status = None
        if status is None:
            self._drop("bytecode_cache_memory_bytes", "bytecode_cache_statistics")
            return

        memory = self.registry.gauge(
            "bytecode_cache_memory_bytes",
            "Bytecode cache memory usage in bytes",
            ["type"],
        )
        memory.set(["used"], status.used_memory)
        memory.set(["free"], status.free_memory)
        memory.set(["wasted"], status.wasted_memory)

        stats = self.registry.gauge(
            "bytecode_cache_statistics",
            "Bytecode cache statistics",
            ["type"],
        )
        stats.set(["cached_scripts"], status.cached_scripts)
        stats.set(["hits"], status.hits)
        stats.set(["misses"], status.misses)
        stats.set(["hit_rate"], status.hit_rate)

    def collect_uptime(self) -> None:
        gauge = self.registry.gauge(
            "process_uptime_seconds",
            "Process uptime in seconds",
        )
        gauge.set([], round(self.runtime.uptime_seconds, 3))

    # ------------------------------------------------------------------------
    # SERVER RUNTIME
    # ------------------------------------------------------------------------

    async def collect_workers(self) -> None:
        if self.runtime.kind != RuntimeKind.WORKER_MANAGER or self.worker_status is None:
            return
        try:
            counters: Dict[str, int] = await self.worker_status.fetch()
        except Exception as e:
            logger.debug(f"Skipping worker_manager_processes: {e}")
            self._drop("worker_manager_processes")
            return
        gauge = self.registry.gauge(
            "worker_manager_processes",
            "Worker manager process statistics",
            ["state"],
        )
        for state in ("active", "idle", "total"):
            if state in counters:
                gauge.set([state], counters[state])
            else:
                gauge.remove([state])

    def collect_embedded_server(self) -> None:
        if self.runtime.kind != RuntimeKind.EMBEDDED_SERVER:
            return
        gauge = self.registry.gauge(
            "embedded_server_stats",
            "Embedded server statistics",
            ["type"],
        )
        gauge.set(["cpu_cores"], self.runtime.cpu_count)

        if self.server_stats is None:
            return
        try:
            stats = dict(self.server_stats())
        except Exception as e:
            logger.debug(f"Skipping embedded server stats: {e}")
            stats = {}
        for stat in self._server_stat_names - stats.keys() - {"cpu_cores"}:
            gauge.remove([stat])
        for stat, value in stats.items():
            gauge.set([stat], value)
        self._server_stat_names = set(stats)

    def collect_server_info(self) -> None:
        gauge = self.registry.gauge(
            "server_info",
            "Server information",
            ["server_type", "python_version", "framework_version"],
        )
        gauge.set(
            [
                self.runtime.short_name,
                self.runtime.language_version,
                self.runtime.framework_version,
            ],
            1,
        )


__all__ = [
    "MetricsCollector",
    "ServerStatsProvider",
    "REQUEST_LABELS",
    "register_request_counter",
]
