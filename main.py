# ============================================================================
# PROBE SERVICE - MAIN APPLICATION
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - FastAPI application entry point
# PURPOSE: Wire probes, metrics and load generation into one application
# CREATED: 19 OCT 2026
# ============================================================================
"""
Probe Service Main Application

FastAPI application that:
1. Answers Kubernetes liveness/readiness probes and a full health report
2. Exposes Prometheus metrics
3. Generates bounded synthetic load for autoscaling tests

Every collaborator is constructed here and injected into the routers;
nothing is looked up from module globals at request time.

Usage:
    uvicorn main:app --host 0.0.0.0 --port 8000
    gunicorn main:app -k uvicorn.workers.UvicornWorker
"""

import asyncio
import os
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from __version__ import __version__, BUILD_DATE, EPOCH, SERVICE_NAME
from api.routes import create_api_router
from core.config import Defaults, get_defaults
from core.logging import configure_logging, get_logger
from core.runtime import RuntimeDescriptor, resolve_runtime
from health import ProbeAggregator, ResourceIntrospector, create_health_router
from health.checks import DatabaseCheck, RedisCheck, StorageCheck
from health.ports import (
    BytecodeCacheReader,
    CacheClient,
    MemorySource,
    QueryExecutor,
    ScratchStorage,
    WorkerStatusSource,
)
from infrastructure import (
    LocalScratchStorage,
    PostgresQueryExecutor,
    ProcessMemorySource,
    PycacheStatusReader,
    RedisCacheClient,
    WorkerStatusClient,
    parse_memory_limit,
)
from metrics import (
    MetricsCollector,
    MetricsRegistry,
    RequestMetricsMiddleware,
    create_metrics_router,
)
from metrics.collectors import ServerStatsProvider
from stress import StressWorkload, create_stress_router

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_output=os.environ.get("LOG_FORMAT", "").lower() == "json",
    static_fields={"service": SERVICE_NAME, "version": __version__},
)
logger = get_logger(__name__)


def _memory_limit_bytes(limit: str) -> Optional[int]:
    try:
        return parse_memory_limit(limit)
    except ValueError:
        logger.warning(f"Invalid MEMORY_LIMIT {limit!r}, treating memory as unbounded")
        return None


def create_app(
    defaults: Optional[Defaults] = None,
    runtime: Optional[RuntimeDescriptor] = None,
    executor: Optional[QueryExecutor] = None,
    cache: Optional[CacheClient] = None,
    storage: Optional[ScratchStorage] = None,
    memory_source: Optional[MemorySource] = None,
    bytecode_reader: Optional[BytecodeCacheReader] = None,
    worker_status: Optional[WorkerStatusSource] = None,
    registry: Optional[MetricsRegistry] = None,
    server_stats: Optional[ServerStatsProvider] = None,
) -> FastAPI:
    """
    Build the application.

    Collaborators not passed in are created from configuration. Only the
    ones created here are opened and closed by the application lifespan.
    """
    defaults = defaults or get_defaults()
    runtime = runtime or resolve_runtime()
    connections = defaults.connections
    probes = defaults.probes

    owned_executor: Optional[PostgresQueryExecutor] = None
    owned_cache: Optional[RedisCacheClient] = None
    owned_bytecode_reader: Optional[PycacheStatusReader] = None

    if executor is None:
        owned_executor = PostgresQueryExecutor(
            connections.database_url,
            connection_name=connections.database_connection,
            min_size=connections.database_pool_min,
            max_size=connections.database_pool_max,
            acquire_timeout=probes.check_timeout_seconds,
        )
        executor = owned_executor
    if cache is None:
        owned_cache = RedisCacheClient(
            connections.redis_url,
            driver=connections.cache_driver,
            socket_timeout=probes.check_timeout_seconds,
        )
        cache = owned_cache
    if storage is None:
        storage = LocalScratchStorage(connections.storage_path)
    if memory_source is None:
        memory_source = ProcessMemorySource()
    if bytecode_reader is None:
        owned_bytecode_reader = PycacheStatusReader()
        bytecode_reader = owned_bytecode_reader
    if worker_status is None and connections.worker_status_url:
        worker_status = WorkerStatusClient(
            connections.worker_status_url,
            timeout=connections.worker_status_timeout_seconds,
        )
    if registry is None:
        registry = MetricsRegistry(namespace=defaults.metrics.namespace)

    # Probes
    checks = [
        DatabaseCheck(executor, timeout_seconds=probes.check_timeout_seconds),
        RedisCheck(cache, timeout_seconds=probes.check_timeout_seconds),
        StorageCheck(storage, timeout_seconds=probes.check_timeout_seconds),
    ]
    introspector = ResourceIntrospector(
        runtime,
        memory_source,
        bytecode_reader,
        memory_limit=_memory_limit_bytes(probes.memory_limit),
        memory_threshold=probes.memory_threshold,
    )
    aggregator = ProbeAggregator(
        checks,
        introspector,
        runtime,
        ready_timeout=probes.ready_timeout_seconds,
        health_timeout=probes.health_timeout_seconds,
    )

    # Metrics
    collector = MetricsCollector(
        registry,
        runtime,
        executor=executor,
        cache=cache,
        queue_connection=connections.queue_connection,
        queue_driver=connections.queue_driver,
        memory_source=memory_source,
        bytecode_reader=bytecode_reader,
        worker_status=worker_status,
        server_stats=server_stats,
    )

    # Load generation
    workload = StressWorkload(defaults.stress, memory_source)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Opens the collaborators created by create_app on startup and closes
        them on shutdown.
        """
        logger.info(
            f"Starting {defaults.service.app_name} v{__version__} "
            f"(Epoch {EPOCH}, Build {BUILD_DATE}) on {runtime.identity}"
        )
        if owned_executor is not None:
            await owned_executor.open()

        stop_event = asyncio.Event()
        refresh_task: Optional[asyncio.Task] = None
        if owned_bytecode_reader is not None:
            await owned_bytecode_reader.refresh()
            refresh_task = asyncio.create_task(
                owned_bytecode_reader.run(stop_event, probes.bytecode_refresh_seconds),
                name="bytecode-cache-refresh",
            )
        logger.info(f"Probes initialized ({len(checks)} dependency checks)")

        yield

        logger.info(f"Shutting down {defaults.service.app_name}...")
        stop_event.set()
        if refresh_task is not None:
            await refresh_task
        closers: List = []
        if owned_cache is not None:
            closers.append(owned_cache.close)
        if owned_executor is not None:
            closers.append(owned_executor.close)
        for close in closers:
            try:
                await close()
            except Exception as e:
                logger.warning(f"Error closing collaborator: {e}")
        logger.info(f"{defaults.service.app_name} stopped")

    app = FastAPI(
        title=defaults.service.app_name,
        description=f"Epoch {EPOCH} probe aggregation and metrics exposition service",
        version=__version__,
        lifespan=lifespan,
    )

    if defaults.metrics.count_requests:
        app.add_middleware(RequestMetricsMiddleware, registry=registry, runtime=runtime)

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

    # Probe routes (no prefix - /ping, /ready, /health)
    app.include_router(create_health_router(aggregator, defaults.service))
    app.include_router(create_metrics_router(registry, collector))
    app.include_router(create_stress_router(workload, runtime))
    app.include_router(
        create_api_router(
            defaults.service,
            runtime,
            memory_source,
            bytecode_reader,
            memory_limit=probes.memory_limit,
        )
    )

    app.state.defaults = defaults
    app.state.runtime = runtime
    app.state.registry = registry
    app.state.aggregator = aggregator
    app.state.collector = collector
    app.state.workload = workload
    return app


app = create_app()


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=os.environ.get("RELOAD", "false").lower() == "true",
    )
