# ============================================================================
# STRESS ROUTER
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: API - Synthetic load endpoints
# PURPOSE: Trigger bounded CPU/memory load for autoscaling tests
# CREATED: 19 OCT 2026
# ============================================================================
"""
Stress Router

Endpoints:
    GET /stress?duration=&memory=   - CPU busy loop then memory hold
    GET /performance?iterations=    - Hashing throughput benchmark

Query values are parsed leniently and clamped, so these endpoints never
answer 4xx for bad input. The work runs in a worker thread while a watcher
task polls the connection; when the client goes away the busy loop stops.
"""

import asyncio
import logging
import threading
from typing import Optional

from fastapi import APIRouter, Query, Request

from api.schemas import PerformanceResponse, StressResponse
from core.logging import log_context
from core.runtime import RuntimeDescriptor
from stress.workload import StressWorkload, parse_int

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.2


async def watch_disconnect(
    request: Request,
    cancel: threading.Event,
    interval: float = DISCONNECT_POLL_SECONDS,
) -> None:
    """Set `cancel` once the client has disconnected."""
    while not cancel.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected, stopping stress run")
            cancel.set()
            return
        await asyncio.sleep(interval)


def create_stress_router(
    workload: StressWorkload,
    runtime: RuntimeDescriptor,
) -> APIRouter:
    """
    Create the load generation router.

    Args:
        workload: Configured stress workload
        runtime: Runtime descriptor (server_type reporting)
    """
    router = APIRouter(tags=["Stress"])
    defaults = workload.defaults

    @router.get("/stress", response_model=StressResponse)
    async def stress(
        request: Request,
        duration: Optional[str] = Query(None, description="CPU seconds (clamped to the configured max)"),
        memory: Optional[str] = Query(None, description="Megabytes to hold (clamped to the configured max)"),
    ):
        """Run the synthetic CPU + memory workload."""
        requested_duration = parse_int(duration, defaults.default_duration_seconds)
        requested_memory = parse_int(memory, defaults.default_memory_mb)

        cancel = threading.Event()
        watcher = asyncio.create_task(watch_disconnect(request, cancel))
        with log_context(operation="stress"):
            try:
                outcome = await asyncio.to_thread(
                    workload.run, requested_duration, requested_memory, cancel
                )
            except asyncio.CancelledError:
                cancel.set()
                logger.info("Stress request cancelled")
                raise
            finally:
                watcher.cancel()

        return StressResponse(
            server_type=runtime.identity,
            duration_requested=outcome.duration_requested_s,
            duration_actual=outcome.duration_actual_s,
            memory_requested_mb=outcome.memory_requested_mb,
            memory_used_mb=outcome.memory_used_mb,
            peak_memory_mb=outcome.peak_memory_mb,
            timestamp=outcome.timestamp,
        )

    @router.get("/performance", response_model=PerformanceResponse)
    async def performance(
        iterations: Optional[str] = Query(None, description="Records to hash (clamped to the configured max)"),
    ):
        """Run the hashing benchmark."""
        requested = parse_int(iterations, defaults.default_iterations)
        with log_context(operation="performance"):
            outcome = await asyncio.to_thread(workload.run_performance, requested)

        return PerformanceResponse(
            server_type=runtime.identity,
            iterations=outcome.iterations,
            execution_time_ms=outcome.execution_time_ms,
            memory_used_mb=outcome.memory_used_mb,
            operations_per_second=outcome.operations_per_second,
            timestamp=outcome.timestamp,
        )

    return router


__all__ = [
    "create_stress_router",
    "watch_disconnect",
]
