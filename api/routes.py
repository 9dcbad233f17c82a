# ============================================================================
# API ROUTES
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - FastAPI route definitions
# PURPOSE: Service index, runtime info and process status endpoints
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Routes

Endpoints:
    GET /        - Service index with the endpoint map
    GET /info    - Runtime details (memory, bytecode cache, embedded server)
    GET /status  - Running status and uptime
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request

from api.schemas import (
    BytecodeCacheInfo,
    EmbeddedServerInfo,
    IndexResponse,
    InfoResponse,
    StatusResponse,
)
from core.config import ServiceDefaults
from core.runtime import RuntimeDescriptor, RuntimeKind
from health.core import isoformat_z, utc_now
from health.ports import BytecodeCacheReader, MemorySource
from infrastructure.process import bytes_to_mb

logger = logging.getLogger(__name__)


def create_api_router(
    service: ServiceDefaults,
    runtime: RuntimeDescriptor,
    memory_source: MemorySource,
    bytecode_reader: BytecodeCacheReader,
    memory_limit: str = "-1",
) -> APIRouter:
    """
    Create the informational router.

    Args:
        service: Service identity
        runtime: Runtime descriptor resolved at startup
        memory_source: Process memory readings for /info
        bytecode_reader: Bytecode cache statistics for /info
        memory_limit: Configured memory limit, reported as given
    """
    router = APIRouter(tags=["Service"])

    @router.get("/", response_model=IndexResponse)
    async def index(request: Request):
        """Service index."""
        base = str(request.base_url).rstrip("/")
        return IndexResponse(
            message=service.app_name,
            version=service.version,
            server_type=runtime.identity,
            python_version=runtime.language_version,
            framework_version=runtime.framework_version,
            environment=service.environment,
            timestamp=isoformat_z(utc_now()),
            endpoints={
                "health": {
                    "ping": f"{base}/ping",
                    "ready": f"{base}/ready",
                    "health": f"{base}/health",
                },
                "monitoring": {
                    "metrics": f"{base}/metrics",
                    "status": f"{base}/status",
                },
                "testing": {
                    "stress": f"{base}/stress",
                    "performance": f"{base}/performance",
                    "info": f"{base}/info",
                },
            },
        )

    @router.get("/info", response_model=InfoResponse)
    async def info():
        """Runtime details for debugging."""
        usage: Optional[float] = None
        peak: Optional[float] = None
        try:
            usage = bytes_to_mb(memory_source.usage())
            peak = bytes_to_mb(memory_source.peak())
        except Exception as e:
            logger.debug(f"Memory readings unavailable for /info: {e}")

        cache = None
        try:
            status = bytecode_reader.status()
        except Exception as e:
            logger.debug(f"Bytecode cache unavailable for /info: {e}")
            status = None
        if status is not None:
            cache = BytecodeCacheInfo(
                enabled=status.enabled,
                hit_rate=status.hit_rate,
                memory_used_mb=bytes_to_mb(status.used_memory),
                scripts_cached=status.cached_scripts,
            )

        embedded = None
        if runtime.kind == RuntimeKind.EMBEDDED_SERVER:
            embedded = EmbeddedServerInfo(
                version=runtime.server_version,
                cpu_cores=runtime.cpu_count,
            )

        return InfoResponse(
            server_type=runtime.identity,
            runtime_kind=runtime.kind.value,
            python_version=runtime.language_version,
            framework_version=runtime.framework_version,
            environment=service.environment,
            memory_limit=memory_limit,
            memory_usage_mb=usage,
            memory_peak_mb=peak,
            bytecode_cache_enabled=status is not None and status.enabled,
            bytecode_cache=cache,
            embedded_server=embedded,
            timestamp=isoformat_z(utc_now()),
        )

    @router.get("/status", response_model=StatusResponse)
    async def status():
        """Process status."""
        return StatusResponse(
            uptime=round(runtime.uptime_seconds, 3),
            server_type=runtime.identity,
            timestamp=isoformat_z(utc_now()),
        )

    return router


__all__ = [
    "create_api_router",
]
