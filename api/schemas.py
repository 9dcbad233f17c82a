# ============================================================================
# API SCHEMAS
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Response schemas
# PURPOSE: Pydantic models for the JSON endpoints
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Schemas

Response models for the JSON endpoints. Probe responses (/ready, /health)
carry a status-dependent HTTP code and are returned as JSONResponse
directly; everything else is validated through these models.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


# ============================================================================
# PROBES
# ============================================================================

class PingResponse(BaseModel):
    """Liveness probe response."""
    status: str = "pong"
    timestamp: str
    server_type: str


# ============================================================================
# LOAD GENERATION
# ============================================================================

class StressResponse(BaseModel):
    """Outcome of GET /stress."""
    message: str = "Stress test completed"
    server_type: str
    duration_requested: int = Field(..., ge=0)
    duration_actual: float
    memory_requested_mb: int = Field(..., ge=0)
    memory_used_mb: float
    peak_memory_mb: float
    timestamp: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "message": "Stress test completed",
                    "server_type": "uvicorn-0.30.6",
                    "duration_requested": 2,
                    "duration_actual": 2.0,
                    "memory_requested_mb": 10,
                    "memory_used_mb": 10.02,
                    "peak_memory_mb": 71.5,
                    "timestamp": "2026-10-19T12:00:00.000Z",
                }
            ]
        }
    }


class PerformanceResponse(BaseModel):
    """Outcome of GET /performance."""
    message: str = "Performance test completed"
    server_type: str
    iterations: int = Field(..., ge=0)
    execution_time_ms: float
    memory_used_mb: float
    operations_per_second: float
    timestamp: str


# ============================================================================
# SERVICE INFORMATION
# ============================================================================

class IndexResponse(BaseModel):
    """Service index with the endpoint map."""
    message: str
    version: str
    server_type: str
    python_version: str
    framework_version: str
    environment: str
    timestamp: str
    endpoints: Dict[str, Dict[str, str]]


class BytecodeCacheInfo(BaseModel):
    enabled: bool
    hit_rate: float
    memory_used_mb: float
    scripts_cached: int


class EmbeddedServerInfo(BaseModel):
    version: Optional[str] = None
    cpu_cores: int


class InfoResponse(BaseModel):
    """Runtime details for debugging."""
    server_type: str
    runtime_kind: str
    python_version: str
    framework_version: str
    environment: str
    memory_limit: str
    memory_usage_mb: Optional[float] = None
    memory_peak_mb: Optional[float] = None
    bytecode_cache_enabled: bool
    bytecode_cache: Optional[BytecodeCacheInfo] = None
    embedded_server: Optional[EmbeddedServerInfo] = None
    timestamp: str


class StatusResponse(BaseModel):
    """Process status summary."""
    status: str = "running"
    uptime: float
    server_type: str
    timestamp: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[Any] = None


__all__ = [
    "PingResponse",
    "StressResponse",
    "PerformanceResponse",
    "IndexResponse",
    "BytecodeCacheInfo",
    "EmbeddedServerInfo",
    "InfoResponse",
    "StatusResponse",
    "ErrorResponse",
]
