# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Default configuration values
# PURPOSE: Centralized defaults for probes, stress bounds, collaborators
# CREATED: 19 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for probe timing, load-test bounds and the connection
details of external collaborators. Every value can be overridden with an
environment variable through the from_env() constructors.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Type-safe access
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class ServiceDefaults:
    """
    Service identity reported by /health and the index endpoint.
    """
    app_name: str = "Probe Service"
    version: str = "1.0.0"
    environment: str = "production"

    @classmethod
    def from_env(cls) -> "ServiceDefaults":
        """Create from environment variables."""
        from __version__ import __version__

        return cls(
            app_name=os.getenv("APP_NAME", "Probe Service"),
            version=os.getenv("APP_VERSION", __version__),
            environment=os.getenv("APP_ENV", "production"),
        )


@dataclass(frozen=True)
class ProbeDefaults:
    """
    Defaults for dependency checks and aggregation.

    Readiness uses a tight overall deadline since the orchestrator
    enforces its own probe timeout.
    """
    check_timeout_seconds: float = 2.0
    ready_timeout_seconds: float = 5.0
    health_timeout_seconds: float = 10.0

    # Memory check alerts above this fraction of the limit
    memory_threshold: float = 0.9

    # "-1" means unbounded
    memory_limit: str = "-1"

    # Background rescan of __pycache__ statistics
    bytecode_refresh_seconds: float = 60.0

    @classmethod
    def from_env(cls) -> "ProbeDefaults":
        """Create from environment variables."""
        return cls(
            check_timeout_seconds=float(os.getenv("PROBE_CHECK_TIMEOUT_SECONDS", 2.0)),
            ready_timeout_seconds=float(os.getenv("PROBE_READY_TIMEOUT_SECONDS", 5.0)),
            health_timeout_seconds=float(os.getenv("PROBE_HEALTH_TIMEOUT_SECONDS", 10.0)),
            memory_threshold=float(os.getenv("PROBE_MEMORY_THRESHOLD", 0.9)),
            memory_limit=os.getenv("MEMORY_LIMIT", "-1"),
            bytecode_refresh_seconds=float(os.getenv("PROBE_BYTECODE_REFRESH_SECONDS", 60.0)),
        )


@dataclass(frozen=True)
class StressDefaults:
    """
    Hard bounds for the synthetic load endpoints.

    These are safety limits: requests above them are clamped.
    """
    max_duration_seconds: int = 10
    max_memory_mb: int = 50
    default_duration_seconds: int = 1
    default_memory_mb: int = 1

    hash_buffer_bytes: int = 1024
    block_size_bytes: int = 1024 * 1024

    # /performance
    max_iterations: int = 10000
    default_iterations: int = 1000

    @classmethod
    def from_env(cls) -> "StressDefaults":
        """Create from environment variables."""
        return cls(
            max_duration_seconds=int(os.getenv("STRESS_MAX_DURATION_SECONDS", 10)),
            max_memory_mb=int(os.getenv("STRESS_MAX_MEMORY_MB", 50)),
            max_iterations=int(os.getenv("PERFORMANCE_MAX_ITERATIONS", 10000)),
        )


@dataclass(frozen=True)
class ConnectionDefaults:
    """
    Connection details for the wrapped collaborators.

    Empty URLs disable the collaborator; its readiness check then
    reports the connection failure instead of the service refusing to start.
    """
    database_url: Optional[str] = None
    database_connection: str = "pgsql"
    database_pool_min: int = 1
    database_pool_max: int = 5

    redis_url: str = "redis://localhost:6379/0"
    cache_driver: str = "redis"
    queue_connection: str = "redis"
    queue_driver: str = "redis"

    storage_path: str = "./storage/app"

    # Worker-manager status page (JSON)
    worker_status_url: Optional[str] = None
    worker_status_timeout_seconds: float = 1.0

    @classmethod
    def from_env(cls) -> "ConnectionDefaults":
        """Create from environment variables."""
        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            database_connection=os.getenv("DB_CONNECTION", "pgsql"),
            database_pool_min=int(os.getenv("DB_POOL_MIN", 1)),
            database_pool_max=int(os.getenv("DB_POOL_MAX", 5)),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            cache_driver=os.getenv("CACHE_DRIVER", "redis"),
            queue_connection=os.getenv("QUEUE_CONNECTION", "redis"),
            queue_driver=os.getenv("QUEUE_DRIVER", "redis"),
            storage_path=os.getenv("STORAGE_PATH", "./storage/app"),
            worker_status_url=os.getenv("WORKER_STATUS_URL") or None,
            worker_status_timeout_seconds=float(os.getenv("WORKER_STATUS_TIMEOUT_SECONDS", 1.0)),
        )


@dataclass(frozen=True)
class MetricsDefaults:
    """Defaults for the metrics registry."""
    namespace: str = "app"
    count_requests: bool = True

    @classmethod
    def from_env(cls) -> "MetricsDefaults":
        """Create from environment variables."""
        return cls(
            namespace=os.getenv("METRICS_NAMESPACE", "app"),
            count_requests=_env_bool("METRICS_COUNT_REQUESTS", True),
        )


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    service: ServiceDefaults = field(default_factory=ServiceDefaults)
    probes: ProbeDefaults = field(default_factory=ProbeDefaults)
    stress: StressDefaults = field(default_factory=StressDefaults)
    connections: ConnectionDefaults = field(default_factory=ConnectionDefaults)
    metrics: MetricsDefaults = field(default_factory=MetricsDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            service=ServiceDefaults.from_env(),
            probes=ProbeDefaults.from_env(),
            stress=StressDefaults.from_env(),
            connections=ConnectionDefaults.from_env(),
            metrics=MetricsDefaults.from_env(),
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ServiceDefaults",
    "ProbeDefaults",
    "StressDefaults",
    "ConnectionDefaults",
    "MetricsDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
