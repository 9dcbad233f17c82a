# ============================================================================
# RUNTIME DESCRIPTOR
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Server runtime capability detection
# PURPOSE: Resolve once at startup which server runtime hosts the process
# CREATED: 19 OCT 2026
# ============================================================================
"""
Runtime Descriptor

Detects the server runtime hosting the application once, at startup, and
hands the result to every component that reports it.

Resolution order:
1. Worker manager (gunicorn arbiter)            -> "gunicorn-<python_version>"
2. Embedded server (uvicorn loaded in-process)  -> "uvicorn-<version>"
3. Anything else                                -> "unknown-<python_version>"

Under gunicorn the uvicorn worker class is also loaded, so the worker
manager is checked first.
"""

import os
import platform
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional


class RuntimeKind(str, Enum):
    """Server runtime families."""
    EMBEDDED_SERVER = "embedded_server"
    WORKER_MANAGER = "worker_manager"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RuntimeDescriptor:
    """Capabilities of the hosting runtime, resolved once."""
    kind: RuntimeKind
    server_name: str
    server_version: Optional[str]
    language_version: str
    framework_version: str
    cpu_count: int
    started_at: float = field(default_factory=time.time)
    started_monotonic: float = field(default_factory=time.monotonic)

    @property
    def identity(self) -> str:
        """Identity string reported as server_type by the probes."""
        if self.kind == RuntimeKind.EMBEDDED_SERVER:
            return f"{self.server_name}-{self.server_version}"
        return f"{self.server_name}-{self.language_version}"

    @property
    def short_name(self) -> str:
        """Runtime name without version (server_type label of metrics)."""
        return self.server_name

    @property
    def uptime_seconds(self) -> float:
        return time.monotonic() - self.started_monotonic


def _module_version(module) -> Optional[str]:
    return getattr(module, "__version__", None)


def _framework_version(modules: Mapping[str, object]) -> str:
    fastapi = modules.get("fastapi")
    if fastapi is not None:
        return _module_version(fastapi) or "unknown"
    return "unknown"


def resolve_runtime(
    modules: Optional[Mapping[str, object]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RuntimeDescriptor:
    """
    Detect the hosting runtime.

    Args:
        modules: Loaded modules (defaults to sys.modules)
        environ: Process environment (defaults to os.environ)

    Returns:
        RuntimeDescriptor for the current process
    """
    modules = sys.modules if modules is None else modules
    environ = os.environ if environ is None else environ

    language_version = platform.python_version()
    framework_version = _framework_version(modules)
    cpu_count = os.cpu_count() or 1

    # The gunicorn arbiter exports SERVER_SOFTWARE=gunicorn/<version>
    server_software = environ.get("SERVER_SOFTWARE", "")
    if server_software.startswith("gunicorn") or "gunicorn" in modules:
        return RuntimeDescriptor(
            kind=RuntimeKind.WORKER_MANAGER,
            server_name="gunicorn",
            server_version=server_software.partition("/")[2] or None,
            language_version=language_version,
            framework_version=framework_version,
            cpu_count=cpu_count,
        )

    uvicorn = modules.get("uvicorn")
    if uvicorn is not None:
        return RuntimeDescriptor(
            kind=RuntimeKind.EMBEDDED_SERVER,
            server_name="uvicorn",
            server_version=_module_version(uvicorn) or "unknown",
            language_version=language_version,
            framework_version=framework_version,
            cpu_count=cpu_count,
        )

    return RuntimeDescriptor(
        kind=RuntimeKind.UNKNOWN,
        server_name="unknown",
        server_version=None,
        language_version=language_version,
        framework_version=framework_version,
        cpu_count=cpu_count,
    )


__all__ = [
    "RuntimeKind",
    "RuntimeDescriptor",
    "resolve_runtime",
]
