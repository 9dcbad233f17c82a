# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core module initialization
# PURPOSE: Export shared errors, runtime descriptor and configuration
# CREATED: 19 OCT 2026
# ============================================================================

from core.errors import (
    ProbeServiceError,
    DependencyUnavailable,
    ResourceIntrospectionUnavailable,
    InvalidInput,
    RegistryConflict,
)
from core.runtime import RuntimeKind, RuntimeDescriptor, resolve_runtime

__all__ = [
    # Errors
    "ProbeServiceError",
    "DependencyUnavailable",
    "ResourceIntrospectionUnavailable",
    "InvalidInput",
    "RegistryConflict",
    # Runtime
    "RuntimeKind",
    "RuntimeDescriptor",
    "resolve_runtime",
]
