# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Exception types shared across components
# PURPOSE: Name the failure modes of checks, introspection and the registry
# CREATED: 19 OCT 2026
# ============================================================================
"""
Error Taxonomy

- DependencyUnavailable: a collaborator call failed or timed out. Raised by
  infrastructure adapters, converted to CheckResult data at the check
  boundary and never surfaced to callers of the aggregator.
- ResourceIntrospectionUnavailable: a runtime fact cannot be read (e.g. the
  bytecode cache is disabled). Reported as an unhealthy check.
- InvalidInput: reserved for out-of-range load parameters. Never raised:
  stress inputs are parsed leniently and clamped instead.
- RegistryConflict: a metric name re-registered under a different kind or
  label schema. A programming error.
"""


class ProbeServiceError(Exception):
    """Base class for service errors."""


class DependencyUnavailable(ProbeServiceError):
    """A collaborator call failed or timed out."""

    def __init__(self, dependency: str, message: str):
        self.dependency = dependency
        super().__init__(message)


class ResourceIntrospectionUnavailable(ProbeServiceError):
    """A process or runtime fact could not be read."""


class InvalidInput(ProbeServiceError, ValueError):
    """Reserved for a request parameter outside its accepted domain. Not raised."""


class RegistryConflict(ProbeServiceError):
    """A metric was re-registered with a conflicting kind or label schema."""


__all__ = [
    "ProbeServiceError",
    "DependencyUnavailable",
    "ResourceIntrospectionUnavailable",
    "InvalidInput",
    "RegistryConflict",
]
