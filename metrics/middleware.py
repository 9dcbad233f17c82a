# ============================================================================
# REQUEST METRICS MIDDLEWARE
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - ASGI request counter
# PURPOSE: Count served HTTP requests into http_requests_total
# CREATED: 19 OCT 2026
# ============================================================================
"""
Request Metrics Middleware

Plain ASGI middleware that increments http_requests_total once per HTTP
request, labeled with method, endpoint (route template when routing
matched, "<unmatched>" otherwise), status code and server type. Requests that
raise are counted as 500 and the exception is re-raised.
"""

import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

from core.logging import log_context
from core.runtime import RuntimeDescriptor
from metrics.collectors import register_request_counter
from metrics.registry import MetricsRegistry

logger = logging.getLogger(__name__)

Scope = Dict[str, Any]
Message = Dict[str, Any]
Receive = Callable[[], Awaitable[Message]]
Send = Callable[[Message], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]


def _request_id(scope: Scope, header_name: bytes = b"x-request-id") -> str:
    for name, value in scope.get("headers", []):
        if name.lower() == header_name:
            return value.decode("latin-1")
    return uuid.uuid4().hex[:12]


UNMATCHED_ENDPOINT = "<unmatched>"


def _endpoint(scope: Scope) -> str:
    # All unrouted requests share one series
    route = scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ENDPOINT


class RequestMetricsMiddleware:
    """
    Counts requests into the injected registry.

    Args:
        app: Wrapped ASGI application
        registry: Metrics registry
        runtime: Runtime descriptor (server_type label)
        exclude_paths: Paths that are served but not counted
    """

    def __init__(
        self,
        app: ASGIApp,
        registry: MetricsRegistry,
        runtime: RuntimeDescriptor,
        exclude_paths: Optional[Iterable[str]] = None,
    ):
        self.app = app
        self.registry = registry
        self.runtime = runtime
        self.exclude_paths = set(exclude_paths or ())
        self.counter = register_request_counter(registry)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        status = {"code": None}

        async def wrapped_send(message: Message) -> None:
            if message["type"] == "http.response.start":
                status["code"] = message["status"]
            await send(message)

        with log_context(request_id=_request_id(scope)):
            try:
                await self.app(scope, receive, wrapped_send)
            except Exception:
                status["code"] = 500
                raise
            finally:
                self._record(scope, status["code"] or 500)

    def _record(self, scope: Scope, status_code: int) -> None:
        if scope.get("path") in self.exclude_paths:
            return
        self.counter.inc(
            [
                scope.get("method", ""),
                _endpoint(scope),
                str(status_code),
                self.runtime.short_name,
            ]
        )


__all__ = [
    "RequestMetricsMiddleware",
    "UNMATCHED_ENDPOINT",
]
