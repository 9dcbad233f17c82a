# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across all components
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

Provides structured logging for the probe service.

Features:
- Component-based loggers
- Contextual fields (request_id, probe, check)
- JSON output for log aggregation (LOG_FORMAT=json)
- Human-readable output for local development

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger("health.aggregator")

    with log_context(probe="ready", request_id="req-123"):
        logger.info("Running readiness checks")
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union
from enum import Enum


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    API = "api"
    PROBE = "probe"
    METRICS = "metrics"
    STRESS = "stress"
    INFRASTRUCTURE = "infrastructure"


@dataclass
class LogContext:
    """
    Context for structured logging.

    Stored per asyncio task / thread through a context variable, so
    concurrent requests on the same event loop keep separate contexts.
    """
    request_id: Optional[str] = None
    probe: Optional[str] = None
    check: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        result = {}
        for key, value in asdict(self).items():
            if value is not None and key != "extra":
                result[key] = value
        if self.extra:
            result.update(self.extra)
        return result


_context_stack: ContextVar[Tuple[LogContext, ...]] = ContextVar(
    "log_context_stack", default=()
)


def get_current_context() -> LogContext:
    """Get current logging context."""
    stack = _context_stack.get()
    if stack:
        return stack[-1]
    return LogContext()


@contextmanager
def log_context(**kwargs):
    """
    Context manager for adding logging context.

    Args:
        **kwargs: Context fields to add

    Example:
        with log_context(probe="health", check="database"):
            logger.warning("Check failed")
    """
    parent = get_current_context()
    new_context = LogContext(
        request_id=kwargs.get("request_id", parent.request_id),
        probe=kwargs.get("probe", parent.probe),
        check=kwargs.get("check", parent.check),
        component=kwargs.get("component", parent.component),
        operation=kwargs.get("operation", parent.operation),
        extra={**parent.extra, **kwargs.get("extra", {})},
    )

    token = _context_stack.set(_context_stack.get() + (new_context,))
    try:
        yield new_context
    finally:
        _context_stack.reset(token)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# Library loggers that are chatty at INFO
NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "psycopg.pool")


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line for log aggregation.

    Record layout:
        {"ts", "level", "logger", "msg", "context"?, "data"?, "exc"?, "service"?}

    Static fields (service name, server type) are attached once through
    configure_logging(static_fields=...).
    """

    def __init__(
        self,
        include_context: bool = True,
        static_fields: Optional[Dict[str, Any]] = None,
    ):
        super().__init__()
        self.include_context = include_context
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": _utc_timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            context = get_current_context().to_dict()
            if context:
                entry["context"] = context

        data = getattr(record, "data", None)
        if data:
            entry["data"] = data

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        if record.levelno >= logging.WARNING:
            entry["where"] = f"{record.module}:{record.funcName}:{record.lineno}"

        entry.update(self.static_fields)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """
    Single-line console format for development:

        2026-10-19T12:00:00.000Z WARNING  health.core [probe=ready check=database] Check failed
    """

    CONTEXT_KEYS = ("request_id", "probe", "check", "operation")

    def format(self, record: logging.LogRecord) -> str:
        context = get_current_context()
        tags = [
            f"{key}={getattr(context, key)}"
            for key in self.CONTEXT_KEYS
            if getattr(context, key)
        ]
        tag_str = f" [{' '.join(tags)}]" if tags else ""

        line = f"{_utc_timestamp()} {record.levelname:<8} {record.name}{tag_str} {record.getMessage()}"

        data = getattr(record, "data", None)
        if data:
            line += f" {data}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that tags records with a component.

    Keyword data passed as extra= lands in record.data, where both
    formatters pick it up.
    """

    def process(self, msg, kwargs):
        data = dict(kwargs.pop("extra", None) or {})
        component = self.extra.get("component") if self.extra else None
        if component is not None:
            data.setdefault("component", component.value)
        if data:
            kwargs["extra"] = {"data": data}
        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a component-tagged logger.

    Args:
        name: Logger name, usually __name__
        component: Optional component type for categorization
    """
    return ContextLogger(logging.getLogger(name), {"component": component})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
    static_fields: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Root level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use StructuredFormatter instead of HumanFormatter
        static_fields: Fields added to every JSON record
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if json_output:
        formatter: logging.Formatter = StructuredFormatter(static_fields=static_fields)
    else:
        formatter = HumanFormatter()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
]
