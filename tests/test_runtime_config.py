# ============================================================================
# RUNTIME, CONFIGURATION AND LOGGING TESTS
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Tests - Ambient layers
# PURPOSE: Verify runtime detection, env configuration and log context
# CREATED: 19 OCT 2026
# ============================================================================
"""
Runtime, Configuration and Logging Tests

Run with:
    pytest tests/test_runtime_config.py -v
"""

import asyncio
import json
import logging
import platform
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from core.config import Defaults, StressDefaults, get_defaults, reset_defaults
from core.errors import InvalidInput, ProbeServiceError
from core.logging import StructuredFormatter, get_current_context, log_context
from core.runtime import RuntimeKind, resolve_runtime
from stress.workload import StressWorkload, parse_int


# ============================================================================
# RUNTIME DETECTION
# ============================================================================

FASTAPI = SimpleNamespace(__version__="0.115.0")


class TestResolveRuntime:

    def test_embedded_server(self):
        runtime = resolve_runtime(
            modules={"uvicorn": SimpleNamespace(__version__="0.30.6"), "fastapi": FASTAPI},
            environ={},
        )
        assert runtime.kind == RuntimeKind.EMBEDDED_SERVER
        assert runtime.identity == "uvicorn-0.30.6"
        assert runtime.short_name == "uvicorn"
        assert runtime.framework_version == "0.115.0"

    def test_worker_manager_from_environment(self):
        runtime = resolve_runtime(
            modules={"uvicorn": SimpleNamespace(__version__="0.30.6")},
            environ={"SERVER_SOFTWARE": "gunicorn/22.0.0"},
        )
        assert runtime.kind == RuntimeKind.WORKER_MANAGER
        assert runtime.server_version == "22.0.0"
        assert runtime.identity == f"gunicorn-{platform.python_version()}"
        assert runtime.short_name == "gunicorn"

    def test_unknown(self):
        runtime = resolve_runtime(modules={}, environ={})
        assert runtime.kind == RuntimeKind.UNKNOWN
        assert runtime.identity == f"unknown-{platform.python_version()}"
        assert runtime.framework_version == "unknown"
        assert runtime.cpu_count >= 1

    def test_uptime_increases(self):
        runtime = resolve_runtime(modules={}, environ={})
        assert runtime.uptime_seconds >= 0


# ============================================================================
# CONFIGURATION
# ============================================================================

class TestDefaults:

    def setup_method(self):
        reset_defaults()

    def teardown_method(self):
        reset_defaults()

    def test_dataclass_defaults(self):
        defaults = Defaults()
        assert defaults.stress.max_duration_seconds == 10
        assert defaults.stress.max_memory_mb == 50
        assert defaults.probes.memory_threshold == 0.9
        assert defaults.probes.memory_limit == "-1"
        assert defaults.probes.bytecode_refresh_seconds == 60.0
        assert defaults.metrics.namespace == "app"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "staging")
        monkeypatch.setenv("MEMORY_LIMIT", "512M")
        monkeypatch.setenv("STRESS_MAX_MEMORY_MB", "20")
        monkeypatch.setenv("METRICS_NAMESPACE", "demo")
        monkeypatch.setenv("DB_CONNECTION", "postgres")

        defaults = get_defaults()
        assert defaults.service.environment == "staging"
        assert defaults.probes.memory_limit == "512M"
        assert defaults.stress.max_memory_mb == 20
        assert defaults.metrics.namespace == "demo"
        assert defaults.connections.database_connection == "postgres"

    def test_cached_until_reset(self, monkeypatch):
        first = get_defaults()
        assert get_defaults() is first
        reset_defaults()
        assert get_defaults() is not first

    def test_frozen(self):
        defaults = Defaults()
        with pytest.raises(Exception):
            defaults.stress.max_memory_mb = 100


# ============================================================================
# ERROR TAXONOMY
# ============================================================================

class TestErrorTaxonomy:

    def test_invalid_input_is_a_value_error(self):
        assert issubclass(InvalidInput, ValueError)
        assert issubclass(InvalidInput, ProbeServiceError)

    def test_out_of_range_load_parameters_are_clamped_not_rejected(self):
        workload = StressWorkload(StressDefaults(max_duration_seconds=3, max_memory_mb=2), MagicMock())
        assert workload.clamp_duration(-5) == 0
        assert workload.clamp_duration(parse_int("99", 1)) == 3
        assert workload.clamp_memory(parse_int("lots", 1)) == 0


# ============================================================================
# LOGGING
# ============================================================================

class TestLogContext:

    def test_nested_context_inherits_and_restores(self):
        with log_context(request_id="r1"):
            with log_context(probe="ready"):
                current = get_current_context()
                assert current.request_id == "r1"
                assert current.probe == "ready"
            assert get_current_context().probe is None
        assert get_current_context().request_id is None

    def test_concurrent_tasks_keep_separate_context(self):
        async def handler(request_id):
            with log_context(request_id=request_id):
                await asyncio.sleep(0.01)
                return get_current_context().request_id

        async def main():
            return await asyncio.gather(handler("a"), handler("b"))

        assert asyncio.run(main()) == ["a", "b"]

    def test_structured_formatter_includes_context(self):
        formatter = StructuredFormatter(include_context=True)
        record = logging.LogRecord("health", logging.WARNING, __file__, 1, "Check failed", None, None)
        with log_context(probe="health", check="database"):
            payload = json.loads(formatter.format(record))
        assert payload["message"] == "Check failed"
        assert payload["level"] == "WARNING"
        assert payload["context"] == {"probe": "health", "check": "database"}
