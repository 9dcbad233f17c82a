# ============================================================================
# METRICS TESTS
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Tests - Registry, exposition format and producers
# PURPOSE: Verify registration semantics, rendering and collectors
# CREATED: 19 OCT 2026
# ============================================================================
"""
Metrics Tests

Covers:
1. get_or_register idempotence and conflicts
2. set/inc semantics and label validation
3. Text exposition: ordering, escaping, number formatting
4. Concurrent writers while rendering
5. MetricsCollector producers and failure isolation

Run with:
    pytest tests/test_metrics.py -v
"""

import asyncio
import math
import re
import threading
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.errors import DependencyUnavailable, RegistryConflict
from core.runtime import RuntimeDescriptor, RuntimeKind
from infrastructure.bytecode import BytecodeCacheStatus
from metrics.collectors import MetricsCollector
from metrics.registry import MetricKind, MetricsRegistry, format_value, render_text


# ============================================================================
# FIXTURES
# ============================================================================

SAMPLE_LINE = re.compile(r'^([a-zA-Z_:][a-zA-Z0-9_:]*)(\{(.*)\})? (\S+)$')
LABEL_PAIR = re.compile(r'([a-zA-Z_][a-zA-Z0-9_]*)="((?:[^"\\]|\\.)*)"')


def _parse_samples(text):
    """Map (name, labels) -> value for every sample line."""
    samples = {}
    for line in text.splitlines():
        if not line or line.startswith("#"):
            continue
        match = SAMPLE_LINE.match(line)
        assert match, f"Unparseable line: {line!r}"
        name, _, labels, value = match.groups()
        pairs = tuple(LABEL_PAIR.findall(labels or ""))
        samples[(name, pairs)] = float(value)
    return samples


def _make_runtime(kind=RuntimeKind.EMBEDDED_SERVER):
    return RuntimeDescriptor(
        kind=kind,
        server_name="uvicorn" if kind == RuntimeKind.EMBEDDED_SERVER else "gunicorn",
        server_version="0.30.6",
        language_version="3.12.1",
        framework_version="0.115.0",
        cpu_count=4,
    )


# ============================================================================
# REGISTRATION
# ============================================================================

class TestRegistration:

    def test_same_identity_returns_same_metric(self):
        registry = MetricsRegistry()
        first = registry.get_or_register("x", MetricKind.GAUGE, "help", ["a"])
        second = registry.get_or_register("x", MetricKind.GAUGE, "other help", ["a"])
        assert first is second
        assert len(registry) == 1

    def test_kind_conflict_raises(self):
        registry = MetricsRegistry()
        registry.get_or_register("x", MetricKind.GAUGE, "help")
        with pytest.raises(RegistryConflict):
            registry.get_or_register("x", MetricKind.COUNTER, "help")

    def test_label_schema_conflict_raises(self):
        registry = MetricsRegistry()
        registry.get_or_register("x", MetricKind.GAUGE, "help", ["a"])
        with pytest.raises(RegistryConflict):
            registry.get_or_register("x", MetricKind.GAUGE, "help", ["b"])

    def test_namespace_prefixes_names(self):
        registry = MetricsRegistry(namespace="app")
        metric = registry.gauge("queue_info", "help")
        assert metric.name == "app_queue_info"
        assert "queue_info" in registry

    def test_label_count_mismatch_raises(self):
        registry = MetricsRegistry()
        metric = registry.gauge("x", "help", ["a", "b"])
        with pytest.raises(ValueError):
            registry.set(metric, ["only-one"], 1)


class TestSampleSemantics:

    def test_set_overwrites(self):
        registry = MetricsRegistry()
        metric = registry.gauge("x", "help", ["a"])
        registry.set(metric, ["v"], 1)
        registry.set(metric, ["v"], 5)
        assert metric.get(["v"]) == 5
        assert len(metric.samples()) == 1

    def test_remove_and_clear_drop_samples(self):
        registry = MetricsRegistry()
        metric = registry.gauge("x", "help", ["a"])
        metric.set(["one"], 1)
        metric.set(["two"], 2)
        metric.remove(["one"])
        metric.remove(["missing"])
        assert [s.label_values for s in metric.samples()] == [("two",)]
        metric.clear()
        assert metric.samples() == []
        assert render_text([metric]) == "# HELP x help\n# TYPE x gauge\n"

    def test_set_overwrites_counters_too(self):
        registry = MetricsRegistry()
        metric = registry.counter("c", "help")
        registry.set(metric, [], 10)
        registry.set(metric, [], 3)
        assert metric.get() == 3

    def test_inc_accumulates_counter(self):
        registry = MetricsRegistry()
        metric = registry.counter("c", "help", ["path"])
        metric.inc(["/ping"])
        metric.inc(["/ping"], 2)
        assert metric.get(["/ping"]) == 3

    def test_inc_rejects_gauges_and_negative_amounts(self):
        registry = MetricsRegistry()
        with pytest.raises(TypeError):
            registry.gauge("g", "help").inc()
        with pytest.raises(ValueError):
            registry.counter("c", "help").inc(amount=-1)


# ============================================================================
# EXPOSITION
# ============================================================================

class TestRender:

    def test_queue_info_line(self):
        registry = MetricsRegistry(namespace=None)
        metric = registry.get_or_register(
            "queue_info", MetricKind.GAUGE, "Queue connection information",
            ["connection", "driver"],
        )
        registry.set(metric, ["redis", "redis"], 1)
        assert registry.render() == (
            "# HELP queue_info Queue connection information\n"
            "# TYPE queue_info gauge\n"
            'queue_info{connection="redis",driver="redis"} 1\n'
        )

    def test_registration_and_write_order(self):
        registry = MetricsRegistry()
        b = registry.gauge("b_metric", "B", ["k"])
        a = registry.counter("a_metric", "A")
        registry.set(b, ["z"], 1)
        registry.set(b, ["y"], 2)
        registry.set(a, [], 3)
        lines = [line for line in registry.render().splitlines() if not line.startswith("#")]
        assert lines == ['b_metric{k="z"} 1', 'b_metric{k="y"} 2', "a_metric 3"]

    def test_metric_without_samples_emits_headers(self):
        registry = MetricsRegistry()
        registry.counter("requests_total", "Requests")
        assert registry.render() == (
            "# HELP requests_total Requests\n"
            "# TYPE requests_total counter\n"
        )

    def test_empty_registry_renders_empty(self):
        assert MetricsRegistry().render() == ""

    def test_label_values_are_escaped(self):
        registry = MetricsRegistry()
        metric = registry.gauge("x", "help", ["v"])
        registry.set(metric, ['a"b\\c\nd'], 1)
        assert 'x{v="a\\"b\\\\c\\nd"} 1' in registry.render()

    @pytest.mark.parametrize("value,expected", [
        (1.0, "1"),
        (0.0, "0"),
        (-3.0, "-3"),
        (1.5, "1.5"),
        (75.55, "75.55"),
        (math.inf, "+Inf"),
        (-math.inf, "-Inf"),
        (math.nan, "NaN"),
    ])
    def test_format_value(self, value, expected):
        assert format_value(value) == expected

    def test_render_is_repeatable(self):
        registry = MetricsRegistry()
        registry.set(registry.gauge("x", "help"), [], 2)
        assert registry.render() == registry.render()

    def test_rendered_output_parses_back(self):
        registry = MetricsRegistry(namespace="app")
        memory = registry.gauge("process_memory_usage_bytes", "Memory", ["type"])
        registry.set(memory, ["current"], 1048576)
        registry.set(memory, ["peak"], 2097152)
        registry.set(registry.gauge("process_uptime_seconds", "Uptime"), [], 12.5)

        samples = _parse_samples(registry.render())
        assert samples == {
            ("app_process_memory_usage_bytes", (("type", "current"),)): 1048576.0,
            ("app_process_memory_usage_bytes", (("type", "peak"),)): 2097152.0,
            ("app_process_uptime_seconds", ()): 12.5,
        }

    def test_render_text_accepts_metric_list(self):
        registry = MetricsRegistry()
        registry.set(registry.gauge("x", "help"), [], 1)
        assert render_text(registry.metrics()) == registry.render()


class TestConcurrency:

    def test_writers_and_renderer(self):
        registry = MetricsRegistry()
        counter = registry.counter("hits_total", "Hits", ["worker"])
        errors = []

        def write(worker):
            try:
                for _ in range(500):
                    counter.inc([worker])
            except Exception as e:
                errors.append(e)

        def render():
            try:
                for _ in range(50):
                    _parse_samples(registry.render())
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=write, args=(str(i),)) for i in range(4)]
        threads.append(threading.Thread(target=render))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert sum(sample.value for sample in counter.samples()) == 2000


# ============================================================================
# PRODUCERS
# ============================================================================

def _make_collector(registry, runtime=None, **overrides):
    executor = MagicMock()
    executor.connection_name = "pgsql"
    executor.active_connections = AsyncMock(return_value=3)

    cache = MagicMock()
    cache.store = "Redis"
    cache.driver = "redis"

    memory = MagicMock()
    memory.usage.return_value = 1048576
    memory.peak.return_value = 2097152

    reader = MagicMock()
    reader.status.return_value = BytecodeCacheStatus(
        enabled=True, cached_scripts=40, hits=40, misses=10,
        used_memory=8192, free_memory=0, wasted_memory=512,
    )

    options = dict(
        executor=executor,
        cache=cache,
        queue_connection="redis",
        queue_driver="redis",
        memory_source=memory,
        bytecode_reader=reader,
    )
    options.update(overrides)
    return MetricsCollector(registry, runtime or _make_runtime(), **options)


class _UnreachableCache:
    driver = "redis"

    @property
    def store(self):
        raise RuntimeError("cache connection lost")


class TestMetricsCollector:

    def test_collects_every_producer(self):
        registry = MetricsRegistry(namespace="app")
        asyncio.run(_make_collector(registry).collect())
        samples = _parse_samples(registry.render())

        assert samples[("app_database_connections_active", (("connection", "pgsql"),))] == 3
        assert samples[("app_cache_info", (("store", "Redis"), ("driver", "redis")))] == 1
        assert samples[("app_queue_info", (("connection", "redis"), ("driver", "redis")))] == 1
        assert samples[("app_process_memory_usage_bytes", (("type", "peak"),))] == 2097152
        assert samples[("app_bytecode_cache_memory_bytes", (("type", "wasted"),))] == 512
        assert samples[("app_bytecode_cache_statistics", (("type", "hit_rate"),))] == 80
        assert samples[("app_embedded_server_stats", (("type", "cpu_cores"),))] == 4
        assert samples[(
            "app_server_info",
            (("server_type", "uvicorn"), ("python_version", "3.12.1"),
             ("framework_version", "0.115.0")),
        )] == 1
        assert ("app_process_uptime_seconds", ()) in samples
        assert "# TYPE app_http_requests_total counter" in registry.render()

    def test_database_failure_omits_sample(self):
        executor = MagicMock()
        executor.connection_name = "pgsql"
        executor.active_connections = AsyncMock(
            side_effect=DependencyUnavailable("database", "down")
        )
        registry = MetricsRegistry(namespace="app")
        asyncio.run(_make_collector(registry, executor=executor).collect())

        text = registry.render()
        assert "app_database_connections_active" not in text
        assert "app_server_info" in text

    def test_disabled_bytecode_cache_omits_samples(self):
        reader = MagicMock()
        reader.status.return_value = None
        registry = MetricsRegistry(namespace="app")
        asyncio.run(_make_collector(registry, bytecode_reader=reader).collect())
        assert "bytecode_cache" not in registry.render()

    def test_embedded_server_stats_from_provider(self):
        registry = MetricsRegistry(namespace="app")
        collector = _make_collector(registry, server_stats=lambda: {"connections": 7})
        asyncio.run(collector.collect())
        samples = _parse_samples(registry.render())
        assert samples[("app_embedded_server_stats", (("type", "connections"),))] == 7

    def test_worker_counters_only_under_worker_manager(self):
        worker_status = MagicMock()
        worker_status.fetch = AsyncMock(return_value={"active": 2, "idle": 3, "total": 5})

        embedded = MetricsRegistry(namespace="app")
        asyncio.run(_make_collector(embedded, worker_status=worker_status).collect())
        assert "worker_manager_processes" not in embedded.render()
        worker_status.fetch.assert_not_called()

        managed = MetricsRegistry(namespace="app")
        runtime = _make_runtime(RuntimeKind.WORKER_MANAGER)
        asyncio.run(_make_collector(managed, runtime=runtime, worker_status=worker_status).collect())
        samples = _parse_samples(managed.render())
        assert samples[("app_worker_manager_processes", (("state", "total"),))] == 5
        assert "embedded_server_stats" not in managed.render()

    def test_repeated_collection_overwrites(self):
        registry = MetricsRegistry(namespace="app")
        collector = _make_collector(registry)
        asyncio.run(collector.collect())
        collector.executor.active_connections.return_value = 9
        asyncio.run(collector.collect())
        samples = _parse_samples(registry.render())
        assert samples[("app_database_connections_active", (("connection", "pgsql"),))] == 9

    def test_failed_source_removes_earlier_samples(self):
        registry = MetricsRegistry(namespace="app")
        collector = _make_collector(registry)
        asyncio.run(collector.collect())
        assert 'app_database_connections_active{connection="pgsql"} 3' in registry.render()

        collector.executor.active_connections.side_effect = DependencyUnavailable("database", "down")
        collector.cache = _UnreachableCache()
        collector.memory_source.usage.side_effect = RuntimeError("no procfs")
        collector.bytecode_reader.status.return_value = None
        asyncio.run(collector.collect())

        samples = _parse_samples(registry.render())
        names = {name for name, _ in samples}
        assert "app_database_connections_active" not in names
        assert "app_cache_info" not in names
        assert "app_process_memory_usage_bytes" not in names
        assert "app_bytecode_cache_memory_bytes" not in names
        assert "app_bytecode_cache_statistics" not in names
        assert "app_server_info" in names

        collector.executor.active_connections.side_effect = None
        asyncio.run(collector.collect())
        samples = _parse_samples(registry.render())
        assert samples[("app_database_connections_active", (("connection", "pgsql"),))] == 3

    def test_worker_failure_removes_earlier_counters(self):
        worker_status = MagicMock()
        worker_status.fetch = AsyncMock(return_value={"active": 2, "idle": 3, "total": 5})
        registry = MetricsRegistry(namespace="app")
        runtime = _make_runtime(RuntimeKind.WORKER_MANAGER)
        collector = _make_collector(registry, runtime=runtime, worker_status=worker_status)
        asyncio.run(collector.collect())

        worker_status.fetch.return_value = {"active": 1, "total": 4}
        asyncio.run(collector.collect())
        samples = _parse_samples(registry.render())
        assert ("app_worker_manager_processes", (("state", "idle"),)) not in samples
        assert samples[("app_worker_manager_processes", (("state", "total"),))] == 4

        worker_status.fetch.side_effect = DependencyUnavailable("workers", "timeout")
        asyncio.run(collector.collect())
        assert "app_worker_manager_processes{" not in registry.render()

    def test_server_stats_failure_keeps_only_cpu_cores(self):
        stats = {"connections": 7}

        def provider():
            if stats is None:
                raise RuntimeError("server gone")
            return stats

        registry = MetricsRegistry(namespace="app")
        collector = _make_collector(registry, server_stats=provider)
        asyncio.run(collector.collect())
        assert 'app_embedded_server_stats{type="connections"} 7' in registry.render()

        stats = None
        asyncio.run(collector.collect())
        samples = _parse_samples(registry.render())
        assert ("app_embedded_server_stats", (("type", "connections"),)) not in samples
        assert samples[("app_embedded_server_stats", (("type", "cpu_cores"),))] == 4
