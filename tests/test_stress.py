# ============================================================================
# STRESS WORKLOAD TESTS
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Tests - Synthetic load bounds and accounting
# PURPOSE: Verify clamping, lenient parsing, cancellation and outcomes
# CREATED: 19 OCT 2026
# ============================================================================
"""
Stress Workload Tests

Durations are kept at zero (or bounded by a small configured max) so the
suite stays fast; the clamp itself is checked against the default bounds.

Run with:
    pytest tests/test_stress.py -v
"""

import threading
from unittest.mock import MagicMock

import pytest

from core.config import StressDefaults
from stress.workload import StressWorkload, clamp, parse_int


MB = 1024 * 1024


def _make_memory(readings=(10 * MB, 12 * MB), peak=40 * MB):
    memory = MagicMock()
    memory.usage.side_effect = list(readings)
    memory.peak.return_value = peak
    return memory


# ============================================================================
# INPUT HANDLING
# ============================================================================

class TestParseInt:

    @pytest.mark.parametrize("raw,expected", [
        (None, 7),
        ("3", 3),
        (" 4 ", 4),
        ("2.9", 2),
        ("-1.5", -1),
        ("abc", 0),
        ("", 0),
        ("inf", 0),
        ("nan", 0),
        (5, 5),
    ])
    def test_lenient(self, raw, expected):
        assert parse_int(raw, default=7) == expected


class TestClamp:

    def test_default_bounds(self):
        workload = StressWorkload(StressDefaults(), MagicMock())
        assert workload.clamp_duration(999) == 10
        assert workload.clamp_memory(999) == 50
        assert workload.clamp_iterations(10 ** 6) == 10000

    def test_negative_clamps_to_zero(self):
        assert clamp(-5, 10) == 0
        workload = StressWorkload(StressDefaults(), MagicMock())
        assert workload.clamp_duration(-3) == 0
        assert workload.clamp_memory(-3) == 0


# ============================================================================
# STRESS RUN
# ============================================================================

class TestStressRun:

    def test_requests_above_bounds_are_clamped(self):
        defaults = StressDefaults(max_duration_seconds=0, max_memory_mb=2)
        workload = StressWorkload(defaults, _make_memory())
        outcome = workload.run(999, 999)
        assert outcome.duration_requested_s == 0
        assert outcome.memory_requested_mb == 2
        assert outcome.cancelled is False

    def test_accounting_from_memory_source(self):
        workload = StressWorkload(StressDefaults(), _make_memory((10 * MB, 12.5 * MB), 40 * MB))
        outcome = workload.run(0, 1)
        assert outcome.memory_used_mb == 2.5
        assert outcome.peak_memory_mb == 40.0
        assert outcome.duration_actual_s >= 0
        assert outcome.timestamp.endswith("Z")

    def test_busy_loop_honours_duration(self):
        defaults = StressDefaults(max_duration_seconds=1)
        workload = StressWorkload(defaults, _make_memory())
        outcome = workload.run(1, 0)
        assert outcome.duration_actual_s >= 1.0

    def test_cancel_stops_early(self):
        cancel = threading.Event()
        cancel.set()
        workload = StressWorkload(StressDefaults(), _make_memory())
        outcome = workload.run(10, 50, cancel=cancel)
        assert outcome.cancelled is True
        assert outcome.duration_requested_s == 10
        assert outcome.duration_actual_s < 1.0

    def test_outcome_dict(self):
        workload = StressWorkload(StressDefaults(), _make_memory())
        data = workload.run(0, 0).to_dict()
        assert set(data) == {
            "duration_requested_s",
            "duration_actual_s",
            "memory_requested_mb",
            "memory_used_mb",
            "peak_memory_mb",
            "timestamp",
            "cancelled",
        }


# ============================================================================
# PERFORMANCE BENCHMARK
# ============================================================================

class TestPerformanceRun:

    def test_reports_throughput(self):
        workload = StressWorkload(StressDefaults(), _make_memory())
        outcome = workload.run_performance(200)
        assert outcome.iterations == 200
        assert outcome.execution_time_ms >= 0
        assert outcome.operations_per_second > 0

    def test_iterations_clamped(self):
        defaults = StressDefaults(max_iterations=50)
        workload = StressWorkload(defaults, _make_memory())
        assert workload.run_performance(10 ** 6).iterations == 50

    def test_zero_iterations(self):
        workload = StressWorkload(StressDefaults(), _make_memory())
        outcome = workload.run_performance(0)
        assert outcome.iterations == 0
