# ============================================================================
# METRICS REGISTRY
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - Labeled metric series and text exposition
# PURPOSE: Process-lifetime metric store rendered for Prometheus scrapes
# CREATED: 19 OCT 2026
# ============================================================================
"""
Metrics Registry

In-memory collection of named, labeled metric series with get-or-register
semantics and a deterministic Prometheus text renderer (format 0.0.4).

Identity:
    A metric is identified by (name, kind). Registering the same identity
    with the same label names returns the existing Metric object. A name
    registered under another kind, or with other label names, raises
    RegistryConflict.

Write semantics:
    set() overwrites the sample for a label tuple, for every kind.
    Producers mirror absolute values read from external sources on each
    scrape. Counters additionally support inc() for monotonic counting.
    remove() and clear() drop samples whose source went away.

Concurrency:
    Registration is guarded by a registry lock, samples by a per-metric
    lock. render() copies each metric's samples under its lock, so a
    partially written sample never appears in the output.

Usage:
    registry = MetricsRegistry(namespace="app")
    gauge = registry.get_or_register(
        "queue_info", MetricKind.GAUGE, "Queue connection information",
        ["connection", "driver"],
    )
    registry.set(gauge, ["redis", "redis"], 1)
    text = registry.render()
"""

import logging
import math
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.errors import RegistryConflict

logger = logging.getLogger(__name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

LabelValues = Tuple[str, ...]


class MetricKind(str, Enum):
    """Supported metric types."""
    COUNTER = "counter"
    GAUGE = "gauge"


@dataclass(frozen=True)
class MetricSample:
    """One series value of a metric."""
    name: str
    label_names: Tuple[str, ...]
    label_values: LabelValues
    value: float

    @property
    def labels(self) -> Dict[str, str]:
        return dict(zip(self.label_names, self.label_values))


class Metric:
    """
    A named metric owning its label-tuple -> value mapping.

    Obtain instances through MetricsRegistry.get_or_register().
    """

    def __init__(
        self,
        name: str,
        kind: MetricKind,
        help: str,
        label_names: Sequence[str] = (),
    ):
        self.name = name
        self.kind = kind
        self.help = help
        self.label_names: Tuple[str, ...] = tuple(label_names)
        self._samples: Dict[LabelValues, float] = {}
        self._lock = threading.Lock()

    def _key(self, label_values: Sequence[object]) -> LabelValues:
        values = tuple(str(v) for v in label_values)
        if len(values) != len(self.label_names):
            raise ValueError(
                f"Metric {self.name} expects {len(self.label_names)} label values "
                f"{list(self.label_names)}, got {len(values)}"
            )
        return values

    def set(self, label_values: Sequence[object], value: float) -> None:
        """Overwrite the sample for a label tuple."""
        key = self._key(label_values)
        with self._lock:
            self._samples[key] = float(value)

    def inc(self, label_values: Sequence[object] = (), amount: float = 1.0) -> None:
        """Add to a counter sample, starting from zero."""
        if self.kind != MetricKind.COUNTER:
            raise TypeError(f"inc() is only supported on counters, {self.name} is a {self.kind.value}")
        if amount < 0:
            raise ValueError("Counters can only increase")
        key = self._key(label_values)
        with self._lock:
            self._samples[key] = self._samples.get(key, 0.0) + amount

    def remove(self, label_values: Sequence[object]) -> None:
        """Drop the sample for a label tuple, if present."""
        key = self._key(label_values)
        with self._lock:
            self._samples.pop(key, None)

    def clear(self) -> None:
        """Drop every sample, keeping the registration."""
        with self._lock:
            self._samples.clear()

    def get(self, label_values: Sequence[object] = ()) -> Optional[float]:
        key = self._key(label_values)
        with self._lock:
            return self._samples.get(key)

    def samples(self) -> List[MetricSample]:
        """Consistent copy of the current samples, in first-write order."""
        with self._lock:
            items = list(self._samples.items())
        return [
            MetricSample(self.name, self.label_names, label_values, value)
            for label_values, value in items
        ]

    def __repr__(self) -> str:
        return f"Metric(name={self.name!r}, kind={self.kind.value}, labels={list(self.label_names)})"


class MetricsRegistry:
    """
    Registry of metrics for the process lifetime.

    Constructed once at startup and passed explicitly to every producer and
    to the scrape endpoint.

    Args:
        namespace: Optional prefix joined to every metric name with "_"
    """

    def __init__(self, namespace: Optional[str] = None):
        self.namespace = namespace or None
        self._metrics: Dict[str, Metric] = {}
        self._lock = threading.Lock()

    def full_name(self, name: str) -> str:
        if self.namespace:
            return f"{self.namespace}_{name}"
        return name

    def get_or_register(
        self,
        name: str,
        kind: MetricKind,
        help: str,
        label_names: Sequence[str] = (),
    ) -> Metric:
        """
        Return the metric for (name, kind), registering it if needed.

        Raises:
            RegistryConflict: If the name exists with another kind or label schema
        """
        full_name = self.full_name(name)
        label_names = tuple(label_names)
        kind = MetricKind(kind)

        with self._lock:
            existing = self._metrics.get(full_name)
            if existing is None:
                metric = Metric(full_name, kind, help, label_names)
                self._metrics[full_name] = metric
                logger.debug(f"Registered metric: {metric!r}")
                return metric

        if existing.kind != kind:
            raise RegistryConflict(
                f"Metric {full_name} already registered as {existing.kind.value}, "
                f"cannot register as {kind.value}"
            )
        if existing.label_names != label_names:
            raise RegistryConflict(
                f"Metric {full_name} already registered with labels "
                f"{list(existing.label_names)}, got {list(label_names)}"
            )
        return existing

    def counter(self, name: str, help: str, label_names: Sequence[str] = ()) -> Metric:
        return self.get_or_register(name, MetricKind.COUNTER, help, label_names)

    def gauge(self, name: str, help: str, label_names: Sequence[str] = ()) -> Metric:
        return self.get_or_register(name, MetricKind.GAUGE, help, label_names)

    def set(self, metric: Metric, label_values: Sequence[object], value: float) -> None:
        """
        Overwrite a sample.

        Raises:
            ValueError: If the label value count does not match the metric
        """
        metric.set(label_values, value)

    def get(self, name: str) -> Optional[Metric]:
        """Look up a metric by its unprefixed name."""
        with self._lock:
            return self._metrics.get(self.full_name(name))

    def metrics(self) -> List[Metric]:
        """Registered metrics in registration order."""
        with self._lock:
            return list(self._metrics.values())

    def render(self) -> str:
        """Render every metric in the text exposition format."""
        return render_text(self.metrics())

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return self.full_name(name) in self._metrics


# ============================================================================
# TEXT EXPOSITION
# ============================================================================

def escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def format_value(value: float) -> str:
    """Prometheus number formatting: integral floats without a fraction."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def format_sample(sample: MetricSample) -> str:
    if not sample.label_names:
        return f"{sample.name} {format_value(sample.value)}"
    labels = ",".join(
        f'{label}="{escape_label_value(value)}"'
        for label, value in zip(sample.label_names, sample.label_values)
    )
    return f"{sample.name}{{{labels}}} {format_value(sample.value)}"


def render_text(metrics: Iterable[Metric]) -> str:
    """
    Render metrics as exposition text.

    Each metric emits # HELP, # TYPE, then one line per sample.
    """
    lines: List[str] = []
    for metric in metrics:
        lines.append(f"# HELP {metric.name} {escape_help(metric.help)}")
        lines.append(f"# TYPE {metric.name} {metric.kind.value}")
        for sample in metric.samples():
            lines.append(format_sample(sample))
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


__all__ = [
    "CONTENT_TYPE_LATEST",
    "MetricKind",
    "MetricSample",
    "Metric",
    "MetricsRegistry",
    "render_text",
    "format_value",
    "escape_label_value",
]
