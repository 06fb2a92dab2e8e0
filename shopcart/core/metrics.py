"""
Cart operation metrics.

Prometheus-compatible counters and histograms kept in process memory:
- operation counts by outcome
- operation latency
- errors by exception type
"""
from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class MetricValue:
    """Single metric value with its labels."""

    value: float
    labels: dict[str, str] = field(default_factory=dict)


class _LabeledMetric:
    kind = "untyped"

    def __init__(self, name: str, description: str, labels: list[str] | None = None):
        self.name = name
        self.description = description
        self.label_names = labels or []
        self._lock = threading.Lock()

    def _labels_to_key(self, labels: dict) -> tuple:
        return tuple(str(labels.get(name, "")) for name in self.label_names)

    def _key_to_labels(self, key: tuple) -> dict[str, str]:
        return dict(zip(self.label_names, key))


class Counter(_LabeledMetric):
    """Prometheus-style counter metric."""

    kind = "counter"

    def __init__(self, name: str, description: str, labels: list[str] | None = None):
        super().__init__(name, description, labels)
        self._values: dict[tuple, float] = defaultdict(float)

    def inc(self, amount: float = 1, **labels) -> None:
        if amount < 0:
            raise ValueError("Counter can only increase")
        key = self._labels_to_key(labels)
        with self._lock:
            self._values[key] += amount

    def get(self, **labels) -> float:
        key = self._labels_to_key(labels)
        with self._lock:
            return self._values.get(key, 0)

    def total(self) -> float:
        with self._lock:
            return sum(self._values.values())

    def collect(self) -> list[MetricValue]:
        with self._lock:
            items = list(self._values.items())
        return [MetricValue(value=value, labels=self._key_to_labels(key)) for key, value in items]


class Histogram(_LabeledMetric):
    """Prometheus-style histogram metric (seconds)."""

    kind = "histogram"
    DEFAULT_BUCKETS = (0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1, 2.5, float("inf"))

    def __init__(
        self,
        name: str,
        description: str,
        labels: list[str] | None = None,
        buckets: tuple | None = None,
    ):
        super().__init__(name, description, labels)
        self.buckets = tuple(sorted(buckets or self.DEFAULT_BUCKETS))
        self._counts: dict[tuple, dict[float, int]] = defaultdict(
            lambda: dict.fromkeys(self.buckets, 0)
        )
        self._sums: dict[tuple, float] = defaultdict(float)
        self._totals: dict[tuple, int] = defaultdict(int)

    def observe(self, value: float, **labels) -> None:
        key = self._labels_to_key(labels)
        with self._lock:
            self._sums[key] += value
            self._totals[key] += 1
            for bucket in self.buckets:
                if value <= bucket:
                    self._counts[key][bucket] += 1

    def count(self, **labels) -> int:
        with self._lock:
            return self._totals.get(self._labels_to_key(labels), 0)

    def get_avg(self, **labels) -> float:
        key = self._labels_to_key(labels)
        with self._lock:
            total = self._totals.get(key, 0)
            if total == 0:
                return 0
            return self._sums.get(key, 0) / total

    def overall_avg(self) -> float:
        """Average across every label set."""
        with self._lock:
            total = sum(self._totals.values())
            if total == 0:
                return 0
            return sum(self._sums.values()) / total

    def collect(self) -> list[MetricValue]:
        """Collect cumulative buckets plus sum and count per label set."""
        result = []
        with self._lock:
            for key, total in self._totals.items():
                labels = self._key_to_labels(key)
                for bucket in self.buckets:
                    le = "+Inf" if bucket == float("inf") else repr(bucket)
                    result.append(
                        MetricValue(value=self._counts[key][bucket], labels={**labels, "le": le})
                    )
                result.append(MetricValue(value=self._sums[key], labels={**labels, "le": "sum"}))
                result.append(MetricValue(value=total, labels={**labels, "le": "count"}))
        return result


class MetricsRegistry:
    """Central registry for cart metrics."""

    def __init__(self, namespace: str = "shopcart"):
        self._metrics: dict[str, Any] = {}
        self._start_time = datetime.now(timezone.utc)
        self.namespace = namespace

        self.operations_total = self.counter(
            f"{namespace}_cart_operations_total",
            "Total cart operations",
            ["operation", "status"],
        )
        self.operation_duration = self.histogram(
            f"{namespace}_cart_operation_duration_seconds",
            "Cart operation duration in seconds",
            ["operation"],
        )
        self.errors_total = self.counter(
            f"{namespace}_cart_errors_total",
            "Failed cart operations",
            ["operation", "error_type"],
        )

    def counter(self, name: str, description: str, labels: list[str] | None = None) -> Counter:
        """Create or get a counter metric."""
        if name not in self._metrics:
            self._metrics[name] = Counter(name, description, labels)
        return self._metrics[name]

    def histogram(
        self, name: str, description: str, labels: list[str] | None = None, buckets: tuple | None = None
    ) -> Histogram:
        """Create or get a histogram metric."""
        if name not in self._metrics:
            self._metrics[name] = Histogram(name, description, labels, buckets)
        return self._metrics[name]

    def uptime_seconds(self) -> float:
        return (datetime.now(timezone.utc) - self._start_time).total_seconds()

    def export_prometheus(self) -> str:
        """Export all metrics in Prometheus text format."""
        uptime_name = f"{self.namespace}_uptime_seconds"
        lines = [
            f"# HELP {uptime_name} Registry uptime in seconds",
            f"# TYPE {uptime_name} gauge",
            f"{uptime_name} {self.uptime_seconds():.2f}",
            "",
        ]

        for name, metric in self._metrics.items():
            lines.append(f"# HELP {name} {metric.description}")
            lines.append(f"# TYPE {name} {metric.kind}")
            for mv in metric.collect():
                labels = dict(mv.labels)
                series = name
                if metric.kind == "histogram":
                    le = labels.pop("le")
                    if le in ("sum", "count"):
                        series = f"{name}_{le}"
                    else:
                        series = f"{name}_bucket"
                        labels["le"] = le
                if labels:
                    label_str = ",".join(f'{k}="{v}"' for k, v in labels.items())
                    lines.append(f"{series}{{{label_str}}} {mv.value}")
                else:
                    lines.append(f"{series} {mv.value}")
            lines.append("")

        return "\n".join(lines)

    def get_summary(self) -> dict[str, Any]:
        """Get human-readable metrics summary."""
        return {
            "uptime_hours": round(self.uptime_seconds() / 3600, 2),
            "total_operations": self.operations_total.total(),
            "total_errors": self.errors_total.total(),
            "avg_operation_duration_ms": round(self.operation_duration.overall_avg() * 1000, 3),
        }


# Global metrics instance
metrics = MetricsRegistry()
