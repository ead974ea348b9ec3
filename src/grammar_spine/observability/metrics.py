"""Prometheus-style metrics for the grammar service.

An in-process registry rendered in the Prometheus text exposition
format (0.0.4) by ``GET /metrics``.  Every metric guards its samples
with its own lock, so requests on the worker pool record concurrently.

Metric types:
- Counter: labelled, only goes up (requests, errors, findings)
- Gauge: goes up and down (in-flight requests)
- Histogram: cumulative buckets, sum and count (check duration)

Example:
    >>> metrics = ServiceMetrics()
    >>> metrics.record_request("/v1/check")
    >>> metrics.record_findings(["spelling", "grammar"])
    >>> print(metrics.export_prometheus())
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from typing import TypeVar

from grammar_spine.core.errors import ERROR_KINDS

LabelKey = tuple[tuple[str, str], ...]
Sample = tuple[str, LabelKey, float]

DURATION_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)

M = TypeVar("M", bound="Metric")


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def _render_labels(key: LabelKey) -> str:
    if not key:
        return ""
    return "{" + ",".join(f'{name}="{_escape(value)}"' for name, value in key) + "}"


def _render_number(value: float) -> str:
    if value == float("inf"):
        return "+Inf"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class Metric:
    """One named metric family and its samples."""

    type_name = "untyped"

    def __init__(self, name: str, description: str = "", label_names: Sequence[str] = ()) -> None:
        self.name = name
        self.description = description
        self.label_names = frozenset(label_names)
        self._lock = threading.Lock()

    def _key(self, labels: dict[str, str]) -> LabelKey:
        if labels.keys() != self.label_names:
            raise ValueError(f"{self.name} takes labels {sorted(self.label_names)}, got {sorted(labels)}")
        return tuple(sorted(labels.items()))

    def samples(self) -> Iterator[Sample]:
        """Yield ``(suffix, labels, value)`` for every exported line."""
        raise NotImplementedError

    def render(self) -> list[str]:
        lines = [f"# HELP {self.name} {self.description}"] if self.description else []
        lines.append(f"# TYPE {self.name} {self.type_name}")
        for suffix, key, value in self.samples():
            lines.append(f"{self.name}{suffix}{_render_labels(key)} {_render_number(value)}")
        return lines


class _Scalar(Metric):
    def __init__(self, name: str, description: str = "", label_names: Sequence[str] = ()) -> None:
        super().__init__(name, description, label_names)
        self._values: dict[LabelKey, float] = {}

    def _add(self, amount: float, labels: dict[str, str]) -> None:
        key = self._key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def value(self, **labels: str) -> float:
        key = self._key(labels)
        with self._lock:
            return self._values.get(key, 0.0)

    def samples(self) -> Iterator[Sample]:
        with self._lock:
            values = sorted(self._values.items())
        for key, value in values:
            yield "", key, value


class Counter(_Scalar):
    """Monotonically increasing count, one series per label combination."""

    type_name = "counter"

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        if amount < 0:
            raise ValueError("counters only go up")
        self._add(amount, labels)


class Gauge(_Scalar):
    """Current level of something (requests being handled)."""

    type_name = "gauge"

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        self._add(amount, labels)

    def dec(self, amount: float = 1.0, **labels: str) -> None:
        self._add(-amount, labels)


class Histogram(Metric):
    """Unlabelled distribution with cumulative ``le`` buckets."""

    type_name = "histogram"

    def __init__(self, name: str, description: str = "", buckets: Sequence[float] = DURATION_BUCKETS) -> None:
        super().__init__(name, description)
        self.buckets = tuple(sorted(b for b in buckets if b != float("inf")))
        self._bucket_counts = [0] * len(self.buckets)
        self._count = 0
        self._sum = 0.0

    def observe(self, value: float) -> None:
        with self._lock:
            self._count += 1
            self._sum += value
            for i, bound in enumerate(self.buckets):
                if value <= bound:
                    self._bucket_counts[i] += 1

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    @property
    def sum(self) -> float:
        with self._lock:
            return self._sum

    def samples(self) -> Iterator[Sample]:
        with self._lock:
            bucket_counts, count, total = list(self._bucket_counts), self._count, self._sum
        for bound, n in zip(self.buckets, bucket_counts):
            yield "_bucket", (("le", _render_number(bound)),), n
        yield "_bucket", (("le", "+Inf"),), count
        yield "_sum", (), total
        yield "_count", (), count


class MetricsRegistry:
    """Ordered set of metrics exported together."""

    def __init__(self) -> None:
        self._metrics: dict[str, Metric] = {}
        self._lock = threading.Lock()

    def register(self, metric: M) -> M:
        with self._lock:
            if metric.name in self._metrics:
                raise ValueError(f"metric {metric.name!r} is already registered")
            self._metrics[metric.name] = metric
        return metric

    def export_prometheus(self) -> str:
        """Text exposition of every registered metric."""
        with self._lock:
            metrics = list(self._metrics.values())
        return "\n".join(line for metric in metrics for line in metric.render()) + "\n"


class ServiceMetrics:
    """The grammar service's metrics.

    One instance lives on :class:`~grammar_spine.core.state.ServiceState`
    and is shared by every request.
    """

    def __init__(self) -> None:
        self.registry = MetricsRegistry()
        self.requests = Counter("grammar_requests_total", "Total HTTP requests by endpoint", ["endpoint"])
        self.errors = Counter("grammar_errors_total", "Rejected or failed requests by failure kind", ["kind"])
        self.check_duration = Histogram("grammar_check_duration_seconds", "Check endpoint processing time in seconds")
        self.findings = Counter("grammar_findings_total", "Findings returned by the check endpoint", ["category"])
        self.in_flight = Gauge("grammar_in_flight_requests", "Requests currently being handled")
        for metric in (self.requests, self.errors, self.check_duration, self.findings, self.in_flight):
            self.registry.register(metric)

        # dashboards see every error kind, even at zero
        for kind in ERROR_KINDS:
            self.errors.inc(0, kind=kind)

    def record_request(self, endpoint: str) -> None:
        """Count one request against *endpoint*."""
        self.requests.inc(endpoint=endpoint)

    def record_error(self, kind: str) -> None:
        """Count one failure of *kind* (``payload_too_large``, ``unauthorized`` …)."""
        self.errors.inc(kind=kind)

    def record_check_duration(self, duration_seconds: float) -> None:
        self.check_duration.observe(duration_seconds)

    def record_findings(self, categories: Sequence[str]) -> None:
        """One findings count per returned match, by category."""
        for category in categories:
            self.findings.inc(category=category)

    def export_prometheus(self) -> str:
        return self.registry.export_prometheus()


__all__ = [
    "Counter",
    "Gauge",
    "Histogram",
    "MetricsRegistry",
    "ServiceMetrics",
]
