"""Observability package for grammar-spine.

Key components:
- metrics: Prometheus-style counters, gauges and histograms
- tracing: In-process spans bound onto the structured log context
"""

from .metrics import (
    Counter,
    Gauge,
    Histogram,
    MetricsRegistry,
    ServiceMetrics,
)
from .tracing import Span, current_span, start_span

__all__ = [
    # Metrics
    "Counter",
    "Gauge",
    "Histogram",
    "MetricsRegistry",
    "ServiceMetrics",
    # Tracing
    "Span",
    "current_span",
    "start_span",
]
