"""Tests for the Prometheus-style metrics registry."""

from __future__ import annotations

import threading

import pytest

from grammar_spine.observability.metrics import (
    Counter,
    Gauge,
    Histogram,
    MetricsRegistry,
    ServiceMetrics,
)


class TestCounter:
    def test_inc_per_label_set(self):
        c = Counter("requests_total", label_names=["endpoint"])
        c.inc(endpoint="/health")
        c.inc(2, endpoint="/health")
        assert c.value(endpoint="/health") == 3
        assert c.value(endpoint="/metrics") == 0

    def test_cannot_decrease(self):
        with pytest.raises(ValueError):
            Counter("c").inc(-1)

    def test_label_names_enforced(self):
        c = Counter("errors_total", label_names=["kind"])
        with pytest.raises(ValueError):
            c.inc(endpoint="/health")
        with pytest.raises(ValueError):
            c.inc()

    def test_concurrent_increments(self):
        c = Counter("hits_total")

        def worker():
            for _ in range(1000):
                c.inc()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert c.value() == 8000


class TestGauge:
    def test_up_and_down(self):
        g = Gauge("in_flight")
        g.inc()
        g.inc()
        g.dec()
        assert g.value() == 1


class TestHistogram:
    def test_buckets_are_cumulative(self):
        h = Histogram("latency", buckets=(1.0, 0.1))
        for value in (0.05, 0.5, 5.0):
            h.observe(value)
        assert h.count == 3
        assert h.sum == pytest.approx(5.55)
        lines = h.render()
        assert 'latency_bucket{le="0.1"} 1' in lines
        assert 'latency_bucket{le="1"} 2' in lines
        assert 'latency_bucket{le="+Inf"} 3' in lines
        assert "latency_count 3" in lines


class TestMetricsRegistry:
    def test_duplicate_name_rejected(self):
        reg = MetricsRegistry()
        reg.register(Counter("x"))
        with pytest.raises(ValueError):
            reg.register(Gauge("x"))

    def test_export_prometheus(self):
        reg = MetricsRegistry()
        hits = reg.register(Counter("hits_total", "Hits", ["path"]))
        hits.inc(path='/a"b')
        reg.register(Histogram("dur_seconds", "Duration", buckets=(1.0,))).observe(0.5)
        text = reg.export_prometheus()
        assert "# HELP hits_total Hits" in text
        assert "# TYPE hits_total counter" in text
        assert 'hits_total{path="/a\\"b"} 1' in text
        assert "# TYPE dur_seconds histogram" in text
        assert 'dur_seconds_bucket{le="1"} 1' in text
        assert 'dur_seconds_bucket{le="+Inf"} 1' in text
        assert "dur_seconds_sum 0.5" in text
        assert "dur_seconds_count 1" in text
        assert text.endswith("\n")

    def test_registration_order_kept(self):
        reg = MetricsRegistry()
        reg.register(Counter("b_total"))
        reg.register(Counter("a_total"))
        text = reg.export_prometheus()
        assert text.index("b_total") < text.index("a_total")


class TestServiceMetrics:
    def test_predefined_metric_names(self):
        text = ServiceMetrics().export_prometheus()
        for name in (
            "grammar_requests_total",
            "grammar_check_duration_seconds",
            "grammar_findings_total",
            "grammar_errors_total",
            "grammar_in_flight_requests",
        ):
            assert f"# TYPE {name}" in text

    def test_error_kinds_preregistered_at_zero(self):
        text = ServiceMetrics().export_prometheus()
        assert 'grammar_errors_total{kind="payload_too_large"} 0' in text
        assert 'grammar_errors_total{kind="unauthorized"} 0' in text
        assert 'grammar_errors_total{kind="rate_limited"} 0' in text

    def test_record_findings_and_duration(self):
        m = ServiceMetrics()
        m.record_check_duration(0.02)
        m.record_findings(["spelling", "grammar", "spelling"])
        assert m.findings.value(category="spelling") == 2
        assert m.findings.value(category="grammar") == 1
        assert m.check_duration.count == 1

    def test_record_request_and_error(self):
        m = ServiceMetrics()
        m.record_request("/v1/check")
        m.record_error("unauthorized")
        assert m.requests.value(endpoint="/v1/check") == 1
        assert m.errors.value(kind="unauthorized") == 1

    def test_instances_are_independent(self):
        a, b = ServiceMetrics(), ServiceMetrics()
        a.record_request("/health")
        assert b.requests.value(endpoint="/health") == 0
