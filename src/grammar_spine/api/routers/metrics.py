"""
Metrics router — Prometheus text exposition.

Endpoints:
    GET /metrics   Counters, gauges and histograms of this process

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from grammar_spine.api.deps import Metrics

router = APIRouter()

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@router.get("/metrics", response_class=PlainTextResponse, summary="Prometheus metrics")
async def metrics_endpoint(metrics: Metrics) -> PlainTextResponse:
    """Export Prometheus-compatible metrics."""
    return PlainTextResponse(content=metrics.export_prometheus(), media_type=PROMETHEUS_CONTENT_TYPE)
