"""Metrics middleware — the innermost stage of the chain.

Counts every request that reaches it by endpoint and tracks the
in-flight gauge.  Every ``POST /v1/check`` is timed, whatever its
outcome; successful checks also add one findings count per returned
match (the router leaves the
:class:`~grammar_spine.checking.models.CheckResult` on
``request.state.check_result``).

Unexpected exceptions escaping the router are turned into a 500
``INTERNAL_ERROR`` here, so the outer stages still see a response and
the request ID still reaches the client.

Tags:
    grammar-spine, api, middleware, metrics, prometheus

Doc-Types:
    api-reference
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from grammar_spine.api.middleware.errors import endpoint_label, internal_error_response
from grammar_spine.observability.metrics import ServiceMetrics

CHECK_PATH = "/v1/check"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record request counters, in-flight gauge and check timings."""

    def __init__(self, app: object, metrics: ServiceMetrics) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._metrics = metrics

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        self._metrics.record_request(endpoint_label(path))
        self._metrics.in_flight.inc()
        start = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                response = internal_error_response(request, exc)
        finally:
            self._metrics.in_flight.dec()

        if path == CHECK_PATH and request.method == "POST":
            self._metrics.record_check_duration(time.perf_counter() - start)
            result = getattr(request.state, "check_result", None)
            if result is not None:
                self._metrics.record_findings(result.categories())
        return response
