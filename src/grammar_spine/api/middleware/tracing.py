"""Tracing middleware — one ``http.request`` span per request.

The span is opened after the request ID is known, so its start and end
log lines carry ``request_id``; it becomes the parent of the
``engine.check`` span opened by the check pipeline.

Tags:
    grammar-spine, api, middleware, tracing, span

Doc-Types:
    api-reference
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from grammar_spine.observability.tracing import start_span


class TracingMiddleware(BaseHTTPMiddleware):
    """Wrap the rest of the chain in an ``http.request`` span."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        attributes = {
            "http.method": request.method,
            "http.path": request.url.path,
            "request_id": getattr(request.state, "request_id", None),
        }
        with start_span("http.request", **attributes) as span:
            request.state.span_id = span.span_id
            response = await call_next(request)
            span.set_attribute("http.status_code", response.status_code)
        return response
