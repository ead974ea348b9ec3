"""Request-ID middleware — honours or assigns ``X-Request-ID``.

Manifesto:
    Every request gets one identifier, echoed on the response and bound
    onto the structlog context, so log lines, spans and client reports
    can be joined.

Tags:
    grammar-spine, api, middleware, request-id, correlation

Doc-Types:
    api-reference
"""

from __future__ import annotations

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request/response cycle."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER, "").strip() or str(uuid.uuid4())
        request.state.request_id = request_id
        tokens = structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.reset_contextvars(**tokens)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
