"""
Per-client rate-limiting middleware using a token bucket per IP.

Each client IP owns a bucket of ``rate_limit_burst`` tokens refilled at
``rate_limit_per_second``.  A request with no token left is rejected
with 429 ``RATE_LIMITED`` and a ``Retry-After`` header, before the
credential is checked or the engine is touched.

Bucket state lives in a :class:`~grammar_spine.execution.rate_limit.KeyedRateLimiter`
shared across requests: idle buckets are swept periodically and the
number of tracked clients is capped (least recently seen evicted first).

Tags:
    grammar-spine, api, middleware, rate-limiting, token-bucket, 429

Doc-Types:
    api-reference
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from grammar_spine.api.middleware.errors import reject
from grammar_spine.core.errors import RateLimited
from grammar_spine.execution.rate_limit import KeyedRateLimiter


def client_ip(request: Request) -> str:
    """Extract client IP, respecting X-Forwarded-For behind a proxy."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Token-bucket per-IP rate limiter.

    Parameters
    ----------
    app:
        The ASGI application to wrap.
    limiter:
        Shared keyed limiter.  ``None`` disables rate limiting.
    """

    def __init__(self, app: object, limiter: KeyedRateLimiter | None = None) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._limiter = limiter

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._limiter is None:
            return await call_next(request)

        decision = self._limiter.acquire(client_ip(request))
        if not decision.allowed:
            return reject(request, RateLimited(retry_after=decision.retry_after))

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(int(self._limiter.capacity))
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response
