"""
Bearer-token authentication middleware.

When ``GRAMMAR_API_KEY`` is set, every protected request must carry
``Authorization: Bearer <key>``.  Anything else receives
401 ``UNAUTHORIZED``.

Bypass paths (no auth required):
  - ``/health``
  - ``/metrics``
  - ``/docs``, ``/redoc``, ``/openapi.json``

CORS preflight (``OPTIONS``) requests also pass through.

Manifesto:
    A single shared secret is the simplest secure default.  Bypass
    paths let health checks and scrapers work without credentials.

Tags:
    grammar-spine, api, middleware, authentication, bearer

Doc-Types:
    api-reference
"""

from __future__ import annotations

import hmac
import re

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from grammar_spine.api.middleware.errors import reject
from grammar_spine.core.errors import Unauthorized

# Paths that never require authentication
_BYPASS_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"^/health$"),
    re.compile(r"^/metrics$"),
    re.compile(r"^/docs"),
    re.compile(r"^/redoc$"),
    re.compile(r"^/openapi\.json$"),
]


def _is_bypass(path: str) -> bool:
    """Return True if *path* should skip authentication."""
    return any(p.search(path) for p in _BYPASS_PATTERNS)


def bearer_token(header: str | None) -> str | None:
    """Extract the credential from an ``Authorization: Bearer`` header."""
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token or None


class AuthMiddleware(BaseHTTPMiddleware):
    """Reject requests that lack the configured bearer secret.

    If ``api_key`` is ``None`` (the default), authentication is disabled
    and all requests pass through.
    """

    def __init__(self, app: object, api_key: str | None = None) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._api_key = api_key.encode("utf-8") if api_key is not None else None

    def _authorized(self, request: Request) -> bool:
        provided = bearer_token(request.headers.get("Authorization"))
        if provided is None or self._api_key is None:
            return False
        return hmac.compare_digest(provided.encode("utf-8"), self._api_key)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # No key configured → open mode
        if self._api_key is None:
            return await call_next(request)

        if request.method == "OPTIONS" or _is_bypass(request.url.path):
            return await call_next(request)

        if not self._authorized(request):
            return reject(request, Unauthorized())

        return await call_next(request)
