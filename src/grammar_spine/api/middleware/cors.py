"""CORS configuration — the outermost stage of the chain.

An empty ``GRAMMAR_CORS_ORIGINS`` (or one containing ``*``) is
permissive: any origin is reflected.  Production deployments should set
an explicit comma-separated allow-list.

Preflight requests are answered here and never reach the inner stages,
so this stage counts them in ``grammar_requests_total`` itself.
"""

from __future__ import annotations

from typing import Any

from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers
from starlette.middleware import Middleware
from starlette.types import ASGIApp, Receive, Scope, Send

from grammar_spine.api.middleware.errors import endpoint_label
from grammar_spine.api.settings import GrammarAPISettings
from grammar_spine.observability.metrics import ServiceMetrics

ALLOWED_METHODS = ["GET", "POST", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Accept", "Authorization", "X-Request-ID"]
EXPOSED_HEADERS = ["X-Request-ID", "Retry-After", "X-RateLimit-Limit", "X-RateLimit-Remaining"]


def is_preflight(scope: Scope) -> bool:
    if scope["type"] != "http" or scope["method"] != "OPTIONS":
        return False
    headers = Headers(scope=scope)
    return "origin" in headers and "access-control-request-method" in headers


class CountingCORSMiddleware(CORSMiddleware):
    """``CORSMiddleware`` that records the preflights it answers."""

    def __init__(self, app: ASGIApp, *, metrics: ServiceMetrics, **options: Any) -> None:
        super().__init__(app, **options)
        self._metrics = metrics

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if is_preflight(scope):
            self._metrics.record_request(endpoint_label(scope["path"]))
        await super().__call__(scope, receive, send)


def cors_options(settings: GrammarAPISettings) -> dict[str, Any]:
    """Keyword arguments for :class:`CORSMiddleware` derived from *settings*."""
    options: dict[str, Any] = {
        "allow_methods": ALLOWED_METHODS,
        "allow_headers": ALLOWED_HEADERS,
        "expose_headers": EXPOSED_HEADERS,
    }
    if settings.cors_permissive:
        options["allow_origin_regex"] = ".*"
    else:
        options["allow_origins"] = list(settings.cors_origins)
    return options


def cors_middleware(settings: GrammarAPISettings, metrics: ServiceMetrics) -> Middleware:
    return Middleware(CountingCORSMiddleware, metrics=metrics, **cors_options(settings))
