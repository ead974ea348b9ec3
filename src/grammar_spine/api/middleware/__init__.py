"""API middleware package.

The cross-cutting stages are declared once, as an ordered list, by
:func:`build_middleware_chain`.  The first entry is the outermost::

    CORS → request-id → trace span → rate limit → auth → metrics → router

Any stage may short-circuit with a typed error response
(see :func:`grammar_spine.api.middleware.errors.reject`).

Manifesto:
    Cross-cutting concerns belong in middleware so routers stay focused
    on the check pipeline.  Declaring the order in one place keeps it
    auditable.

Tags:
    grammar-spine, api, middleware, cross-cutting, pipeline

Doc-Types:
    api-reference
"""

from __future__ import annotations

from starlette.middleware import Middleware

from grammar_spine.api.middleware.auth import AuthMiddleware
from grammar_spine.api.middleware.cors import cors_middleware
from grammar_spine.api.middleware.metrics import MetricsMiddleware
from grammar_spine.api.middleware.rate_limit import RateLimitMiddleware
from grammar_spine.api.middleware.request_id import RequestIDMiddleware
from grammar_spine.api.middleware.tracing import TracingMiddleware
from grammar_spine.api.settings import GrammarAPISettings
from grammar_spine.execution.rate_limit import KeyedRateLimiter
from grammar_spine.observability.metrics import ServiceMetrics


def build_rate_limiter(settings: GrammarAPISettings) -> KeyedRateLimiter | None:
    """Shared per-IP limiter, or ``None`` when rate limiting is disabled."""
    if not settings.rate_limit_enabled:
        return None
    return KeyedRateLimiter(
        rate=settings.rate_limit_per_second,
        capacity=settings.rate_limit_burst,
        max_keys=settings.rate_limit_max_clients,
    )


def build_middleware_chain(
    settings: GrammarAPISettings,
    *,
    metrics: ServiceMetrics,
    rate_limiter: KeyedRateLimiter | None,
    api_key: str | None,
) -> list[Middleware]:
    """Return the middleware stack, outermost first."""
    return [
        cors_middleware(settings, metrics),
        Middleware(RequestIDMiddleware),
        Middleware(TracingMiddleware),
        Middleware(RateLimitMiddleware, limiter=rate_limiter),
        Middleware(AuthMiddleware, api_key=api_key),
        Middleware(MetricsMiddleware, metrics=metrics),
    ]


__all__ = [
    "AuthMiddleware",
    "MetricsMiddleware",
    "RateLimitMiddleware",
    "RequestIDMiddleware",
    "TracingMiddleware",
    "build_middleware_chain",
    "build_rate_limiter",
]
