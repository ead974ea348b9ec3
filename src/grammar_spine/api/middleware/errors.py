"""
Error responses and exception handlers.

Every failure leaves the service as ``{"error": ..., "code": ...}`` with
the status of its :class:`~grammar_spine.core.errors.GrammarServiceError`
subclass, and bumps ``grammar_errors_total{kind=...}`` exactly once.

Two paths lead here:

- Middleware stages that short-circuit (auth, rate limit) call
  :func:`reject`, which also counts the request, since the innermost
  metrics stage never sees it.
- Errors raised below the middleware (payload size, invalid body,
  engine failure) go through the exception handlers registered by
  :func:`register_exception_handlers`.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from grammar_spine.core.errors import GrammarServiceError, InternalError, InvalidRequest
from grammar_spine.core.logging import get_logger
from grammar_spine.observability.metrics import ServiceMetrics

log = get_logger(__name__)


KNOWN_ENDPOINTS = frozenset({"/v1/check", "/health", "/metrics"})


def endpoint_label(path: str) -> str:
    """Bounded metrics label for *path* (unknown paths collapse to ``other``)."""
    return path if path in KNOWN_ENDPOINTS else "other"


def _metrics(request: Request) -> ServiceMetrics | None:
    return getattr(request.app.state, "metrics", None)


def error_response(exc: GrammarServiceError) -> JSONResponse:
    """Build the JSON error response for *exc* (no side effects)."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers())


def record_error(request: Request, exc: GrammarServiceError) -> None:
    request.state.error_kind = exc.kind
    metrics = _metrics(request)
    if metrics is not None:
        metrics.record_error(exc.kind)


def reject(request: Request, exc: GrammarServiceError) -> JSONResponse:
    """Short-circuit from a middleware stage: count, log and respond."""
    metrics = _metrics(request)
    if metrics is not None:
        metrics.record_request(endpoint_label(request.url.path))
    record_error(request, exc)
    log.info("request_rejected", code=exc.code, status=exc.status_code, path=request.url.path)
    return error_response(exc)


async def service_error_handler(request: Request, exc: GrammarServiceError) -> JSONResponse:
    record_error(request, exc)
    if exc.status_code >= 500:
        log.error("request_failed", code=exc.code, status=exc.status_code, error=str(exc))
    else:
        log.info("request_rejected", code=exc.code, status=exc.status_code, path=request.url.path)
    return error_response(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body') or 'body'}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    return await service_error_handler(request, InvalidRequest(f"Invalid request body: {problems}"))


def internal_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Convert an unexpected exception to a 500 ``INTERNAL_ERROR`` response."""
    log.error("unhandled_exception", error_type=type(exc).__name__, error=str(exc), exc_info=exc)
    debug = getattr(getattr(request.app.state, "settings", None), "debug", False)
    error = InternalError(str(exc) if debug else None, cause=exc)
    record_error(request, error)
    return error_response(error)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: never leak a trace to the client."""
    return internal_error_response(request, exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GrammarServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
