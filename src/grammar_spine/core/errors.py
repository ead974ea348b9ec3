"""
Structured error types for the grammar service.

Every failure the service reports to a client is a
:class:`GrammarServiceError` subclass.  Each carries a stable
machine-readable ``code``, the HTTP ``status_code`` it maps to, and the
``kind`` label used by the ``grammar_errors_total`` counter, so the
middleware chain, the handler, and the exception handlers all speak the
same taxonomy.

Manifesto:
    Clients get a structured body with a stable code, never a stack
    trace.  Operators get one counter per failure kind.  Both come from
    the same class attributes so they cannot drift apart.

Architecture:
    ::

        GrammarServiceError (code, status_code, kind)
          ├── InvalidRequest     400  INVALID_REQUEST
          ├── Unauthorized       401  UNAUTHORIZED
          ├── PayloadTooLarge    413  PAYLOAD_TOO_LARGE
          ├── RateLimited        429  RATE_LIMITED
          ├── InternalError      500  INTERNAL_ERROR
          └── EngineTimeout      504  ENGINE_TIMEOUT

Examples:
    >>> err = PayloadTooLarge(limit_bytes=102400)
    >>> err.status_code, err.code
    (413, 'PAYLOAD_TOO_LARGE')
    >>> err.to_dict()["code"]
    'PAYLOAD_TOO_LARGE'

Tags:
    grammar-spine, errors, taxonomy, http-status

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any


class GrammarServiceError(Exception):
    """Base class for every client-visible failure.

    Subclasses override the three class attributes; instances only
    carry the human-readable message and an optional cause.
    """

    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    kind: str = "internal_error"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, *, cause: BaseException | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Wire body: ``{"error": ..., "code": ...}``."""
        return {"error": self.message, "code": self.code}

    def headers(self) -> dict[str, str]:
        """Extra response headers for this error (none by default)."""
        return {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class InvalidRequest(GrammarServiceError):
    """Body is not valid JSON or does not match the request schema."""

    code = "INVALID_REQUEST"
    status_code = 400
    kind = "invalid_request"
    default_message = "Request body is invalid."


class Unauthorized(GrammarServiceError):
    """Missing or incorrect credential on a protected route."""

    code = "UNAUTHORIZED"
    status_code = 401
    kind = "unauthorized"
    default_message = "Missing or invalid credentials. Provide an 'Authorization: Bearer <key>' header."

    def headers(self) -> dict[str, str]:
        return {"WWW-Authenticate": "Bearer"}


class PayloadTooLarge(GrammarServiceError):
    """``text`` exceeds the byte-size bound."""

    code = "PAYLOAD_TOO_LARGE"
    status_code = 413
    kind = "payload_too_large"

    def __init__(self, limit_bytes: int, actual_bytes: int | None = None) -> None:
        super().__init__(f"Text exceeds maximum size of {limit_bytes} bytes")
        self.limit_bytes = limit_bytes
        self.actual_bytes = actual_bytes


class RateLimited(GrammarServiceError):
    """Client exceeded its token-bucket budget."""

    code = "RATE_LIMITED"
    status_code = 429
    kind = "rate_limited"
    default_message = "Rate limit exceeded."

    def __init__(self, message: str | None = None, *, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after

    def headers(self) -> dict[str, str]:
        if self.retry_after is None:
            return {}
        # Retry-After is whole seconds; never advertise 0 while still empty
        return {"Retry-After": str(max(1, int(self.retry_after + 0.999)))}


class InternalError(GrammarServiceError):
    """Unexpected failure while invoking the analysis engine."""

    code = "INTERNAL_ERROR"
    status_code = 500
    kind = "internal_error"
    default_message = "An unexpected error occurred while analysing the text."


class EngineTimeout(GrammarServiceError):
    """The analysis engine did not finish within the configured deadline."""

    code = "ENGINE_TIMEOUT"
    status_code = 504
    kind = "engine_timeout"

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Text analysis did not complete within {timeout_seconds:g} seconds")
        self.timeout_seconds = timeout_seconds


ERROR_KINDS: tuple[str, ...] = tuple(
    cls.kind
    for cls in (
        InvalidRequest,
        Unauthorized,
        PayloadTooLarge,
        RateLimited,
        InternalError,
        EngineTimeout,
    )
)

__all__ = [
    "ERROR_KINDS",
    "EngineTimeout",
    "GrammarServiceError",
    "InternalError",
    "InvalidRequest",
    "PayloadTooLarge",
    "RateLimited",
    "Unauthorized",
]
