"""
Lightweight in-process tracing.

A :class:`Span` records one timed unit of work with a short ``span_id``,
the ``parent_span_id`` of the span that was active when it started, and
free-form attributes.  While a span is open its ids are bound onto the
structlog context, so every log line emitted inside it can be joined to
the span.  When the span closes it logs ``<name>.end`` (or
``<name>.error``) with ``duration_ms`` and ``status``.

Usage::

    with start_span("http.request", **{"http.method": "POST"}) as span:
        ...
        span.set_attribute("http.status_code", 200)

Spans nest::

    with start_span("http.request"):
        with start_span("engine.check") as inner:
            # inner.parent_span_id is the request span's id
            ...

Tags:
    grammar-spine, observability, tracing, span, correlation

Doc-Types:
    api-reference
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import structlog

from grammar_spine.core.logging import get_logger

_current_span: ContextVar[Span | None] = ContextVar("grammar_spine_current_span", default=None)


def _generate_span_id() -> str:
    """Generate a short span ID (16 hex chars)."""
    return uuid.uuid4().hex[:16]


@dataclass
class Span:
    """One traced unit of work."""

    name: str
    span_id: str = field(default_factory=_generate_span_id)
    parent_span_id: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    status: str = "ok"
    error_type: str | None = None

    def set_attribute(self, key: str, value: Any) -> Span:
        self.attributes[key] = value
        return self

    def record_error(self, exc: BaseException) -> Span:
        self.status = "error"
        self.error_type = type(exc).__name__
        return self

    def end(self) -> Span:
        if self.ended_at is None:
            self.ended_at = time.perf_counter()
        return self

    @property
    def duration_ms(self) -> float:
        end = self.ended_at if self.ended_at is not None else time.perf_counter()
        return (end - self.started_at) * 1000

    def to_log_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "span_id": self.span_id,
            "duration_ms": round(self.duration_ms, 2),
            "status": self.status,
        }
        if self.parent_span_id:
            result["parent_span_id"] = self.parent_span_id
        if self.error_type:
            result["error_type"] = self.error_type
        result.update(self.attributes)
        return result


def current_span() -> Span | None:
    """Return the innermost open span in this context, if any."""
    return _current_span.get()


@contextmanager
def start_span(name: str, **attributes: Any) -> Iterator[Span]:
    """Open a span for the duration of the ``with`` block.

    The span becomes the parent of any span started inside the block.
    Exceptions are recorded on the span and re-raised.
    """
    log = get_logger("grammar_spine.tracing")
    parent = _current_span.get()
    span = Span(
        name=name,
        parent_span_id=parent.span_id if parent else None,
        attributes=dict(attributes),
    )

    span_token = _current_span.set(span)
    log_tokens = structlog.contextvars.bind_contextvars(span_id=span.span_id)
    log.debug(f"{name}.start", **{k: v for k, v in span.to_log_dict().items() if k != "duration_ms"})
    try:
        yield span
    except BaseException as exc:
        span.record_error(exc)
        raise
    finally:
        span.end()
        structlog.contextvars.reset_contextvars(**log_tokens)
        _current_span.reset(span_token)
        if span.status == "error":
            log.warning(f"{name}.error", **span.to_log_dict())
        else:
            log.info(f"{name}.end", **span.to_log_dict())


__all__ = ["Span", "current_span", "start_span"]
