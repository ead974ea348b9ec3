"""Tests for the error taxonomy."""

from __future__ import annotations

import pytest

from grammar_spine.core.errors import (
    ERROR_KINDS,
    EngineTimeout,
    GrammarServiceError,
    InternalError,
    InvalidRequest,
    PayloadTooLarge,
    RateLimited,
    Unauthorized,
)


@pytest.mark.parametrize(
    ("error", "status", "code", "kind"),
    [
        (InvalidRequest(), 400, "INVALID_REQUEST", "invalid_request"),
        (Unauthorized(), 401, "UNAUTHORIZED", "unauthorized"),
        (PayloadTooLarge(limit_bytes=10), 413, "PAYLOAD_TOO_LARGE", "payload_too_large"),
        (RateLimited(retry_after=1.0), 429, "RATE_LIMITED", "rate_limited"),
        (InternalError(), 500, "INTERNAL_ERROR", "internal_error"),
        (EngineTimeout(2.5), 504, "ENGINE_TIMEOUT", "engine_timeout"),
    ],
)
def test_taxonomy(error, status, code, kind):
    assert isinstance(error, GrammarServiceError)
    assert error.status_code == status
    assert error.code == code
    assert error.kind == kind
    body = error.to_dict()
    assert set(body) == {"error", "code"}
    assert body["code"] == code
    assert body["error"]


def test_error_kinds_cover_every_subclass():
    assert set(ERROR_KINDS) == {
        "invalid_request",
        "unauthorized",
        "payload_too_large",
        "rate_limited",
        "internal_error",
        "engine_timeout",
    }


def test_payload_too_large_message_names_limit():
    assert PayloadTooLarge(limit_bytes=102400).message == "Text exceeds maximum size of 102400 bytes"


def test_unauthorized_advertises_bearer():
    assert Unauthorized().headers() == {"WWW-Authenticate": "Bearer"}


@pytest.mark.parametrize(("retry_after", "header"), [(0.01, "1"), (1.0, "1"), (1.2, "2"), (7.9, "8")])
def test_retry_after_rounds_up_to_whole_seconds(retry_after, header):
    assert RateLimited(retry_after=retry_after).headers() == {"Retry-After": header}


def test_rate_limited_without_retry_after_has_no_header():
    assert RateLimited().headers() == {}


def test_cause_is_chained():
    cause = ValueError("boom")
    err = InternalError(cause=cause)
    assert err.__cause__ is cause
    assert "boom" not in err.message
