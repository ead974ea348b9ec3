"""Tests for auth and rate-limit middleware.

Uses the real FastAPI test client to exercise the full middleware stack.
"""

from __future__ import annotations

from conftest import ScriptedEngine, make_settings
from fastapi import FastAPI
from fastapi.testclient import TestClient

from grammar_spine.api.app import create_app
from grammar_spine.api.middleware.auth import bearer_token

# =============================================================================
# Auth middleware
# =============================================================================


def _make_app(api_key: str | None = None, **overrides) -> FastAPI:
    """Create an app with the scripted engine and the given secret."""
    return create_app(settings=make_settings(api_key=api_key, **overrides), engine=ScriptedEngine())


def _auth(key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {key}"}


class TestBearerToken:
    def test_parses_bearer(self):
        assert bearer_token("Bearer abc") == "abc"
        assert bearer_token("bearer abc") == "abc"

    def test_rejects_other_schemes(self):
        assert bearer_token("Basic abc") is None
        assert bearer_token("abc") is None
        assert bearer_token("Bearer ") is None
        assert bearer_token(None) is None

    def test_token_is_not_trimmed(self):
        assert bearer_token("Bearer  abc") == " abc"
        assert bearer_token("Bearer abc ") == "abc "


class TestAuthMiddleware:
    """AuthMiddleware tests."""

    def test_no_key_configured_allows_all(self):
        client = TestClient(_make_app(api_key=None))
        resp = client.post("/v1/check", json={"text": "hello"})
        assert resp.status_code == 200

    def test_key_required_rejects_missing(self):
        client = TestClient(_make_app(api_key="secret-key"))
        resp = client.post("/v1/check", json={"text": "hello"})
        assert resp.status_code == 401
        assert resp.json()["code"] == "UNAUTHORIZED"
        assert set(resp.json()) == {"error", "code"}
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_key_required_accepts_valid_bearer(self):
        client = TestClient(_make_app(api_key="secret-key"))
        resp = client.post("/v1/check", json={"text": "hello"}, headers=_auth("secret-key"))
        assert resp.status_code == 200

    def test_key_required_rejects_wrong_key(self):
        client = TestClient(_make_app(api_key="secret-key"))
        resp = client.post("/v1/check", json={"text": "hello"}, headers=_auth("wrong-key"))
        assert resp.status_code == 401

    def test_comparison_is_exact(self):
        client = TestClient(_make_app(api_key="secret-key"))
        for candidate in ("Secret-Key", "secret-ke", "secret-keyy"):
            resp = client.post("/v1/check", json={"text": "hello"}, headers=_auth(candidate))
            assert resp.status_code == 401

    def test_padded_key_rejected(self):
        client = TestClient(_make_app(api_key="secret-key"))
        resp = client.post("/v1/check", json={"text": "hello"}, headers={"Authorization": "Bearer  secret-key"})
        assert resp.status_code == 401

    def test_wrong_scheme_rejected(self):
        client = TestClient(_make_app(api_key="secret-key"))
        resp = client.post("/v1/check", json={"text": "hello"}, headers={"Authorization": "Basic secret-key"})
        assert resp.status_code == 401

    def test_query_param_not_accepted(self):
        client = TestClient(_make_app(api_key="secret-key"))
        resp = client.post("/v1/check?api_key=secret-key", json={"text": "hello"})
        assert resp.status_code == 401

    def test_health_bypassed(self):
        client = TestClient(_make_app(api_key="secret-key"))
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.text == "ok"

    def test_metrics_bypassed(self):
        client = TestClient(_make_app(api_key="secret-key"))
        assert client.get("/metrics").status_code == 200

    def test_docs_bypassed(self):
        client = TestClient(_make_app(api_key="secret-key"))
        assert client.get("/docs").status_code == 200
        assert client.get("/openapi.json").status_code == 200

    def test_unauthenticated_client_still_gets_health(self):
        client = TestClient(_make_app(api_key="secret-key"))
        assert client.post("/v1/check", json={"text": "hello"}).status_code == 401
        assert client.get("/health").status_code == 200

    def test_rejected_request_never_reaches_engine(self):
        engine = ScriptedEngine()
        client = TestClient(create_app(settings=make_settings(api_key="k"), engine=engine))
        client.post("/v1/check", json={"text": "hello"})
        assert engine.calls == []


# =============================================================================
# Rate-limit middleware
# =============================================================================


def _make_rate_app(enabled: bool = True, burst: int = 3, **overrides) -> FastAPI:
    """App whose buckets effectively never refill during a test."""
    return _make_app(
        rate_limit_enabled=enabled,
        rate_limit_burst=burst,
        rate_limit_per_second=0.001,
        **overrides,
    )


class TestRateLimitMiddleware:
    """RateLimitMiddleware tests."""

    def test_disabled_allows_unlimited(self):
        client = TestClient(_make_rate_app(enabled=False))
        for _ in range(20):
            assert client.get("/health").status_code == 200

    def test_enabled_allows_within_burst(self):
        client = TestClient(_make_rate_app(burst=5))
        for _ in range(5):
            assert client.get("/health").status_code == 200

    def test_enabled_rejects_over_burst(self):
        client = TestClient(_make_rate_app(burst=3))
        for _ in range(3):
            client.get("/health")
        resp = client.get("/health")
        assert resp.status_code == 429
        assert resp.json()["code"] == "RATE_LIMITED"
        assert int(resp.headers["Retry-After"]) >= 1

    def test_accepted_responses_carry_limit_headers(self):
        client = TestClient(_make_rate_app(burst=3))
        resp = client.get("/health")
        assert resp.headers["X-RateLimit-Limit"] == "3"
        assert resp.headers["X-RateLimit-Remaining"] == "2"

    def test_buckets_are_per_client_ip(self):
        client = TestClient(_make_rate_app(burst=1))
        assert client.get("/health", headers={"X-Forwarded-For": "198.51.100.1"}).status_code == 200
        assert client.get("/health", headers={"X-Forwarded-For": "198.51.100.1"}).status_code == 429
        assert client.get("/health", headers={"X-Forwarded-For": "198.51.100.2"}).status_code == 200

    def test_first_forwarded_entry_is_the_client(self):
        client = TestClient(_make_rate_app(burst=1))
        headers = {"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}
        assert client.get("/health", headers=headers).status_code == 200
        other_proxy = {"X-Forwarded-For": "203.0.113.9, 10.0.0.2"}
        assert client.get("/health", headers=other_proxy).status_code == 429

    def test_rate_limit_runs_before_auth(self):
        client = TestClient(_make_rate_app(burst=2, api_key="secret-key"))
        assert client.post("/v1/check", json={"text": "x"}).status_code == 401
        assert client.post("/v1/check", json={"text": "x"}).status_code == 401
        # bucket exhausted: the credential is no longer even checked
        resp = client.post("/v1/check", json={"text": "x"}, headers=_auth("secret-key"))
        assert resp.status_code == 429

    def test_rejected_request_never_reaches_engine(self):
        engine = ScriptedEngine()
        settings = make_settings(rate_limit_enabled=True, rate_limit_burst=1, rate_limit_per_second=0.001)
        client = TestClient(create_app(settings=settings, engine=engine))
        client.post("/v1/check", json={"text": "first"})
        client.post("/v1/check", json={"text": "second"})
        assert engine.calls == ["first"]
