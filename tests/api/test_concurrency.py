"""Concurrent checks share one engine without leaking results."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from conftest import ScriptedEngine, make_settings
from fastapi.testclient import TestClient

from grammar_spine.api.app import create_app


def _text(i: int) -> str:
    return f"Sample {i} says teh quik answer. " + "lorem " * (i % 7)


def test_concurrent_checks_return_only_their_own_findings():
    engine = ScriptedEngine(delay=0.02)
    app = create_app(settings=make_settings(), engine=engine)

    with TestClient(app) as client:

        def run(i: int) -> tuple[int, dict]:
            resp = client.post("/v1/check", json={"text": _text(i)}, headers={"X-Request-ID": f"req-{i}"})
            assert resp.status_code == 200
            assert resp.headers["X-Request-ID"] == f"req-{i}"
            return i, resp.json()

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(run, range(24)))

    for i, body in results:
        text = _text(i)
        assert len(body["matches"]) == 2
        for match in body["matches"]:
            assert text[match["offset"] : match["offset"] + match["length"]] in {"teh", "quik"}
            assert match["context"]["text"] in text
            assert f"Sample {i} " in match["context"]["text"]

    assert sorted(engine.calls) == sorted(_text(i) for i in range(24))


def test_requests_use_distinct_configs():
    engine = ScriptedEngine()
    app = create_app(settings=make_settings(), engine=engine)
    with TestClient(app) as client:
        client.post("/v1/check", json={"text": "one", "options": {"grammar": False}})
        client.post("/v1/check", json={"text": "two"})
    first, second = engine.configs
    assert first.options.grammar is False
    assert second.options.grammar is True
