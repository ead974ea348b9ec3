"""
Shared pytest fixtures and configuration for grammar-spine tests.

This module provides:
- ``ScriptedEngine``: a deterministic stand-in for LanguageTool that
  flags "a/an" misuse and a small list of misspellings
- Settings/app/client fixtures wired to the scripted engine
- Location-based marker auto-tagging (``unit`` / ``integration``)

Usage:
    Fixtures are auto-discovered by pytest::

        def test_something(client):
            resp = client.post("/v1/check", json={"text": "teh cat"})
"""

from __future__ import annotations

import re
import sys
import threading
import time
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

# Ensure grammar_spine is importable without an editable install
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from grammar_spine.api.app import create_app  # noqa: E402
from grammar_spine.api.settings import GrammarAPISettings  # noqa: E402
from grammar_spine.checking.engine import LintConfig  # noqa: E402
from grammar_spine.checking.models import RawFinding  # noqa: E402

# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in test_path.parts:
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Scripted engine
# =============================================================================

MISSPELLINGS: dict[str, list[str]] = {
    "quik": ["quick", "quirk"],
    "teh": ["the", "ten"],
    "recieve": ["receive"],
    "wrld": ["world"],
}

_A_VS_AN = re.compile(r"\b([Aa]n) (?=[b-df-hj-np-tv-z])")
_WORD = re.compile(r"\w+")


class ScriptedEngine:
    """Deterministic engine: a/an misuse is grammar, listed words are misspellings.

    Offsets come from ``re`` over ``str``, i.e. code points, like the
    real adapter after normalisation.
    """

    language = "en-US"

    def __init__(
        self,
        *,
        delay: float = 0.0,
        fail_with: BaseException | None = None,
        extra: Callable[[str], list[RawFinding]] | None = None,
    ) -> None:
        self.delay = delay
        self.fail_with = fail_with
        self.extra = extra
        self.calls: list[str] = []
        self.configs: list[LintConfig] = []
        self.closed = False
        self._lock = threading.Lock()

    def check(self, text: str, config: LintConfig) -> list[RawFinding]:
        with self._lock:
            self.calls.append(text)
            self.configs.append(config)
        if self.delay:
            time.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with

        findings: list[RawFinding] = []
        for m in _A_VS_AN.finditer(text):
            findings.append(
                RawFinding(
                    message="Use “a” instead of “an” if the following word doesn't start with a vowel sound.",
                    start=m.start(1),
                    end=m.end(1),
                    replacements=("a",),
                    rule_id="EN_A_VS_AN",
                    kind="grammar",
                )
            )
        for m in _WORD.finditer(text):
            suggestions = MISSPELLINGS.get(m.group().lower())
            if suggestions is not None:
                findings.append(
                    RawFinding(
                        message="Possible spelling mistake found.",
                        start=m.start(),
                        end=m.end(),
                        replacements=tuple(suggestions),
                        rule_id="MORFOLOGIK_RULE_EN_US",
                        kind="misspelling",
                    )
                )
        if self.extra is not None:
            findings.extend(self.extra(text))
        findings.sort(key=lambda f: f.start)
        return findings

    def close(self) -> None:
        self.closed = True


# =============================================================================
# Fixtures
# =============================================================================


def make_settings(**overrides: object) -> GrammarAPISettings:
    """Settings isolated from the environment and any ``.env`` file."""
    values: dict[str, object] = {
        "api_key": None,
        "cors_origins": [],
        "rate_limit_enabled": False,
    }
    values.update(overrides)
    return GrammarAPISettings(_env_file=None, **values)  # type: ignore[arg-type]


@pytest.fixture
def engine() -> ScriptedEngine:
    return ScriptedEngine()


@pytest.fixture
def settings() -> GrammarAPISettings:
    return make_settings()


@pytest.fixture
def app(engine: ScriptedEngine, settings: GrammarAPISettings) -> FastAPI:
    return create_app(settings=settings, engine=engine)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c
