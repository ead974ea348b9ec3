"""
Analysis engine adapter.

The linguistic analysis is done by an external engine; this module is
the narrow contract between it and the service:

- :class:`AnalysisEngine` — what the service needs: ``check(text, config)``
  returning :class:`~grammar_spine.checking.models.RawFinding` objects in
  engine order, and ``close()``.
- :class:`LintConfig` — the per-request linting configuration.  It is an
  immutable value built fresh for every call and handed to the shared
  engine, so concurrent requests never share mutable linter state.
- :class:`LanguageToolEngine` — the production binding to LanguageTool.
  ``language_tool_python`` provisions the server (downloads and starts
  it, or points at a remote one) and resolves the language tag; this is
  the expensive, load-once step done at service startup.  Checks then
  go straight to the server's ``/v2/check`` endpoint over a shared
  ``httpx.Client`` and the JSON matches are mapped here.

The server reports offsets in UTF-16 code units.  They are converted to
code points per request by :func:`utf16_offset_mapper`, so no state is
shared between concurrent checks.

Manifesto:
    The engine is loaded once and shared read-only; each request builds
    its own lightweight configuration.  No request can observe or alter
    another request's linting state.

Tags:
    grammar-spine, checking, engine, languagetool, adapter

Doc-Types:
    api-reference
"""

from __future__ import annotations

import time
from bisect import bisect_left
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urljoin

import httpx

from grammar_spine.checking.localizer import clamp_span
from grammar_spine.checking.models import CheckOptions, RawFinding
from grammar_spine.core.logging import get_logger

log = get_logger(__name__)

DEFAULT_LANGUAGE = "en-US"
HTTP_TIMEOUT_SECONDS = 300.0


@dataclass(frozen=True)
class LintConfig:
    """Request-scoped linting configuration.

    Attributes:
        language: Locale/dialect checked against (fixed at service level)
        options: Category toggles requested by the client
    """

    language: str = DEFAULT_LANGUAGE
    options: CheckOptions = CheckOptions()


@runtime_checkable
class AnalysisEngine(Protocol):
    """Contract every analysis engine fulfils."""

    language: str

    def check(self, text: str, config: LintConfig) -> list[RawFinding]:
        """Return findings for *text* in engine order.  Synchronous, CPU-bound."""
        ...

    def close(self) -> None:
        """Release engine resources (server process, sockets …)."""
        ...


def utf16_offset_mapper(text: str) -> Callable[[int], int]:
    """Return a function mapping UTF-16 offsets in *text* to code-point offsets.

    An offset that lands between the two halves of a surrogate pair maps
    to the start of that character.
    """
    astral_starts: list[int] = []
    units = 0
    for ch in text:
        if ord(ch) > 0xFFFF:
            astral_starts.append(units)
            units += 2
        else:
            units += 1

    if not astral_starts:
        return lambda offset: offset

    def to_code_point(offset: int) -> int:
        return offset - bisect_left(astral_starts, offset)

    return to_code_point


class LanguageToolEngine:
    """LanguageTool-backed engine.

    Parameters
    ----------
    tool:
        A loaded ``language_tool_python.LanguageTool``.  Only its server
        ``url`` and ``language`` are read; it is closed with the engine.
    language:
        The locale the tool was loaded for.
    client:
        HTTP client used for checks.  One is created when omitted; the
        engine closes it either way.
    """

    def __init__(
        self,
        tool: Any,
        language: str = DEFAULT_LANGUAGE,
        client: httpx.Client | None = None,
    ) -> None:
        self._tool = tool
        self.language = language
        self._check_url = urljoin(tool.url, "check")
        self._language_tag = str(tool.language)
        self._client = client if client is not None else httpx.Client(timeout=HTTP_TIMEOUT_SECONDS)

    @classmethod
    def load(cls, language: str = DEFAULT_LANGUAGE, remote_url: str | None = None) -> LanguageToolEngine:
        """Start (or connect to) LanguageTool.  Expensive: call once per process."""
        import language_tool_python

        started = time.perf_counter()
        log.info("engine_loading", engine="languagetool", language=language, remote_url=remote_url)
        if remote_url:
            tool = language_tool_python.LanguageTool(language, remote_server=remote_url)
        else:
            tool = language_tool_python.LanguageTool(language)
        log.info(
            "engine_loaded",
            engine="languagetool",
            language=language,
            url=tool.url,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return cls(tool, language=language)

    def check(self, text: str, config: LintConfig) -> list[RawFinding]:
        if not text.strip():
            return []
        response = self._client.post(self._check_url, data={"language": self._language_tag, "text": text})
        response.raise_for_status()
        to_code_point = utf16_offset_mapper(text)
        return [self._to_raw(match, len(text), to_code_point) for match in response.json().get("matches", [])]

    @staticmethod
    def _to_raw(match: dict[str, Any], text_length: int, to_code_point: Callable[[int], int]) -> RawFinding:
        offset = int(match.get("offset", 0))
        start = to_code_point(offset)
        end = to_code_point(offset + int(match.get("length", 0)))
        start, end = clamp_span(text_length, start, end - start)

        rule = match.get("rule") or {}
        kind = rule.get("issueType") or (rule.get("category") or {}).get("id") or ""
        return RawFinding(
            message=match.get("message") or "",
            start=start,
            end=end,
            replacements=tuple(r["value"] for r in match.get("replacements") or [] if "value" in r),
            rule_id=rule.get("id") or "",
            kind=str(kind),
        )

    def close(self) -> None:
        self._client.close()
        self._tool.close()
        log.info("engine_closed", engine="languagetool")


def load_engine(language: str = DEFAULT_LANGUAGE, remote_url: str | None = None) -> AnalysisEngine:
    """Load the production engine."""
    return LanguageToolEngine.load(language=language, remote_url=remote_url)


__all__ = [
    "DEFAULT_LANGUAGE",
    "AnalysisEngine",
    "LanguageToolEngine",
    "LintConfig",
    "load_engine",
    "utf16_offset_mapper",
]
