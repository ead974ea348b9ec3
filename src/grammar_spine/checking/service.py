"""
Check service — the request-processing pipeline.

``validate → engine → localise → classify → assemble``

:class:`CheckService` binds the shared, load-once engine to the service
limits.  It holds no per-request state: every call builds its own
:class:`~grammar_spine.checking.engine.LintConfig`, so one instance can
be used from any number of worker threads at once.

Manifesto:
    Cheap checks run first.  Oversized text is rejected before the
    engine is touched, and any unexpected engine failure becomes an
    ``InternalError`` instead of taking the process down.

Tags:
    grammar-spine, checking, pipeline, service

Doc-Types:
    api-reference
"""

from __future__ import annotations

import time

from grammar_spine.checking.assembler import assemble
from grammar_spine.checking.engine import AnalysisEngine, LintConfig
from grammar_spine.checking.models import CheckOptions, CheckResult, RawFinding
from grammar_spine.checking.validator import MAX_TEXT_BYTES, validate_text_size
from grammar_spine.core.errors import GrammarServiceError, InternalError
from grammar_spine.core.logging import get_logger
from grammar_spine.observability.tracing import start_span

log = get_logger(__name__)


class CheckService:
    """Run texts through the analysis pipeline.

    Parameters
    ----------
    engine:
        Shared analysis engine, loaded once at startup.
    max_text_bytes:
        Upper bound on the UTF-8 size of ``text``.
    """

    def __init__(self, engine: AnalysisEngine, *, max_text_bytes: int = MAX_TEXT_BYTES) -> None:
        self.engine = engine
        self.max_text_bytes = max_text_bytes

    def validate(self, text: str) -> int:
        """Size check only; raises :class:`PayloadTooLarge`."""
        return validate_text_size(text, self.max_text_bytes)

    def analyse(self, text: str, config: LintConfig) -> list[RawFinding]:
        """Invoke the engine, converting unexpected failures to ``InternalError``."""
        with start_span("engine.check", **{"text.chars": len(text), "engine.language": config.language}) as span:
            try:
                raw = self.engine.check(text, config)
            except GrammarServiceError:
                raise
            except Exception as exc:
                log.error("engine_check_failed", error_type=type(exc).__name__, error=str(exc), exc_info=True)
                raise InternalError(cause=exc) from exc
            span.set_attribute("engine.findings", len(raw))
        return raw

    def check(self, text: str, options: CheckOptions | None = None, *, language: str | None = None) -> CheckResult:
        """Full pipeline for one text.

        *language* is informational; the engine's locale is fixed at
        service level.
        """
        options = options or CheckOptions()
        self.validate(text)

        started = time.perf_counter()
        config = LintConfig(language=self.engine.language, options=options)
        if language and language != config.language:
            log.debug("request_language_ignored", requested=language, engine_language=config.language)

        raw = self.analyse(text, config)
        result = assemble(text, raw, time.perf_counter() - started, options)
        log.info(
            "check_completed",
            chars=len(text),
            findings=len(result.findings),
            processing_time_ms=result.processing_time_ms,
        )
        return result
