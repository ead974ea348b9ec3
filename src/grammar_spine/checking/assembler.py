"""Response assembly — raw engine findings to classified, localised findings."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from grammar_spine.checking.classifier import classify
from grammar_spine.checking.localizer import context_window, grapheme_boundaries
from grammar_spine.checking.models import CheckOptions, CheckResult, Finding, RawFinding


def build_finding(text: str, raw: RawFinding, boundaries: Sequence[int] | None = None) -> Finding:
    """Localise and classify one raw finding."""
    return Finding(
        message=raw.message,
        offset=raw.start,
        length=raw.length,
        category=classify(raw.kind),
        rule_id=raw.rule_id,
        context=context_window(text, raw.start, raw.end, boundaries=boundaries),
        replacements=list(raw.replacements),
    )


def assemble(
    text: str,
    raw_findings: Iterable[RawFinding],
    elapsed_seconds: float,
    options: CheckOptions | None = None,
) -> CheckResult:
    """Build the :class:`CheckResult`.

    Engine order is preserved; findings whose category is switched off in
    *options* are dropped.
    """
    options = options or CheckOptions()
    raw_findings = list(raw_findings)
    boundaries = grapheme_boundaries(text) if raw_findings else None
    findings = [
        finding
        for finding in (build_finding(text, raw, boundaries) for raw in raw_findings)
        if options.allows(finding.category)
    ]
    return CheckResult(
        findings=findings,
        processing_time_ms=max(0, int(elapsed_seconds * 1000)),
    )
