"""
Text checking pipeline.

Quick start::

    from grammar_spine.checking import CheckService, load_engine

    service = CheckService(load_engine("en-US"))
    result = service.check("This is an test.")
    for finding in result.findings:
        print(finding.offset, finding.length, finding.category.value, finding.replacements)

Tags:
    grammar-spine, checking, pipeline

Doc-Types:
    api-reference
"""

from grammar_spine.checking.classifier import classify
from grammar_spine.checking.engine import AnalysisEngine, LanguageToolEngine, LintConfig, load_engine
from grammar_spine.checking.localizer import context_window
from grammar_spine.checking.models import (
    Category,
    CheckOptions,
    CheckResult,
    Context,
    Finding,
    RawFinding,
)
from grammar_spine.checking.service import CheckService
from grammar_spine.checking.validator import MAX_TEXT_BYTES, validate_text_size

__all__ = [
    "MAX_TEXT_BYTES",
    "AnalysisEngine",
    "Category",
    "CheckOptions",
    "CheckResult",
    "CheckService",
    "Context",
    "Finding",
    "LanguageToolEngine",
    "LintConfig",
    "RawFinding",
    "classify",
    "context_window",
    "load_engine",
    "validate_text_size",
]
