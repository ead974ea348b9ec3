"""
Domain models for text checking.

These are plain dataclasses, independent of FastAPI/pydantic, so the
pipeline can be driven from the HTTP layer, the CLI, or tests alike.
The wire shapes live in :mod:`grammar_spine.api.schemas.check`.

All offsets are code-point indices into the checked text (Python
``str`` indices), never byte offsets.

Tags:
    grammar-spine, checking, models, dataclasses

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Category(str, Enum):
    """Finding category.  Exactly two values exist."""

    SPELLING = "spelling"
    GRAMMAR = "grammar"


@dataclass(frozen=True)
class CheckOptions:
    """Per-request category toggles.  Both default to enabled."""

    spelling: bool = True
    grammar: bool = True

    def allows(self, category: Category) -> bool:
        if category is Category.SPELLING:
            return self.spelling
        return self.grammar


@dataclass(frozen=True)
class RawFinding:
    """One finding as reported by the analysis engine, span already normalised.

    Attributes:
        message: Human-readable description from the engine
        start: Code-point offset where the finding starts (inclusive)
        end: Code-point offset where the finding ends (exclusive)
        replacements: Suggested replacements, in engine order
        rule_id: Opaque engine rule identifier
        kind: Free-text rule-kind tag used for classification
    """

    message: str
    start: int
    end: int
    replacements: tuple[str, ...] = ()
    rule_id: str = ""
    kind: str = ""

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Context:
    """Bounded snippet around a finding, with span relative to the snippet."""

    text: str
    offset: int
    length: int


@dataclass(frozen=True)
class Finding:
    """A classified, localised finding ready for the response."""

    message: str
    offset: int
    length: int
    category: Category
    rule_id: str
    context: Context
    replacements: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CheckResult:
    """Findings in engine order plus the processing time."""

    findings: list[Finding]
    processing_time_ms: int

    def categories(self) -> list[str]:
        return [f.category.value for f in self.findings]
