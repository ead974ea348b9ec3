"""
Check endpoint schemas — request and response bodies of ``POST /v1/check``.

Field names match the wire contract exactly (``processingTimeMs`` is
camelCase on the wire).

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from grammar_spine.checking.models import CheckOptions, CheckResult, Finding


class CheckOptionsSchema(BaseModel):
    """Category toggles.  Findings of a disabled category are dropped."""

    spelling: bool = Field(default=True, description="Report spelling findings")
    grammar: bool = Field(default=True, description="Report grammar findings")

    def to_domain(self) -> CheckOptions:
        return CheckOptions(spelling=self.spelling, grammar=self.grammar)


class CheckRequestSchema(BaseModel):
    """Body of ``POST /v1/check``."""

    model_config = ConfigDict(extra="ignore")

    text: str = Field(description="Text to check (max 100 KiB UTF-8)")
    language: str = Field(default="en-US", description="Informational; the service dialect is fixed")
    options: CheckOptionsSchema = Field(default_factory=CheckOptionsSchema)


class RuleSchema(BaseModel):
    id: str = Field(description="Engine rule identifier")
    category: Literal["spelling", "grammar"]


class ContextSchema(BaseModel):
    """Snippet around the finding; offsets are relative to ``text``."""

    text: str
    offset: int
    length: int


class MatchSchema(BaseModel):
    """One finding.  ``offset``/``length`` are code-point positions in the request text."""

    message: str
    offset: int
    length: int
    replacements: list[str]
    rule: RuleSchema
    context: ContextSchema

    @classmethod
    def from_finding(cls, finding: Finding) -> MatchSchema:
        return cls(
            message=finding.message,
            offset=finding.offset,
            length=finding.length,
            replacements=list(finding.replacements),
            rule=RuleSchema(id=finding.rule_id, category=finding.category.value),
            context=ContextSchema(
                text=finding.context.text,
                offset=finding.context.offset,
                length=finding.context.length,
            ),
        )


class MetricsSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    processing_time_ms: int = Field(alias="processingTimeMs", ge=0)


class CheckResponseSchema(BaseModel):
    """Body of a successful ``POST /v1/check``."""

    matches: list[MatchSchema]
    metrics: MetricsSchema

    @classmethod
    def from_result(cls, result: CheckResult) -> CheckResponseSchema:
        return cls(
            matches=[MatchSchema.from_finding(f) for f in result.findings],
            metrics=MetricsSchema(processing_time_ms=result.processing_time_ms),
        )
