"""Pydantic request/response schemas for the REST API."""

from grammar_spine.api.schemas.check import (
    CheckOptionsSchema,
    CheckRequestSchema,
    CheckResponseSchema,
    ContextSchema,
    MatchSchema,
    MetricsSchema,
    RuleSchema,
)
from grammar_spine.api.schemas.common import ErrorResponse

__all__ = [
    "CheckOptionsSchema",
    "CheckRequestSchema",
    "CheckResponseSchema",
    "ContextSchema",
    "ErrorResponse",
    "MatchSchema",
    "MetricsSchema",
    "RuleSchema",
]
