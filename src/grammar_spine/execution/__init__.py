"""Execution-layer primitives shared by the API and the CLI."""

from grammar_spine.execution.rate_limit import KeyedRateLimiter, RateLimitDecision, TokenBucketLimiter

__all__ = ["KeyedRateLimiter", "RateLimitDecision", "TokenBucketLimiter"]
