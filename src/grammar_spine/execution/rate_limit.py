"""Rate Limiting — token-bucket throughput control, per key.

Manifesto:
The analysis engine is the expensive part of every request.  A per-client
token bucket lets the service absorb short bursts while capping the
sustained rate any single client can push into the engine.

ARCHITECTURE
────────────
::

    TokenBucketLimiter   ─ steady rate + burst capacity (one client)
    KeyedRateLimiter     ─ one bucket per key (client IP), bounded:
                             * idle buckets (fully refilled) are swept
                               every ``cleanup_interval`` acquisitions
                             * at most ``max_keys`` buckets are tracked;
                               the least recently used one is evicted

    All limiters are thread-safe (internal Lock).

Example::

    limiter = KeyedRateLimiter(rate=10, capacity=20)
    decision = limiter.acquire("203.0.113.7")
    if not decision.allowed:
        raise RateLimited(retry_after=decision.retry_after)

Tags:
    grammar-spine, execution, rate-limit, throttle, token-bucket

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one acquisition attempt."""

    allowed: bool
    remaining: int
    retry_after: float = 0.0


@dataclass
class TokenBucketLimiter:
    """Token bucket rate limiter.

    Tokens are added at a fixed rate up to capacity.
    Allows bursts up to capacity, then limits to rate.

    Attributes:
        rate: Tokens added per second
        capacity: Maximum tokens (burst size)
        clock: Monotonic time source (injectable for tests)
    """

    rate: float
    capacity: float
    clock: Callable[[], float] = time.monotonic

    _tokens: float = field(default=0.0, init=False)
    _last_update: float = field(default=0.0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def __post_init__(self) -> None:
        if self.rate <= 0:
            raise ValueError("rate must be positive")
        if self.capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._tokens = float(self.capacity)
        self._last_update = self.clock()

    def _refill(self) -> None:
        now = self.clock()
        elapsed = max(0.0, now - self._last_update)
        self._tokens = min(float(self.capacity), self._tokens + elapsed * self.rate)
        self._last_update = now

    def try_acquire(self, tokens: int = 1) -> RateLimitDecision:
        """Take *tokens* if available; never blocks."""
        with self._lock:
            self._refill()
            if self._tokens >= tokens:
                self._tokens -= tokens
                return RateLimitDecision(allowed=True, remaining=int(self._tokens))
            wait = (tokens - self._tokens) / self.rate
            return RateLimitDecision(allowed=False, remaining=0, retry_after=wait)

    @property
    def is_full(self) -> bool:
        """True when the bucket has refilled completely (client is idle)."""
        with self._lock:
            self._refill()
            return self._tokens >= self.capacity


@dataclass
class KeyedRateLimiter:
    """Token bucket per key, with bounded state.

    Buckets are created lazily on a key's first request.

    Example:
        >>> limiter = KeyedRateLimiter(rate=10, capacity=20, max_keys=1000)
        >>> limiter.acquire("198.51.100.4").allowed
        True
    """

    rate: float = 10.0
    capacity: float = 20.0
    max_keys: int = 10_000
    cleanup_interval: int = 1000  # sweep idle buckets every N acquires
    clock: Callable[[], float] = time.monotonic

    _limiters: OrderedDict[str, TokenBucketLimiter] = field(default_factory=OrderedDict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)
    _acquire_count: int = field(default=0, init=False)

    def _get_limiter(self, key: str) -> TokenBucketLimiter:
        limiter = self._limiters.get(key)
        if limiter is not None:
            self._limiters.move_to_end(key)
            return limiter

        while len(self._limiters) >= self.max_keys:
            self._limiters.popitem(last=False)

        limiter = TokenBucketLimiter(rate=self.rate, capacity=self.capacity, clock=self.clock)
        self._limiters[key] = limiter
        return limiter

    def _maybe_cleanup(self) -> None:
        self._acquire_count += 1
        if self._acquire_count < self.cleanup_interval:
            return
        self._acquire_count = 0
        idle = [key for key, limiter in self._limiters.items() if limiter.is_full]
        for key in idle:
            del self._limiters[key]

    def acquire(self, key: str, tokens: int = 1) -> RateLimitDecision:
        """Acquire tokens for a specific key."""
        with self._lock:
            self._maybe_cleanup()
            limiter = self._get_limiter(key)
        return limiter.try_acquire(tokens)

    def __len__(self) -> int:
        with self._lock:
            return len(self._limiters)


__all__ = ["KeyedRateLimiter", "RateLimitDecision", "TokenBucketLimiter"]
