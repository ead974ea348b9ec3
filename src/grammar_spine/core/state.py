"""Process-wide service state.

Built once at startup, read-only afterwards, and shared by every request.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from grammar_spine.checking.engine import AnalysisEngine
from grammar_spine.checking.service import CheckService
from grammar_spine.checking.validator import MAX_TEXT_BYTES
from grammar_spine.observability.metrics import ServiceMetrics


@dataclass(frozen=True)
class ServiceState:
    """Shared handles for the lifetime of the process.

    Attributes:
        engine: The loaded analysis engine (shared dictionary handle)
        api_key: Shared secret; ``None`` means open mode
        metrics: Metrics aggregator
        max_text_bytes: Byte bound on checked text
    """

    engine: AnalysisEngine
    api_key: str | None = None
    metrics: ServiceMetrics = field(default_factory=ServiceMetrics)
    max_text_bytes: int = MAX_TEXT_BYTES
    checker: CheckService = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "checker", CheckService(self.engine, max_text_bytes=self.max_text_bytes))

    @property
    def auth_enabled(self) -> bool:
        return self.api_key is not None
