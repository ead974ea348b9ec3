"""
Service lifecycle — load once at startup, release after the drain.

:class:`ServiceLifecycle` owns the expensive engine.  ``startup()`` loads
it synchronously and freezes everything into a :class:`ServiceState`;
``shutdown()`` closes it once the HTTP server has stopped accepting
connections and in-flight requests have finished.

Manifesto:
    The engine is loaded before the listening socket is bound, so the
    first request never pays the load cost and a broken engine fails
    the process before it is advertised as up.

Tags:
    grammar-spine, lifecycle, startup, shutdown, graceful-drain

Doc-Types:
    api-reference
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from grammar_spine.checking.engine import AnalysisEngine, load_engine
from grammar_spine.core.logging import get_logger
from grammar_spine.core.state import ServiceState
from grammar_spine.observability.metrics import ServiceMetrics

if TYPE_CHECKING:
    from grammar_spine.api.settings import GrammarAPISettings

log = get_logger(__name__)

EngineLoader = Callable[[], AnalysisEngine]


class ServiceLifecycle:
    """Start-once / stop-once holder of :class:`ServiceState`.

    Parameters
    ----------
    engine_loader:
        Zero-argument callable returning a loaded engine.
    api_key:
        Shared secret for bearer auth; ``None`` disables auth.
    max_text_bytes:
        Byte bound on checked text.
    """

    def __init__(
        self,
        engine_loader: EngineLoader,
        *,
        api_key: str | None = None,
        max_text_bytes: int | None = None,
        metrics: ServiceMetrics | None = None,
    ) -> None:
        self._engine_loader = engine_loader
        self._api_key = api_key
        self._max_text_bytes = max_text_bytes
        self._metrics = metrics or ServiceMetrics()
        self._state: ServiceState | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: GrammarAPISettings, *, metrics: ServiceMetrics | None = None) -> ServiceLifecycle:
        """Build a lifecycle that loads the LanguageTool engine configured in *settings*."""
        return cls(
            lambda: load_engine(language=settings.engine_language, remote_url=settings.engine_remote_url),
            api_key=settings.api_key,
            max_text_bytes=settings.max_text_bytes,
            metrics=metrics,
        )

    @property
    def state(self) -> ServiceState:
        if self._state is None:
            raise RuntimeError("service not started")
        return self._state

    @property
    def started(self) -> bool:
        return self._state is not None

    @property
    def api_key(self) -> str | None:
        return self._api_key

    @property
    def metrics(self) -> ServiceMetrics:
        return self._metrics

    def startup(self) -> ServiceState:
        """Load the engine (once) and return the frozen state."""
        with self._lock:
            if self._state is not None:
                return self._state

            started = time.perf_counter()
            log.info("dictionary_loading")
            engine = self._engine_loader()
            kwargs: dict[str, object] = {"engine": engine, "api_key": self._api_key, "metrics": self._metrics}
            if self._max_text_bytes is not None:
                kwargs["max_text_bytes"] = self._max_text_bytes
            self._state = ServiceState(**kwargs)  # type: ignore[arg-type]
            log.info(
                "service_ready",
                auth_enabled=self._state.auth_enabled,
                load_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return self._state

    def shutdown(self) -> None:
        """Close the engine.  Safe to call more than once."""
        with self._lock:
            state, self._state = self._state, None
        if state is None:
            return
        try:
            state.engine.close()
        finally:
            log.info("service_shutdown_complete")
