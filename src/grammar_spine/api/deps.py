"""
FastAPI dependency injection — shared singletons.

Usage in routers::

    from grammar_spine.api.deps import Checker, Settings

    @router.post("/v1/check")
    async def check(body: CheckRequestSchema, checker: Checker, settings: Settings):
        ...

Manifesto:
    Dependency injection keeps routers thin.  Settings are read once per
    process; the service state is built once at startup and handed to
    every request unchanged.

Tags:
    grammar-spine, api, dependency-injection, singletons

Doc-Types:
    api-reference
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from grammar_spine.api.settings import GrammarAPISettings
from grammar_spine.checking.service import CheckService
from grammar_spine.core.errors import InternalError
from grammar_spine.core.state import ServiceState
from grammar_spine.observability.metrics import ServiceMetrics

# ── Settings (singleton) ─────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_settings() -> GrammarAPISettings:
    """Cached settings — loaded once per process."""
    return GrammarAPISettings()


# ── Service state (startup singleton) ────────────────────────────────────


def get_service_state(request: Request) -> ServiceState:
    """The state loaded at startup.  Missing state is a wiring bug."""
    state = getattr(request.app.state, "service_state", None)
    if state is None:
        raise InternalError("Service is not ready.")
    return state


def get_checker(state: Annotated[ServiceState, Depends(get_service_state)]) -> CheckService:
    return state.checker


def get_metrics(request: Request) -> ServiceMetrics:
    return request.app.state.metrics


# ── Type aliases for router signatures ───────────────────────────────────

Settings = Annotated[GrammarAPISettings, Depends(get_settings)]
Checker = Annotated[CheckService, Depends(get_checker)]
Metrics = Annotated[ServiceMetrics, Depends(get_metrics)]
