"""
FastAPI application factory.

``create_app()`` wires the middleware chain, routers, error handlers and
lifespan events into a single ``FastAPI`` instance.

Three ways to provide the analysis engine:

- nothing: the lifespan loads the LanguageTool engine configured in
  settings on startup and closes it on shutdown
  (``uvicorn grammar_spine.api:create_app --factory``);
- ``lifecycle=``: a :class:`ServiceLifecycle` the caller already started
  (``grammar-spine serve`` loads the engine before binding the socket);
- ``engine=``: an already loaded engine, used as-is (tests, embedding).
  The caller keeps ownership and closes it.

Manifesto:
    The app factory is the single composition root.  Middleware order,
    routers and lifecycle hooks are wired here so the rest of the
    codebase never touches ``FastAPI`` directly.

Tags:
    grammar-spine, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from grammar_spine.api.deps import get_settings
from grammar_spine.api.middleware import build_middleware_chain, build_rate_limiter
from grammar_spine.api.middleware.errors import register_exception_handlers
from grammar_spine.api.routers import check, health, metrics
from grammar_spine.api.settings import GrammarAPISettings
from grammar_spine.checking.engine import AnalysisEngine
from grammar_spine.core.lifecycle import ServiceLifecycle
from grammar_spine.core.logging import get_logger

log = get_logger("grammar_spine.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — load the engine if needed, release it after the drain."""
    lifecycle: ServiceLifecycle = app.state.lifecycle
    owns_engine = not lifecycle.started

    log.info("grammar-spine API starting", version=app.version)
    if owns_engine:
        app.state.service_state = await asyncio.to_thread(lifecycle.startup)
    else:
        app.state.service_state = lifecycle.state

    try:
        yield
    finally:
        log.info("grammar-spine API shutting down")
        if owns_engine:
            await asyncio.to_thread(lifecycle.shutdown)


def create_app(
    *,
    settings: GrammarAPISettings | None = None,
    engine: AnalysisEngine | None = None,
    lifecycle: ServiceLifecycle | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : GrammarAPISettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    engine : AnalysisEngine | None
        Pre-loaded engine; the service state is built immediately.
    lifecycle : ServiceLifecycle | None
        Lifecycle owning the engine.  Ignored when *engine* is given.
    """
    settings = settings or get_settings()

    if engine is not None:
        lifecycle = ServiceLifecycle(
            lambda: engine,
            api_key=settings.api_key,
            max_text_bytes=settings.max_text_bytes,
        )
        lifecycle.startup()
    elif lifecycle is None:
        lifecycle = ServiceLifecycle.from_settings(settings)

    rate_limiter = build_rate_limiter(settings)
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        middleware=build_middleware_chain(
            settings,
            metrics=lifecycle.metrics,
            rate_limiter=rate_limiter,
            api_key=lifecycle.api_key,
        ),
    )

    # Stash shared handles on app state for middleware and dependencies
    app.state.settings = settings
    app.state.lifecycle = lifecycle
    app.state.metrics = lifecycle.metrics
    app.state.rate_limiter = rate_limiter
    app.state.service_state = lifecycle.state if lifecycle.started else None

    # Override DI so endpoints use the provided settings
    app.dependency_overrides[get_settings] = lambda: settings

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(metrics.router, tags=["observability"])
    app.include_router(check.router, tags=["check"])

    return app
