"""
CLI: ``grammar-spine serve`` — start the HTTP service.

The engine is loaded before uvicorn binds the socket, so the service is
never reachable without a working engine.  SIGINT/SIGTERM are handled by
uvicorn: it stops accepting connections, lets in-flight requests finish
(bounded by ``--shutdown-timeout`` when given) and returns here, after
which the engine is closed.  A bind failure exits with status 1.
"""

from __future__ import annotations

import typer
import uvicorn

from grammar_spine.api.app import create_app
from grammar_spine.api.settings import GrammarAPISettings
from grammar_spine.cli.utils import console, fail
from grammar_spine.core.lifecycle import ServiceLifecycle
from grammar_spine.core.logging import configure_logging, get_logger

log = get_logger(__name__)


def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address [env: GRAMMAR_HOST]"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port [env: GRAMMAR_PORT]"),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level [env: GRAMMAR_LOG_LEVEL]"),
    json_logs: bool | None = typer.Option(None, "--json-logs/--console-logs", help="Log format (default: auto)"),
    shutdown_timeout: float | None = typer.Option(
        None, "--shutdown-timeout", min=0, help="Max seconds to drain in-flight requests"
    ),
) -> None:
    """Start the grammar-spine REST API server."""
    overrides = {
        "host": host,
        "port": port,
        "log_level": log_level,
        "json_logs": json_logs,
        "shutdown_timeout_seconds": shutdown_timeout,
    }
    settings = GrammarAPISettings(**{k: v for k, v in overrides.items() if v is not None})
    configure_logging(settings.log_level, json_format=settings.json_logs)

    lifecycle = ServiceLifecycle.from_settings(settings)
    try:
        lifecycle.startup()
    except Exception as exc:
        log.error("engine_load_failed", error_type=type(exc).__name__, error=str(exc), exc_info=True)
        raise fail(f"could not load the analysis engine: {exc}", code="ENGINE_LOAD_FAILED") from exc

    app = create_app(settings=settings, lifecycle=lifecycle)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,
        timeout_graceful_shutdown=settings.shutdown_timeout_seconds,
    )
    server = uvicorn.Server(config)

    console.print(f"[bold green]Starting grammar-spine API[/bold green] on {settings.host}:{settings.port}")
    log.info("server_starting", host=settings.host, port=settings.port, auth_enabled=lifecycle.api_key is not None)
    try:
        server.run()
    finally:
        lifecycle.shutdown()

    if not server.started:
        raise fail(f"could not bind {settings.host}:{settings.port}", code="BIND_FAILED")
    log.info("server_stopped")
