"""Shared base settings for grammar-spine.

``ServiceBaseSettings`` holds the knobs every process needs (bind
address, log level, debug mode).  The REST layer extends it in
:mod:`grammar_spine.api.settings` with its own fields.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at first use
    - **Environment-driven:** Reads ``GRAMMAR_*`` env vars and ``.env``
    - **Sensible defaults:** Works out of the box for development

Tags:
    settings, configuration, pydantic, environment, grammar-spine

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceBaseSettings(BaseSettings):
    """Common settings shared by the API server and the CLI.

    Fields
    ──────
    host       : Bind address for the HTTP listener
    port       : Bind port for the HTTP listener
    debug      : Enable debug mode (verbose errors, console logs)
    log_level  : Structlog log level
    json_logs  : Force JSON (True) / console (False) rendering; None = auto
    """

    model_config = SettingsConfigDict(
        env_prefix="GRAMMAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Network ──────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8080

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    json_logs: bool | None = None
