"""
API-specific settings.

Extends :class:`~grammar_spine.core.settings.ServiceBaseSettings` with the
parameters that govern the REST transport (CORS, auth, rate limiting)
and the analysis engine.

All values can be overridden via environment variables prefixed with
``GRAMMAR_`` (e.g. ``GRAMMAR_CORS_ORIGINS``, ``GRAMMAR_API_KEY``).
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import NoDecode

from grammar_spine.checking.validator import MAX_TEXT_BYTES
from grammar_spine.core.settings import ServiceBaseSettings


class GrammarAPISettings(ServiceBaseSettings):
    """Settings for the grammar REST API.

    Order of precedence (highest → lowest):
        1. Init kwargs (tests)
        2. Environment variables (``GRAMMAR_PORT``, etc.)
        3. ``.env`` file
        4. Defaults below
    """

    # ── API ──────────────────────────────────────────────────────────────
    api_title: str = Field(default="grammar-spine API", description="OpenAPI title")
    api_version: str = Field(default="0.1.0", description="OpenAPI version string")

    # ── CORS ─────────────────────────────────────────────────────────────
    cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Allowed CORS origins (comma-separated). Empty or '*' is permissive.",
    )

    # ── Auth ─────────────────────────────────────────────────────────────
    api_key: str | None = Field(default=None, description="Shared bearer secret; unset disables auth")

    # ── Rate limiting ────────────────────────────────────────────────────
    rate_limit_enabled: bool = Field(default=True, description="Enable per-IP rate limiting")
    rate_limit_per_second: float = Field(default=10.0, gt=0, description="Sustained requests per second per IP")
    rate_limit_burst: int = Field(default=20, ge=1, description="Token bucket capacity per IP")
    rate_limit_max_clients: int = Field(default=10_000, ge=1, description="Max tracked client IPs")

    # ── Engine / checking ────────────────────────────────────────────────
    max_text_bytes: int = Field(default=MAX_TEXT_BYTES, ge=1, description="Max UTF-8 size of 'text'")
    engine_language: str = Field(default="en-US", description="Locale/dialect checked against")
    engine_remote_url: str | None = Field(default=None, description="Remote LanguageTool server URL")
    check_timeout_seconds: float | None = Field(
        default=None, gt=0, description="Per-request engine deadline; unset waits indefinitely"
    )

    # ── Lifecycle ────────────────────────────────────────────────────────
    shutdown_timeout_seconds: float | None = Field(
        default=None, ge=0, description="Max graceful drain time; unset waits for all requests"
    )

    @field_validator("api_key", "engine_remote_url", mode="before")
    @classmethod
    def _blank_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def cors_permissive(self) -> bool:
        """True when no explicit allow-list is configured."""
        return not self.cors_origins or "*" in self.cors_origins
