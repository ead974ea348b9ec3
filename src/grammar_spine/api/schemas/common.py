"""
Common API schemas — the error envelope.

Every non-2xx response from the service uses :class:`ErrorResponse`:
``{"error": "<human-readable>", "code": "<MACHINE_CODE>"}``.

Error Codes:
    - ``INVALID_REQUEST`` (400): Malformed JSON or schema violation
    - ``UNAUTHORIZED`` (401): Missing or wrong bearer credential
    - ``PAYLOAD_TOO_LARGE`` (413): ``text`` exceeds the byte bound
    - ``RATE_LIMITED`` (429): Client exhausted its token bucket
    - ``INTERNAL_ERROR`` (500): Unexpected engine failure
    - ``ENGINE_TIMEOUT`` (504): Engine exceeded the configured deadline

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Canonical error envelope."""

    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Stable machine-readable error code")
