"""
Health router — liveness probe.

Endpoints:
    GET /health   Literal ``ok`` (never requires a credential)

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/health", response_class=PlainTextResponse, summary="Liveness probe")
async def health() -> PlainTextResponse:
    return PlainTextResponse("ok")
