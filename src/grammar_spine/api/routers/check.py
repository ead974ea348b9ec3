"""
Check router — grammar and spelling findings for one text.

Endpoints:
    POST /v1/check   Run the check pipeline on ``text``

The size guard runs on the event loop before anything else, so an
oversized body never reaches a worker thread.  The engine call itself is
synchronous and CPU-bound; it runs in a worker thread so other requests
keep being served.  When ``GRAMMAR_CHECK_TIMEOUT_SECONDS`` is set and
the deadline passes, the client gets 504 ``ENGINE_TIMEOUT``; the engine
call cannot be interrupted, it runs to completion and its result is
dropped.

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Request

from grammar_spine.api.deps import Checker, Settings
from grammar_spine.api.schemas.check import CheckRequestSchema, CheckResponseSchema
from grammar_spine.api.schemas.common import ErrorResponse
from grammar_spine.core.errors import EngineTimeout
from grammar_spine.core.logging import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/v1")

_ERROR_RESPONSES = {
    status: {"model": ErrorResponse}
    for status in (400, 401, 413, 429, 500, 504)
}


@router.post(
    "/check",
    response_model=CheckResponseSchema,
    responses=_ERROR_RESPONSES,  # type: ignore[arg-type]
    summary="Check text for grammar and spelling issues",
)
async def check_text(
    body: CheckRequestSchema,
    request: Request,
    checker: Checker,
    settings: Settings,
) -> CheckResponseSchema:
    checker.validate(body.text)

    work = asyncio.to_thread(
        checker.check,
        body.text,
        body.options.to_domain(),
        language=body.language,
    )
    timeout = settings.check_timeout_seconds
    try:
        result = await asyncio.wait_for(work, timeout=timeout)
    except TimeoutError as exc:
        log.warning("check_timed_out", timeout_seconds=timeout, chars=len(body.text))
        raise EngineTimeout(timeout) from exc

    request.state.check_result = result
    return CheckResponseSchema.from_result(result)
