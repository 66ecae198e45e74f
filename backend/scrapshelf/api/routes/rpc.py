"""Batched RPC Endpoint: one HTTP request carries many procedure calls.

Invariants:
    - POST body is a JSON array; response is an array of the same length,
      entry i answering call i
    - Each entry is validated as a CallEnvelope on its own; a malformed entry
      fails only itself, with VALIDATION_ERROR
    - One failing call never fails the batch; its error is encoded in its entry
    - Every entry gets its own Context, built from this request's headers
    - Entries run sequentially, in array order
    - GET lists the registered procedures (introspection only)
    - Mounted at settings.rpc_endpoint (default /api/rpc)

Design Decisions:
    - Router and ContextFactory live on app.state, built once in the lifespan
    - Batches above rpc_max_batch_size are rejected whole with 400
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Request

from scrapshelf.config import get_settings
from scrapshelf.core.errors import FieldIssue, InputValidationError, ScrapshelfError
from scrapshelf.core.validation import parse_input
from scrapshelf.schemas.envelope import CallEnvelope, ResultEnvelope
from scrapshelf.services.dispatch import execute

logger = logging.getLogger(__name__)
router = APIRouter(prefix=get_settings().rpc_endpoint, tags=["rpc"])


@router.post("")
async def call_batch(
    request: Request, calls: list[Any] = Body(...),
) -> list[dict]:
    limit = get_settings().rpc_max_batch_size
    if len(calls) > limit:
        raise InputValidationError([FieldIssue(
            field="body",
            message=f"Batch holds {len(calls)} calls; the limit is {limit}",
            type="too_long",
        )])

    headers = dict(request.headers)
    has_session = bool(
        headers.get("authorization") or headers.get("cookie"),
    )
    logger.info(
        f"RPC batch of {len(calls)} call(s)",
        extra={"batch_size": len(calls), "has_session": has_session},
    )
    return [
        await _run_entry(request, headers, raw, has_session) for raw in calls
    ]


async def _run_entry(
    request: Request, headers: dict[str, str], raw: Any, has_session: bool,
) -> dict:
    procedure = raw.get("procedure") if isinstance(raw, dict) else None
    try:
        call = parse_input(CallEnvelope, raw)
        value = await execute(
            request.app.state.rpc_router, request.app.state.context_factory,
            headers, call.procedure, call.input, call.kind,
        )
    except ScrapshelfError as e:
        logger.warning(
            f"RPC call {procedure} failed: {e.message}",
            extra={
                "procedure": procedure,
                "error_code": e.code,
                "has_session": has_session,
            },
        )
        return ResultEnvelope.failure(e.to_wire()).to_wire()
    return ResultEnvelope.success(value).to_wire()


@router.get("")
async def list_procedures(request: Request) -> list[dict]:
    return request.app.state.rpc_router.describe()
