"""Procedure Dispatch: the one code path every transport goes through.

Invariants:
    - invoke(): resolve -> kind check -> validate -> handler -> JSON-normalize
    - execute(): fresh Context per call, then invoke(); used by both the
      Direct Caller and the batch endpoint, so their results cannot diverge
    - ScrapshelfError propagates unchanged; any other exception becomes
      InternalError (original kept as __cause__, logged with traceback)
    - SQLAlchemyError also propagates unchanged, so the unit of work
      (DatabaseSessionManager.session) rolls back and maps it to DatabaseError
"""

import logging
import time
from collections.abc import Mapping
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError

from scrapshelf.core.context import Context
from scrapshelf.core.domain_types import ProcedureKind
from scrapshelf.core.errors import (
    ErrorContext, InternalError, ProcedureKindMismatchError, ScrapshelfError,
)
from scrapshelf.core.router import Router
from scrapshelf.core.validation import parse_input
from scrapshelf.services.context_factory import ContextFactory

logger = logging.getLogger(__name__)


async def invoke(
    router: Router,
    context: Context,
    path: str,
    raw_input: Any = None,
    kind: ProcedureKind | None = None,
) -> Any:
    """Run one procedure against an already-built context."""
    started = time.perf_counter()
    try:
        procedure = router.resolve(path)
        if kind is not None and procedure.kind is not kind:
            raise ProcedureKindMismatchError(
                f"'{path}' is a {procedure.kind.value}, not a {kind.value}",
            )
        dto = parse_input(procedure.input_schema, raw_input)
        result = await procedure.handler(context, dto)
    except ScrapshelfError as e:
        e.context.procedure = e.context.procedure or path
        e.context.request_id = e.context.request_id or context.request_id
        raise
    except SQLAlchemyError:
        raise
    except Exception as e:
        logger.error(
            f"Unhandled exception in procedure {path}: {e}",
            exc_info=True,
            extra={"procedure": path, "request_id": context.request_id},
        )
        raise InternalError(
            context=ErrorContext(procedure=path, request_id=context.request_id),
        ) from e
    logger.debug(
        f"Procedure {path} completed",
        extra={
            "procedure": path,
            "request_id": context.request_id,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return jsonable_encoder(result)


async def execute(
    router: Router,
    factory: ContextFactory,
    headers: Mapping[str, str] | None,
    path: str,
    raw_input: Any = None,
    kind: ProcedureKind | None = None,
) -> Any:
    """Build a fresh context from headers and invoke one procedure in it."""
    try:
        async with factory.create(headers) as context:
            return await invoke(router, context, path, raw_input, kind)
    except ScrapshelfError:
        raise
    except Exception as e:
        logger.error(
            f"Context lifecycle failed for {path}: {e}",
            exc_info=True, extra={"procedure": path},
        )
        raise InternalError(context=ErrorContext(procedure=path)) from e
