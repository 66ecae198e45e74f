"""Procedure Descriptors: immutable name + kind + input schema + handler.

Invariants:
    - Procedure and ProcedureGroup are frozen; registered once at startup
    - input_schema None means the procedure accepts no input
    - Handlers are async callables of (Context, dto) and hold no per-call state
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from scrapshelf.core.context import Context
from scrapshelf.core.domain_types import ProcedureKind

Handler = Callable[[Context, Any], Awaitable[Any]]


@dataclass(frozen=True)
class Procedure:
    name: str
    kind: ProcedureKind
    handler: Handler
    input_schema: type[BaseModel] | None = None
    description: str = ""


@dataclass(frozen=True)
class ProcedureGroup:
    """Named set of procedures; public path is '<group>.<procedure>'."""
    name: str
    procedures: tuple[Procedure, ...]


def query(
    name: str, handler: Handler,
    input_schema: type[BaseModel] | None = None, description: str = "",
) -> Procedure:
    return Procedure(name, ProcedureKind.QUERY, handler, input_schema, description)


def mutation(
    name: str, handler: Handler,
    input_schema: type[BaseModel] | None = None, description: str = "",
) -> Procedure:
    return Procedure(name, ProcedureKind.MUTATION, handler, input_schema, description)
