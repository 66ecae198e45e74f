"""Procedure Router: immutable path -> Procedure mapping built once at startup.

Invariants:
    - Paths are unique; duplicates fail in build_router(), never at dispatch time
    - Registration order is preserved (paths() / describe())
    - resolve() raises ProcedureNotFoundError for unknown paths
    - The router performs name resolution only, no business logic
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from scrapshelf.core.errors import DuplicateProcedureError, ProcedureNotFoundError
from scrapshelf.core.procedure import Procedure, ProcedureGroup


class Router:
    """Read-only registry; safe to share across concurrent invocations."""

    def __init__(self, procedures: Mapping[str, Procedure]):
        self._procedures = MappingProxyType(dict(procedures))

    def resolve(self, path: str) -> Procedure:
        procedure = self._procedures.get(path)
        if procedure is None:
            raise ProcedureNotFoundError(path)
        return procedure

    def paths(self) -> list[str]:
        return list(self._procedures)

    def describe(self) -> list[dict]:
        """Path, kind and description of every procedure, for introspection."""
        return [
            {
                "procedure": path,
                "kind": p.kind.value,
                "takes_input": p.input_schema is not None,
                "description": p.description,
            }
            for path, p in self._procedures.items()
        ]

    def merge(self, other: "Router") -> "Router":
        merged = dict(self._procedures)
        for path, procedure in other._procedures.items():
            if path in merged:
                raise DuplicateProcedureError(path)
            merged[path] = procedure
        return Router(merged)

    def __contains__(self, path: object) -> bool:
        return path in self._procedures

    def __iter__(self) -> Iterator[str]:
        return iter(self._procedures)

    def __len__(self) -> int:
        return len(self._procedures)


def build_router(*groups: ProcedureGroup) -> Router:
    """Compose procedure groups into one router. Raises DuplicateProcedureError."""
    procedures: dict[str, Procedure] = {}
    seen_groups: set[str] = set()
    for group in groups:
        if group.name in seen_groups:
            raise DuplicateProcedureError(f"{group.name}.*")
        seen_groups.add(group.name)
        for procedure in group.procedures:
            path = f"{group.name}.{procedure.name}"
            if path in procedures:
                raise DuplicateProcedureError(path)
            procedures[path] = procedure
    return Router(procedures)
