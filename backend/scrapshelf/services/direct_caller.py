"""Direct Caller: in-process procedure invocation for server-side code.

Invariants:
    - Same dispatch path as the batch endpoint (dispatch.execute)
    - A fresh Context per call; the caller itself holds no context
    - Handler errors propagate to the caller unchanged
"""

from collections.abc import Mapping
from typing import Any

from scrapshelf.core.domain_types import ProcedureKind
from scrapshelf.core.router import Router
from scrapshelf.services.context_factory import ContextFactory
from scrapshelf.services.dispatch import execute


class DirectCaller:
    """Calls procedures without a network hop, on behalf of one request's headers."""

    def __init__(
        self, router: Router, factory: ContextFactory,
        headers: Mapping[str, str] | None = None,
    ):
        self._router = router
        self._factory = factory
        self._headers = dict(headers or {})

    async def query(self, path: str, input: Any = None) -> Any:
        return await execute(
            self._router, self._factory, self._headers, path, input,
            ProcedureKind.QUERY,
        )

    async def mutate(self, path: str, input: Any = None) -> Any:
        return await execute(
            self._router, self._factory, self._headers, path, input,
            ProcedureKind.MUTATION,
        )

    async def call(self, path: str, input: Any = None) -> Any:
        """Invoke without asserting the procedure kind."""
        return await execute(
            self._router, self._factory, self._headers, path, input,
        )
