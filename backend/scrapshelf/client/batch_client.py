"""Batched Transport Client: coalesces procedure calls into one HTTP request.

Invariants:
    - Calls issued in the same event-loop turn share one POST (auto_flush)
    - Reaching max_batch_size flushes immediately; flush() flushes on demand
    - Result i settles call i; each call gets its own result or its own error
    - Per-call errors are rebuilt with error_from_wire, so callers see the same
      exception classes a DirectCaller raises
    - A batch that fails as a whole (network, non-2xx, bad body) fails every
      call in it with TransportError
    - Draining the buffer is one swap; a call is never sent twice nor dropped

Design Decisions:
    - asyncio.Future per call: query()/mutate() are plain awaitables, so
      asyncio.gather() over them is how callers batch
    - httpx.AsyncClient injectable: tests route it to the ASGI app directly
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
from fastapi.encoders import jsonable_encoder

from scrapshelf.core.domain_types import ProcedureKind
from scrapshelf.core.errors import TransportError, error_from_wire

logger = logging.getLogger(__name__)


@dataclass
class PendingCall:
    procedure: str
    kind: ProcedureKind
    input: Any
    future: asyncio.Future = field(repr=False)

    def to_wire(self) -> dict:
        return {
            "procedure": self.procedure,
            "kind": self.kind.value,
            "input": jsonable_encoder(self.input),
        }


class BatchedRpcClient:
    def __init__(
        self,
        base_url: str = "",
        http_client: httpx.AsyncClient | None = None,
        endpoint: str = "/api/rpc",
        max_batch_size: int = 50,
        auto_flush: bool = True,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
    ):
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._url = f"{base_url.rstrip('/')}{endpoint}"
        self._max_batch_size = max_batch_size
        self._auto_flush = auto_flush
        self._headers = dict(headers or {})
        self._pending: list[PendingCall] = []
        self._flush_scheduled = False
        self._in_flight: set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def query(self, procedure: str, input: Any = None) -> Any:
        return await self._enqueue(procedure, ProcedureKind.QUERY, input)

    async def mutate(self, procedure: str, input: Any = None) -> Any:
        return await self._enqueue(procedure, ProcedureKind.MUTATION, input)

    def _enqueue(
        self, procedure: str, kind: ProcedureKind, input: Any,
    ) -> asyncio.Future:
        loop = asyncio.get_running_loop()
        call = PendingCall(procedure, kind, input, loop.create_future())
        self._pending.append(call)
        if len(self._pending) >= self._max_batch_size:
            self._spawn_flush()
        elif self._auto_flush and not self._flush_scheduled:
            self._flush_scheduled = True
            loop.call_soon(self._on_turn_end)
        return call.future

    def _on_turn_end(self) -> None:
        self._flush_scheduled = False
        self._spawn_flush()

    def _drain(self) -> list[PendingCall]:
        batch, self._pending = self._pending, []
        return batch

    def _spawn_flush(self) -> None:
        batch = self._drain()
        if not batch:
            return
        task = asyncio.ensure_future(self._dispatch(batch))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def flush(self) -> None:
        """Send everything buffered so far as one batch and settle its calls."""
        batch = self._drain()
        if batch:
            await self._dispatch(batch)

    async def _dispatch(self, batch: list[PendingCall]) -> None:
        logger.debug(
            f"Flushing RPC batch of {len(batch)} call(s)",
            extra={"batch_size": len(batch), "path": self._url},
        )
        try:
            entries = await self._send(batch)
        except TransportError as e:
            logger.warning(
                f"RPC batch failed: {e.message}",
                extra={"batch_size": len(batch), "error_code": e.code},
            )
            for call in batch:
                if not call.future.done():
                    call.future.set_exception(TransportError(e.message))
            return
        for call, entry in zip(batch, entries):
            if call.future.done():
                continue
            if entry.get("ok"):
                call.future.set_result(entry.get("result"))
            else:
                call.future.set_exception(error_from_wire(entry.get("error") or {}))

    async def _send(self, batch: list[PendingCall]) -> list[dict]:
        try:
            payload = [call.to_wire() for call in batch]
        except ValueError as e:
            raise TransportError(f"Batch input is not JSON-serializable: {e}") from e
        try:
            response = await self._client.post(
                self._url, json=payload, headers=self._headers,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Batch request failed: {e}") from e
        if not response.is_success:
            raise TransportError(
                f"Batch request rejected with HTTP {response.status_code}",
            )
        try:
            entries = response.json()
        except ValueError as e:
            raise TransportError("Batch response is not valid JSON") from e
        if not isinstance(entries, list) or len(entries) != len(batch):
            raise TransportError(
                f"Batch response does not match the {len(batch)} call(s) sent",
            )
        if not all(isinstance(entry, dict) for entry in entries):
            raise TransportError("Batch response entries must be objects")
        return entries

    async def aclose(self) -> None:
        """Send what is still buffered, wait for in-flight batches, close."""
        if self._pending:
            await self.flush()
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "BatchedRpcClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
