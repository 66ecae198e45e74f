"""RPC Envelope Schemas: the wire shape of one call and one result.

Invariants:
    - A batch request is a JSON array of CallEnvelope
    - CallEnvelope does not judge the procedure name; the Router does
    - A batch response is a JSON array of ResultEnvelope aligned by position
    - ok=True carries result; ok=False carries error (errors.ScrapshelfError.to_wire)
"""

from typing import Any

from pydantic import BaseModel, ConfigDict

from scrapshelf.core.domain_types import ProcedureKind


class CallEnvelope(BaseModel):
    model_config = ConfigDict(extra="forbid")

    procedure: str
    kind: ProcedureKind
    input: Any = None


class ResultEnvelope(BaseModel):
    ok: bool
    result: Any = None
    error: dict | None = None

    @classmethod
    def success(cls, result: Any) -> "ResultEnvelope":
        return cls(ok=True, result=result)

    @classmethod
    def failure(cls, error: dict) -> "ResultEnvelope":
        return cls(ok=False, error=error)

    def to_wire(self) -> dict:
        if self.ok:
            return {"ok": True, "result": self.result}
        return {"ok": False, "error": self.error}
