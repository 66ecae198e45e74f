"""Error Hierarchy: typed, categorized exceptions for every Scrapshelf failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope; to_wire() produces the RPC envelope error
    - error_from_wire(to_wire(e)) rebuilds an exception of the same class as e
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ScrapshelfError base: FastAPI global handler and the
      RPC dispatcher both catch it
    - Authorization split in two subclasses so clients can tell
      "not authenticated" from "authenticated but forbidden"
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    TRANSPORT = "transport"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    procedure: str | None = None
    request_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


@dataclass(frozen=True)
class FieldIssue:
    """One violated field constraint."""
    field: str
    message: str
    type: str = "value_error"

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message, "type": self.type}


class ScrapshelfError(Exception):
    """Base exception for all Scrapshelf errors."""

    code = "INTERNAL_ERROR"
    category = ErrorCategory.INTERNAL
    severity = ErrorSeverity.ERROR
    http_status = 500

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()

    def details(self) -> list[dict] | None:
        return None

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        error = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "procedure": self.context.procedure,
                "request_id": self.context.request_id,
            },
        }
        details = self.details()
        if details is not None:
            error["details"] = details
        return {"error": error}

    def to_wire(self) -> dict:
        """Convert to the error half of a batched response entry."""
        error = {
            "code": self.code,
            "message": self.context.user_message or self.message,
            "category": self.category.value,
            "http_status": self.http_status,
        }
        details = self.details()
        if details is not None:
            error["details"] = details
        return error


# ─── Domain Errors (400-level) ──────────────────────────────────

class InputValidationError(ScrapshelfError):
    """Input failed schema constraints. Carries every violated field."""

    code = "VALIDATION_ERROR"
    category = ErrorCategory.VALIDATION
    http_status = 400

    def __init__(
        self, issues: list[FieldIssue], context: ErrorContext | None = None,
    ):
        fields = ", ".join(issue.field for issue in issues) or "input"
        super().__init__(f"Invalid input for: {fields}", context)
        self.issues = list(issues)

    @property
    def fields(self) -> set[str]:
        return {issue.field for issue in self.issues}

    def details(self) -> list[dict]:
        return [issue.to_dict() for issue in self.issues]


class ProcedureKindMismatchError(ScrapshelfError):
    """A query was invoked as a mutation, or the other way around."""

    code = "KIND_MISMATCH"
    category = ErrorCategory.VALIDATION
    http_status = 400


class AuthorizationError(ScrapshelfError):
    """Operation requires an identity or role the context lacks."""

    code = "UNAUTHORIZED"
    category = ErrorCategory.AUTHORIZATION
    http_status = 401


class UnauthenticatedError(AuthorizationError):
    """No identity in the context."""

    def __init__(
        self, message: str = "Authentication required",
        context: ErrorContext | None = None,
    ):
        super().__init__(message, context)


class ForbiddenError(AuthorizationError):
    """Identity present, but not allowed to do this."""

    code = "FORBIDDEN"
    http_status = 403

    def __init__(
        self, message: str = "Operation not permitted",
        context: ErrorContext | None = None,
    ):
        super().__init__(message, context)


class NotFoundError(ScrapshelfError):
    """Referenced entity does not exist or is not visible to the caller."""

    code = "NOT_FOUND"
    category = ErrorCategory.RESOURCE_NOT_FOUND
    http_status = 404

    @classmethod
    def for_resource(
        cls, resource_type: str, resource_id: str,
        context: ErrorContext | None = None,
    ) -> "NotFoundError":
        return cls(f"{resource_type} '{resource_id}' not found", context)


class ProcedureNotFoundError(NotFoundError):
    """No procedure registered under the requested path."""

    code = "PROCEDURE_NOT_FOUND"

    def __init__(self, path: str, context: ErrorContext | None = None):
        super().__init__(f"Procedure '{path}' does not exist", context)
        self.path = path

    def to_wire(self) -> dict:
        wire = super().to_wire()
        wire["path"] = self.path
        return wire


class ConflictError(ScrapshelfError):
    """Write would violate a uniqueness rule."""

    code = "CONFLICT"
    category = ErrorCategory.CONFLICT
    http_status = 409


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DuplicateProcedureError(ScrapshelfError):
    """Two procedures registered under the same path (raised while building a router)."""

    code = "DUPLICATE_PROCEDURE"
    severity = ErrorSeverity.CRITICAL

    def __init__(self, path: str, context: ErrorContext | None = None):
        super().__init__(f"Procedure '{path}' is registered more than once", context)
        self.path = path


class DatabaseError(ScrapshelfError):
    """Database operation failed."""

    code = "DATABASE_ERROR"
    category = ErrorCategory.DATABASE
    severity = ErrorSeverity.CRITICAL
    http_status = 503

    def __init__(
        self, message: str, operation: str = "unknown",
        context: ErrorContext | None = None,
    ):
        super().__init__(f"Database {operation} failed: {message}", context)
        self.operation = operation


class TransportError(ScrapshelfError):
    """A batched network call did not complete."""

    code = "TRANSPORT_ERROR"
    category = ErrorCategory.TRANSPORT
    severity = ErrorSeverity.CRITICAL
    http_status = 502


class InternalError(ScrapshelfError):
    """Unexpected handler failure. Message never carries internals."""

    severity = ErrorSeverity.CRITICAL

    def __init__(
        self, message: str = "An unexpected error occurred",
        context: ErrorContext | None = None,
    ):
        super().__init__(message, context)


# ─── Wire decoding ──────────────────────────────────────────────

_BY_CODE: dict[str, type[ScrapshelfError]] = {
    InputValidationError.code: InputValidationError,
    ProcedureKindMismatchError.code: ProcedureKindMismatchError,
    UnauthenticatedError.code: UnauthenticatedError,
    ForbiddenError.code: ForbiddenError,
    NotFoundError.code: NotFoundError,
    ProcedureNotFoundError.code: ProcedureNotFoundError,
    ConflictError.code: ConflictError,
    DatabaseError.code: DatabaseError,
    TransportError.code: TransportError,
    InternalError.code: InternalError,
}


def error_from_wire(payload: dict) -> ScrapshelfError:
    """Rebuild the exception described by a wire error payload.

    Unknown codes become InternalError so a newer server never crashes an
    older client.
    """
    code = payload.get("code", InternalError.code)
    message = payload.get("message", "")
    cls = _BY_CODE.get(code, InternalError)
    if cls is InputValidationError:
        issues = [
            FieldIssue(
                field=d.get("field", "input"),
                message=d.get("message", ""),
                type=d.get("type", "value_error"),
            )
            for d in payload.get("details") or []
        ]
        exc = InputValidationError(issues)
    elif cls is ProcedureNotFoundError:
        exc = ProcedureNotFoundError(payload.get("path", ""))
    else:
        exc = cls(message)
    exc.message = message
    exc.args = (message,)
    return exc
