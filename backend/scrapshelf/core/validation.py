"""Input Validation: raw JSON-compatible input -> validated DTO, or every field issue.

Invariants:
    - parse_input is pure and deterministic
    - Failures list every violated constraint, never just the first
    - A schema of None accepts only an absent input (None or {})
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from scrapshelf.core.errors import FieldIssue, InputValidationError

T = TypeVar("T", bound=BaseModel)


def issues_from_pydantic(exc: ValidationError) -> list[FieldIssue]:
    return [
        FieldIssue(
            field=".".join(str(loc) for loc in e["loc"]) or "input",
            message=e["msg"],
            type=e["type"],
        )
        for e in exc.errors()
    ]


def parse_input(schema: type[T] | None, raw: Any) -> T | None:
    if schema is None:
        if raw is None or raw == {}:
            return None
        raise InputValidationError([
            FieldIssue("input", "This procedure takes no input", "extra_forbidden"),
        ])
    try:
        return schema.model_validate(raw)
    except ValidationError as e:
        raise InputValidationError(issues_from_pydantic(e)) from e
