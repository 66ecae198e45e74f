"""Invocation Context: resolved identity plus persistence capability for one call.

Invariants:
    - Frozen; built by ContextFactory once per invocation, never reused
    - Handlers read identity only through require_identity() / require_role()
    - require_role() distinguishes not-authenticated (401) from forbidden (403)
"""

from dataclasses import dataclass, field
from uuid import uuid4

from scrapshelf.core.domain_types import Role
from scrapshelf.core.errors import (
    ErrorContext, ForbiddenError, UnauthenticatedError,
)
from scrapshelf.core.identity import ANONYMOUS, Authenticated, Session
from scrapshelf.core.repository_protocols import Persistence


@dataclass(frozen=True)
class Context:
    """Per-invocation bundle handed to every procedure handler."""
    db: Persistence
    session: Session = ANONYMOUS
    request_id: str = field(default_factory=lambda: uuid4().hex)

    def require_identity(self) -> Authenticated:
        if isinstance(self.session, Authenticated):
            return self.session
        raise UnauthenticatedError(
            context=ErrorContext(request_id=self.request_id),
        )

    def require_role(self, role: Role) -> Authenticated:
        identity = self.require_identity()
        if role is Role.ADMIN and not identity.is_admin:
            raise ForbiddenError(
                "This operation requires administrator rights",
                context=ErrorContext(request_id=self.request_id),
            )
        return identity
