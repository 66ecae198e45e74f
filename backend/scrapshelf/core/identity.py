"""Session Identity: closed tagged union of Authenticated | Anonymous.

Invariants:
    - A Session is exactly one of the two variants, both frozen
    - ANONYMOUS is the only Anonymous instance handed out by the factory
    - is_authenticated is the single way code branches on identity
"""

from dataclasses import dataclass
from typing import Literal

from scrapshelf.core.domain_types import Role, UserId


@dataclass(frozen=True)
class Authenticated:
    """A resolved user identity."""
    user_id: UserId
    name: str
    role: Role = Role.USER
    kind: Literal["authenticated"] = "authenticated"

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True)
class Anonymous:
    """Explicit empty identity: no credential, or one that did not resolve."""
    kind: Literal["anonymous"] = "anonymous"

    @property
    def is_authenticated(self) -> bool:
        return False

    @property
    def is_admin(self) -> bool:
        return False


Session = Authenticated | Anonymous

ANONYMOUS = Anonymous()
