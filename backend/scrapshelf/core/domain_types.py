"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - Ids are opaque strings wrapped in NewType; never parsed
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
CategoryId = NewType("CategoryId", str)
ScrapBookId = NewType("ScrapBookId", str)
FeedId = NewType("FeedId", str)


# ─── Enums ───────────────────────────────────────────────────────

class ProcedureKind(str, Enum):
    """Queries read, mutations write."""
    QUERY = "query"
    MUTATION = "mutation"


class Role(str, Enum):
    """User roles, stored on the users table."""
    USER = "USER"
    ADMIN = "ADMIN"


class FeedVisibility(str, Enum):
    """PUBLIC feeds are registered by admins, PRIVATE feeds belong to one user."""
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


DEFAULT_CATEGORY_COLOR = "#3B82F6"
HEX_COLOR_PATTERN = r"^#([0-9A-Fa-f]{6}|[0-9A-Fa-f]{3})$"
