"""Database Session Resolver: opaque session token -> Authenticated identity.

Invariants:
    - Expired or unknown tokens resolve to None, never raise for "not found"
    - Only the token lookup touches the database; nothing is written
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select

from scrapshelf.core.domain_types import Role, UserId
from scrapshelf.core.identity import Authenticated
from scrapshelf.infrastructure.database import DatabaseSessionManager
from scrapshelf.models import AuthSession

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class DatabaseSessionResolver:
    def __init__(self, manager: DatabaseSessionManager):
        self._manager = manager

    async def resolve(self, credential: str) -> Authenticated | None:
        async with self._manager.session() as db:
            result = await db.execute(
                select(AuthSession).where(AuthSession.token == credential),
            )
            row = result.scalar_one_or_none()
            if row is None:
                return None
            if _as_utc(row.expires_at) <= datetime.now(timezone.utc):
                logger.info("Expired session token presented", extra={"user_id": row.user_id})
                return None
            return Authenticated(
                user_id=UserId(row.user.id),
                name=row.user.name,
                role=Role(row.user.role),
            )
