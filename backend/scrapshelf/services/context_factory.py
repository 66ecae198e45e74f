"""Context Factory: request headers -> fresh Context for exactly one invocation.

Invariants:
    - Credential resolution happens once per create() and is never cached
    - Bearer token wins over the session cookie
    - Missing, unknown or unresolvable credentials give ANONYMOUS, not an error
    - The persistence scope commits when the invocation succeeds, rolls back otherwise
"""

import logging
from collections.abc import Callable, Mapping
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from http.cookies import CookieError, SimpleCookie
from typing import AsyncGenerator

from scrapshelf.core.context import Context
from scrapshelf.core.identity import ANONYMOUS, Session
from scrapshelf.core.repository_protocols import Persistence, SessionResolver

logger = logging.getLogger(__name__)

PersistenceProvider = Callable[[], AbstractAsyncContextManager[Persistence]]

DEFAULT_COOKIE_NAME = "scrapshelf.session-token"


def extract_credential(
    headers: Mapping[str, str], cookie_name: str = DEFAULT_COOKIE_NAME,
) -> str | None:
    lowered = {k.lower(): v for k, v in headers.items()}
    authorization = lowered.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    raw_cookie = lowered.get("cookie")
    if not raw_cookie:
        return None
    cookie = SimpleCookie()
    try:
        cookie.load(raw_cookie)
    except CookieError:
        return None
    morsel = cookie.get(cookie_name)
    return morsel.value if morsel and morsel.value else None


class ContextFactory:
    def __init__(
        self,
        persistence: PersistenceProvider,
        resolver: SessionResolver | None = None,
        cookie_name: str = DEFAULT_COOKIE_NAME,
    ):
        self._persistence = persistence
        self._resolver = resolver
        self._cookie_name = cookie_name

    async def resolve_session(self, headers: Mapping[str, str]) -> Session:
        credential = extract_credential(headers, self._cookie_name)
        if credential is None or self._resolver is None:
            return ANONYMOUS
        try:
            identity = await self._resolver.resolve(credential)
        except Exception as e:
            logger.warning(f"Session resolution failed, continuing anonymous: {e}")
            return ANONYMOUS
        return identity or ANONYMOUS

    @asynccontextmanager
    async def create(
        self, headers: Mapping[str, str] | None = None,
    ) -> AsyncGenerator[Context, None]:
        session = await self.resolve_session(headers or {})
        async with self._persistence() as db:
            yield Context(db=db, session=session)
