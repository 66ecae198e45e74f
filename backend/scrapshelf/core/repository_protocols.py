"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Records crossing the boundary are frozen dataclasses, never ORM rows

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Repositories only flush; the unit of work (Persistence) commits or rolls back
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from scrapshelf.core.domain_types import (
    CategoryId, FeedId, FeedVisibility, ScrapBookId, UserId,
)
from scrapshelf.core.identity import Authenticated


# ─── Records ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class CategoryRecord:
    id: CategoryId
    name: str
    color: str
    user_id: UserId
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ScrapBookRecord:
    id: ScrapBookId
    title: str
    description: str
    image: str
    user_id: UserId
    created_at: datetime


@dataclass(frozen=True)
class FeedRecord:
    id: FeedId
    url: str
    title: str
    description: str | None
    visibility: FeedVisibility
    user_id: UserId | None
    last_fetched: datetime | None = None


@dataclass(frozen=True)
class FeedItem:
    """One entry returned by a feed source. Opaque beyond link and title."""
    link: str
    title: str
    published_at: datetime | None = None
    summary: str | None = None
    extra: dict = field(default_factory=dict)


# ─── Repositories ────────────────────────────────────────────────

class CategoryRepository(Protocol):
    async def list_for_user(self, user_id: UserId) -> list[CategoryRecord]: ...
    async def get(self, category_id: CategoryId) -> CategoryRecord | None: ...
    async def find_by_name(
        self, user_id: UserId, name: str,
    ) -> CategoryRecord | None: ...
    async def create(
        self, user_id: UserId, name: str, color: str,
    ) -> CategoryRecord: ...
    async def update(
        self, category_id: CategoryId, changes: dict,
    ) -> CategoryRecord: ...
    async def delete(self, category_id: CategoryId) -> None: ...


class ScrapBookRepository(Protocol):
    async def list_for_user(self, user_id: UserId) -> list[ScrapBookRecord]: ...
    async def get(self, scrap_book_id: ScrapBookId) -> ScrapBookRecord | None: ...
    async def create(
        self, user_id: UserId, title: str, description: str, image: str,
    ) -> ScrapBookRecord: ...


class FeedRepository(Protocol):
    async def list_all(self) -> list[FeedRecord]: ...
    async def list_public(self) -> list[FeedRecord]: ...
    async def list_for_user(self, user_id: UserId) -> list[FeedRecord]: ...
    async def get(self, feed_id: FeedId) -> FeedRecord | None: ...
    async def find_by_url(self, url: str) -> FeedRecord | None: ...
    async def create(
        self, url: str, title: str, description: str | None,
        visibility: FeedVisibility, user_id: UserId | None,
    ) -> FeedRecord: ...
    async def delete(self, feed_id: FeedId) -> None: ...
    async def mark_fetched(self, feed_id: FeedId, at: datetime) -> None: ...


class ArticleRepository(Protocol):
    async def save_new(self, feed_id: FeedId, items: list[FeedItem]) -> int:
        """Persist items whose link is not stored yet. Returns how many were new."""
        ...


class Persistence(Protocol):
    """Capability handle carried by a Context: one unit of work."""
    categories: CategoryRepository
    scrap_books: ScrapBookRepository
    feeds: FeedRepository
    articles: ArticleRepository


# ─── External collaborators ──────────────────────────────────────

class SessionResolver(Protocol):
    """Resolves an opaque credential to a session; owned by the auth provider."""
    async def resolve(self, credential: str) -> Authenticated | None: ...


class FeedFetcher(Protocol):
    """Fetches one feed source. Raises on any failure."""
    async def fetch(self, feed: FeedRecord) -> list[FeedItem]: ...
