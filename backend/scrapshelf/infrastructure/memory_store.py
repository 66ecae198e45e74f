"""In-Memory Persistence: dict-backed implementation of the Persistence protocol.

Invariants:
    - Same observable behavior as the SQLAlchemy repositories (ordering, uniqueness)
    - Records are frozen, so updates replace the stored record
    - Writes are visible immediately; there is no rollback

Used by tests and local experiments where a database is not worth the setup.
"""

from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import AsyncGenerator
from uuid import uuid4

from scrapshelf.core.domain_types import (
    CategoryId, FeedId, FeedVisibility, ScrapBookId, UserId,
)
from scrapshelf.core.repository_protocols import (
    CategoryRecord, FeedItem, FeedRecord, ScrapBookRecord,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryStore:
    """Shared tables; hand out per-invocation views with provider()."""

    def __init__(self):
        self.categories: dict[str, CategoryRecord] = {}
        self.scrap_books: dict[str, ScrapBookRecord] = {}
        self.feeds: dict[str, FeedRecord] = {}
        self.article_links: dict[str, str] = {}  # link -> feed_id

    def add_feed(
        self, url: str, title: str, visibility: FeedVisibility = FeedVisibility.PUBLIC,
        user_id: UserId | None = None, description: str | None = None,
    ) -> FeedRecord:
        record = FeedRecord(
            id=FeedId(str(uuid4())), url=url, title=title,
            description=description, visibility=visibility, user_id=user_id,
        )
        self.feeds[record.id] = record
        return record

    def provider(self):
        @asynccontextmanager
        async def provide() -> AsyncGenerator["InMemoryPersistence", None]:
            yield InMemoryPersistence(self)

        return provide


class _MemoryCategories:
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def list_for_user(self, user_id: UserId) -> list[CategoryRecord]:
        return sorted(
            (c for c in self._store.categories.values() if c.user_id == user_id),
            key=lambda c: c.name,
        )

    async def get(self, category_id: CategoryId) -> CategoryRecord | None:
        return self._store.categories.get(category_id)

    async def find_by_name(
        self, user_id: UserId, name: str,
    ) -> CategoryRecord | None:
        for c in self._store.categories.values():
            if c.user_id == user_id and c.name == name:
                return c
        return None

    async def create(
        self, user_id: UserId, name: str, color: str,
    ) -> CategoryRecord:
        now = _now()
        record = CategoryRecord(
            id=CategoryId(str(uuid4())), name=name, color=color,
            user_id=user_id, created_at=now, updated_at=now,
        )
        self._store.categories[record.id] = record
        return record

    async def update(
        self, category_id: CategoryId, changes: dict,
    ) -> CategoryRecord:
        record = replace(
            self._store.categories[category_id], **changes, updated_at=_now(),
        )
        self._store.categories[category_id] = record
        return record

    async def delete(self, category_id: CategoryId) -> None:
        self._store.categories.pop(category_id, None)


class _MemoryScrapBooks:
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def list_for_user(self, user_id: UserId) -> list[ScrapBookRecord]:
        return sorted(
            (b for b in self._store.scrap_books.values() if b.user_id == user_id),
            key=lambda b: b.created_at,
            reverse=True,
        )

    async def get(self, scrap_book_id: ScrapBookId) -> ScrapBookRecord | None:
        return self._store.scrap_books.get(scrap_book_id)

    async def create(
        self, user_id: UserId, title: str, description: str, image: str,
    ) -> ScrapBookRecord:
        record = ScrapBookRecord(
            id=ScrapBookId(str(uuid4())), title=title, description=description,
            image=image, user_id=user_id, created_at=_now(),
        )
        self._store.scrap_books[record.id] = record
        return record


class _MemoryFeeds:
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def list_all(self) -> list[FeedRecord]:
        return list(self._store.feeds.values())

    async def list_public(self) -> list[FeedRecord]:
        return [
            f for f in self._store.feeds.values()
            if f.visibility is FeedVisibility.PUBLIC
        ]

    async def list_for_user(self, user_id: UserId) -> list[FeedRecord]:
        return [
            f for f in self._store.feeds.values()
            if f.visibility is FeedVisibility.PRIVATE and f.user_id == user_id
        ]

    async def get(self, feed_id: FeedId) -> FeedRecord | None:
        return self._store.feeds.get(feed_id)

    async def find_by_url(self, url: str) -> FeedRecord | None:
        for f in self._store.feeds.values():
            if f.url == url:
                return f
        return None

    async def create(
        self, url: str, title: str, description: str | None,
        visibility: FeedVisibility, user_id: UserId | None,
    ) -> FeedRecord:
        return self._store.add_feed(
            url, title, visibility=visibility, user_id=user_id,
            description=description,
        )

    async def delete(self, feed_id: FeedId) -> None:
        self._store.feeds.pop(feed_id, None)
        self._store.article_links = {
            link: fid for link, fid in self._store.article_links.items()
            if fid != feed_id
        }

    async def mark_fetched(self, feed_id: FeedId, at: datetime) -> None:
        feed = self._store.feeds.get(feed_id)
        if feed is not None:
            self._store.feeds[feed_id] = replace(feed, last_fetched=at)


class _MemoryArticles:
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def save_new(self, feed_id: FeedId, items: list[FeedItem]) -> int:
        added = 0
        for item in items:
            if not item.link or item.link in self._store.article_links:
                continue
            self._store.article_links[item.link] = feed_id
            added += 1
        return added


class InMemoryPersistence:
    def __init__(self, store: InMemoryStore):
        self.categories = _MemoryCategories(store)
        self.scrap_books = _MemoryScrapBooks(store)
        self.feeds = _MemoryFeeds(store)
        self.articles = _MemoryArticles(store)
