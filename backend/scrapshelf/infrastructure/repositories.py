"""SQLAlchemy Repositories: Persistence capability backed by one AsyncSession.

Invariants:
    - Repositories flush, never commit; sql_persistence() commits the unit of work
    - ORM rows never leave this module; callers get frozen records
    - Every repository in one SqlPersistence shares the same AsyncSession
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from scrapshelf.core.domain_types import (
    CategoryId, FeedId, FeedVisibility, ScrapBookId, UserId,
)
from scrapshelf.core.repository_protocols import (
    CategoryRecord, FeedItem, FeedRecord, ScrapBookRecord,
)
from scrapshelf.infrastructure.database import DatabaseSessionManager
from scrapshelf.models import Article, Category, Feed, ScrapBook


def _category(row: Category) -> CategoryRecord:
    return CategoryRecord(
        id=CategoryId(row.id), name=row.name, color=row.color,
        user_id=UserId(row.user_id),
        created_at=row.created_at, updated_at=row.updated_at,
    )


def _scrap_book(row: ScrapBook) -> ScrapBookRecord:
    return ScrapBookRecord(
        id=ScrapBookId(row.id), title=row.title,
        description=row.description, image=row.image,
        user_id=UserId(row.user_id), created_at=row.created_at,
    )


def _feed(row: Feed) -> FeedRecord:
    return FeedRecord(
        id=FeedId(row.id), url=row.url, title=row.title,
        description=row.description,
        visibility=FeedVisibility(row.visibility),
        user_id=UserId(row.user_id) if row.user_id else None,
        last_fetched=row.last_fetched,
    )


class SqlCategoryRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: UserId) -> list[CategoryRecord]:
        result = await self.db.execute(
            select(Category)
            .where(Category.user_id == user_id)
            .order_by(Category.name),
        )
        return [_category(row) for row in result.scalars().all()]

    async def get(self, category_id: CategoryId) -> CategoryRecord | None:
        row = await self.db.get(Category, category_id)
        return _category(row) if row else None

    async def find_by_name(
        self, user_id: UserId, name: str,
    ) -> CategoryRecord | None:
        result = await self.db.execute(
            select(Category).where(
                Category.user_id == user_id, Category.name == name,
            ),
        )
        row = result.scalar_one_or_none()
        return _category(row) if row else None

    async def create(
        self, user_id: UserId, name: str, color: str,
    ) -> CategoryRecord:
        row = Category(user_id=user_id, name=name, color=color)
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        return _category(row)

    async def update(
        self, category_id: CategoryId, changes: dict,
    ) -> CategoryRecord:
        row = await self.db.get(Category, category_id)
        for key, value in changes.items():
            setattr(row, key, value)
        await self.db.flush()
        await self.db.refresh(row)
        return _category(row)

    async def delete(self, category_id: CategoryId) -> None:
        await self.db.execute(delete(Category).where(Category.id == category_id))
        await self.db.flush()


class SqlScrapBookRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_user(self, user_id: UserId) -> list[ScrapBookRecord]:
        result = await self.db.execute(
            select(ScrapBook)
            .where(ScrapBook.user_id == user_id)
            .order_by(ScrapBook.created_at.desc()),
        )
        return [_scrap_book(row) for row in result.scalars().all()]

    async def get(self, scrap_book_id: ScrapBookId) -> ScrapBookRecord | None:
        row = await self.db.get(ScrapBook, scrap_book_id)
        return _scrap_book(row) if row else None

    async def create(
        self, user_id: UserId, title: str, description: str, image: str,
    ) -> ScrapBookRecord:
        row = ScrapBook(
            user_id=user_id, title=title, description=description, image=image,
        )
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        return _scrap_book(row)


class SqlFeedRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _list(self, *criteria) -> list[FeedRecord]:
        result = await self.db.execute(
            select(Feed).where(*criteria).order_by(Feed.created_at),
        )
        return [_feed(row) for row in result.scalars().all()]

    async def list_all(self) -> list[FeedRecord]:
        return await self._list()

    async def list_public(self) -> list[FeedRecord]:
        return await self._list(Feed.visibility == FeedVisibility.PUBLIC.value)

    async def list_for_user(self, user_id: UserId) -> list[FeedRecord]:
        return await self._list(
            Feed.visibility == FeedVisibility.PRIVATE.value,
            Feed.user_id == user_id,
        )

    async def get(self, feed_id: FeedId) -> FeedRecord | None:
        row = await self.db.get(Feed, feed_id)
        return _feed(row) if row else None

    async def find_by_url(self, url: str) -> FeedRecord | None:
        result = await self.db.execute(select(Feed).where(Feed.url == url))
        row = result.scalar_one_or_none()
        return _feed(row) if row else None

    async def create(
        self, url: str, title: str, description: str | None,
        visibility: FeedVisibility, user_id: UserId | None,
    ) -> FeedRecord:
        row = Feed(
            url=url, title=title, description=description,
            visibility=visibility.value, user_id=user_id,
        )
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        return _feed(row)

    async def delete(self, feed_id: FeedId) -> None:
        await self.db.execute(delete(Article).where(Article.feed_id == feed_id))
        await self.db.execute(delete(Feed).where(Feed.id == feed_id))
        await self.db.flush()

    async def mark_fetched(self, feed_id: FeedId, at: datetime) -> None:
        await self.db.execute(
            update(Feed).where(Feed.id == feed_id).values(last_fetched=at),
        )
        await self.db.flush()


class SqlArticleRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def save_new(self, feed_id: FeedId, items: list[FeedItem]) -> int:
        links = {item.link for item in items if item.link}
        if not links:
            return 0
        result = await self.db.execute(
            select(Article.link).where(Article.link.in_(links)),
        )
        known = set(result.scalars().all())
        added = 0
        for item in items:
            if not item.link or item.link in known:
                continue
            known.add(item.link)
            self.db.add(Article(
                feed_id=feed_id, title=item.title, link=item.link,
                summary=item.summary, published_at=item.published_at,
            ))
            added += 1
        await self.db.flush()
        return added


class SqlPersistence:
    """One unit of work: all repositories over the same AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.session = db
        self.categories = SqlCategoryRepository(db)
        self.scrap_books = SqlScrapBookRepository(db)
        self.feeds = SqlFeedRepository(db)
        self.articles = SqlArticleRepository(db)


def sql_persistence_provider(manager: DatabaseSessionManager):
    """Persistence provider for ContextFactory: commit on success, rollback on error."""

    @asynccontextmanager
    async def provide() -> AsyncGenerator[SqlPersistence, None]:
        async with manager.session() as db:
            yield SqlPersistence(db)
            await db.commit()

    return provide
