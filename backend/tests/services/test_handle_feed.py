"""Feed Handlers: feed.* through the Direct Caller.

Tests cover:
    - getPublicFeeds works anonymously; getUserFeeds needs an identity
    - add registers a private feed, duplicate URL conflicts
    - addPublic and refreshAll are admin-only (401 anonymous, 403 user)
    - delete: owner or admin only
"""

import pytest

from scrapshelf.core.domain_types import FeedVisibility, UserId
from scrapshelf.core.errors import (
    ConflictError, ForbiddenError, NotFoundError, UnauthenticatedError,
)


@pytest.fixture
def public_feed(store):
    return store.add_feed("https://news.example.com/rss", "News")


async def test_public_feeds_anonymous(caller_for, public_feed, store):
    store.add_feed(
        "https://private.example.com/feed", "Private",
        visibility=FeedVisibility.PRIVATE, user_id=UserId("user-1"),
    )
    feeds = await caller_for().query("feed.getPublicFeeds")
    assert [f["title"] for f in feeds] == ["News"]
    assert feeds[0]["visibility"] == "PUBLIC"


async def test_user_feeds_anonymous_rejected(caller_for):
    with pytest.raises(UnauthenticatedError):
        await caller_for().query("feed.getUserFeeds")


async def test_add_feed_is_private_to_caller(caller_for):
    ada = caller_for("user-token")
    created = await ada.mutate("feed.add", {"url": "https://blog.example.com/atom.xml"})
    assert created["visibility"] == "PRIVATE"
    assert created["title"] == "blog.example.com"
    assert [f["id"] for f in await ada.query("feed.getUserFeeds")] == [created["id"]]
    assert await caller_for("other-token").query("feed.getUserFeeds") == []
    assert await caller_for().query("feed.getPublicFeeds") == []


async def test_add_duplicate_url_conflicts(caller_for, public_feed):
    with pytest.raises(ConflictError):
        await caller_for("user-token").mutate("feed.add", {"url": public_feed.url})


async def test_add_public_requires_admin(caller_for):
    payload = {"url": "https://example.com/rss", "title": "Example"}
    with pytest.raises(UnauthenticatedError):
        await caller_for().mutate("feed.addPublic", payload)
    with pytest.raises(ForbiddenError):
        await caller_for("user-token").mutate("feed.addPublic", payload)
    created = await caller_for("admin-token").mutate("feed.addPublic", payload)
    assert created["visibility"] == "PUBLIC"
    assert created["user_id"] is None


async def test_refresh_requires_admin(caller_for):
    with pytest.raises(UnauthenticatedError):
        await caller_for().mutate("feed.refreshAll")
    with pytest.raises(ForbiddenError):
        await caller_for("user-token").mutate("feed.refreshAll")


async def test_delete_own_feed(caller_for, store):
    ada = caller_for("user-token")
    created = await ada.mutate("feed.add", {"url": "https://a.example.com/rss"})
    assert await ada.mutate("feed.delete", {"feed_id": created["id"]}) == {"success": True}
    assert created["id"] not in store.feeds


async def test_delete_public_feed_needs_admin(caller_for, public_feed, store):
    with pytest.raises(ForbiddenError):
        await caller_for("user-token").mutate("feed.delete", {"feed_id": public_feed.id})
    await caller_for("admin-token").mutate("feed.delete", {"feed_id": public_feed.id})
    assert public_feed.id not in store.feeds


async def test_delete_someone_elses_private_feed_is_not_found(caller_for):
    created = await caller_for("user-token").mutate(
        "feed.add", {"url": "https://a.example.com/rss"},
    )
    with pytest.raises(NotFoundError):
        await caller_for("other-token").mutate("feed.delete", {"feed_id": created["id"]})
