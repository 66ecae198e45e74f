"""Feed Refresh: fan-out over every source with per-source outcomes.

Tests cover:
    - 3 sources, 1 failing -> 2 successes + 1 documented failure
    - A hanging source times out without blocking the others
    - Only links not seen before count as new; last_fetched stamped on success
    - Failed sources are not stamped
    - Concurrency bound is respected
"""

import asyncio

import pytest

from scrapshelf.infrastructure.feed_fetcher import FeedFetchError
from scrapshelf.infrastructure.memory_store import InMemoryPersistence
from scrapshelf.services.feed_refresh import FeedRefresher

from tests.fakes import FakeFetcher, items


@pytest.fixture
def three_feeds(store):
    return [
        store.add_feed("https://a.example.com/rss", "A"),
        store.add_feed("https://b.example.com/rss", "B"),
        store.add_feed("https://c.example.com/rss", "C"),
    ]


async def test_one_failing_source_does_not_abort_others(caller_for, fetcher, three_feeds, store):
    a, b, c = three_feeds
    fetcher.responses[a.url] = items("https://a/1", "https://a/2")
    fetcher.responses[b.url] = FeedFetchError("HTTP 500")
    fetcher.responses[c.url] = items("https://c/1")

    summary = await caller_for("admin-token").mutate("feed.refreshAll")

    assert (summary["total"], summary["succeeded"], summary["failed"]) == (3, 2, 1)
    assert summary["new_items"] == 3
    by_title = {o["title"]: o for o in summary["outcomes"]}
    assert by_title["B"] == {
        "feed_id": b.id, "title": "B", "ok": False, "new_items": 0, "error": "HTTP 500",
    }
    assert by_title["A"]["ok"] and by_title["A"]["new_items"] == 2
    assert store.feeds[a.id].last_fetched is not None
    assert store.feeds[b.id].last_fetched is None


async def test_hanging_source_times_out(store, three_feeds):
    fetcher = FakeFetcher()
    fetcher.responses[three_feeds[0].url] = "hang"
    fetcher.responses[three_feeds[1].url] = items("https://b/1")
    refresher = FeedRefresher(fetcher, timeout_seconds=0.05)

    summary = await refresher.refresh_all(InMemoryPersistence(store))

    assert summary.succeeded == 2
    failed = [o for o in summary.outcomes if not o.ok]
    assert [o.title for o in failed] == ["A"]
    assert failed[0].error == "Timed out after 0.05s"


async def test_second_refresh_counts_only_new_links(store, three_feeds):
    fetcher = FakeFetcher()
    fetcher.responses[three_feeds[0].url] = items("https://a/1")
    refresher = FeedRefresher(fetcher)
    db = InMemoryPersistence(store)

    assert (await refresher.refresh_all(db)).new_items == 1
    fetcher.responses[three_feeds[0].url] = items("https://a/1", "https://a/2")
    assert (await refresher.refresh_all(db)).new_items == 1


async def test_same_link_in_two_sources_stored_once(store, three_feeds):
    fetcher = FakeFetcher()
    fetcher.responses[three_feeds[0].url] = items("https://shared/1")
    fetcher.responses[three_feeds[1].url] = items("https://shared/1")

    summary = await FeedRefresher(fetcher).refresh_all(InMemoryPersistence(store))

    assert summary.succeeded == 3
    assert summary.new_items == 1
    assert list(store.article_links) == ["https://shared/1"]


async def test_no_feeds(store):
    summary = await FeedRefresher(FakeFetcher()).refresh_all(InMemoryPersistence(store))
    assert summary.total == 0
    assert summary.outcomes == []


async def test_concurrency_bound(store, three_feeds):
    active = 0
    peak = 0

    class _Slow:
        async def fetch(self, feed):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return []

    summary = await FeedRefresher(_Slow(), concurrency=2).refresh_all(
        InMemoryPersistence(store),
    )
    assert summary.succeeded == 3
    assert peak == 2
