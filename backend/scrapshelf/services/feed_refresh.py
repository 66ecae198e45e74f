"""Feed Refresh Fan-out: fetch every registered source, collect per-source outcomes.

Invariants:
    - One failing or slow source never aborts or fails the others
    - Fetches run concurrently (bounded by concurrency); each has its own timeout
    - Persistence happens sequentially after every fetch finished
      (the unit of work is never shared between tasks)
    - The summary is built only once all outcomes are known
    - No dedup across sources in the summary; storage keeps items whose link is new
"""

import asyncio
import logging
from datetime import datetime, timezone

from scrapshelf.core.repository_protocols import (
    FeedFetcher, FeedItem, FeedRecord, Persistence,
)
from scrapshelf.schemas.feed import RefreshSummary, SourceOutcome

logger = logging.getLogger(__name__)


class FeedRefresher:
    def __init__(
        self, fetcher: FeedFetcher, concurrency: int = 4,
        timeout_seconds: float = 30.0,
    ):
        self._fetcher = fetcher
        self._concurrency = max(1, concurrency)
        self._timeout = timeout_seconds

    async def refresh_all(self, db: Persistence) -> RefreshSummary:
        feeds = await db.feeds.list_all()
        logger.info(f"Refreshing {len(feeds)} feed(s)")
        semaphore = asyncio.Semaphore(self._concurrency)
        fetched = await asyncio.gather(
            *(self._fetch_one(feed, semaphore) for feed in feeds),
        )

        outcomes: list[SourceOutcome] = []
        fetched_at = datetime.now(timezone.utc)
        for feed, (items, error) in zip(feeds, fetched):
            if error is not None:
                outcomes.append(SourceOutcome(
                    feed_id=feed.id, title=feed.title, ok=False, error=error,
                ))
                continue
            new_items = await db.articles.save_new(feed.id, items)
            await db.feeds.mark_fetched(feed.id, fetched_at)
            outcomes.append(SourceOutcome(
                feed_id=feed.id, title=feed.title, ok=True, new_items=new_items,
            ))

        summary = RefreshSummary.from_outcomes(outcomes)
        if summary.failed:
            logger.warning(
                f"{summary.failed} of {summary.total} feed(s) failed to refresh",
            )
        logger.info(
            f"Feed refresh finished: {summary.succeeded} ok, "
            f"{summary.new_items} new item(s)",
        )
        return summary

    async def _fetch_one(
        self, feed: FeedRecord, semaphore: asyncio.Semaphore,
    ) -> tuple[list[FeedItem], str | None]:
        async with semaphore:
            try:
                items = await asyncio.wait_for(
                    self._fetcher.fetch(feed), timeout=self._timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    f"Feed '{feed.title}' timed out", extra={"feed_id": feed.id},
                )
                return [], f"Timed out after {self._timeout:g}s"
            except Exception as e:
                logger.warning(
                    f"Feed '{feed.title}' failed: {e}", extra={"feed_id": feed.id},
                )
                return [], str(e) or type(e).__name__
        return items, None
