"""Application Router: the one Router the app serves, built once at startup.

Invariants:
    - Groups listed explicitly; adding a group requires editing this file
    - Collaborators (feed fetcher, settings) are passed in, never imported globally
"""

from scrapshelf.config import Settings, get_settings
from scrapshelf.core.repository_protocols import FeedFetcher
from scrapshelf.core.router import Router, build_router
from scrapshelf.services.feed_refresh import FeedRefresher
from scrapshelf.services.handle_feed import build_feed_group
from scrapshelf.services.handle_scrap_book import build_scrap_book_group
from scrapshelf.services.handle_todo_category import build_todo_category_group


def create_app_router(
    fetcher: FeedFetcher, settings: Settings | None = None,
) -> Router:
    settings = settings or get_settings()
    refresher = FeedRefresher(
        fetcher,
        concurrency=settings.feed_refresh_concurrency,
        timeout_seconds=settings.feed_refresh_timeout_seconds,
    )
    return build_router(
        build_feed_group(refresher),
        build_scrap_book_group(),
        build_todo_category_group(),
    )
