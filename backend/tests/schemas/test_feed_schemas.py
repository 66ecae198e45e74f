"""Feed and Scrap Book Schemas.

Tests cover:
    - Feed URLs must be http(s) and look like a feed
    - RefreshSummary counts derive from outcomes
    - Scrap book titles are stripped and required
"""

import pytest
from pydantic import ValidationError

from scrapshelf.schemas.feed import AddFeedInput, RefreshSummary, SourceOutcome
from scrapshelf.schemas.scrap_book import CreateScrapBookInput


@pytest.mark.parametrize("url", [
    "https://example.com/rss",
    "http://blog.example.com/feed/",
    "https://example.com/atom.xml",
    "https://example.com/index.xml",
])
def test_feed_urls_accepted(url):
    assert AddFeedInput(url=url).url == url


@pytest.mark.parametrize("url", [
    "ftp://example.com/rss",
    "not a url",
    "https://example.com/blog",
])
def test_feed_urls_rejected(url):
    with pytest.raises(ValidationError):
        AddFeedInput(url=url)


def test_feed_url_is_stripped():
    assert AddFeedInput(url="  https://example.com/rss  ").url == "https://example.com/rss"


def test_refresh_summary_counts():
    summary = RefreshSummary.from_outcomes([
        SourceOutcome(feed_id="a", title="A", ok=True, new_items=2),
        SourceOutcome(feed_id="b", title="B", ok=False, error="HTTP 500"),
        SourceOutcome(feed_id="c", title="C", ok=True, new_items=1),
    ])
    assert (summary.total, summary.succeeded, summary.failed, summary.new_items) == (3, 2, 1, 3)


def test_scrap_book_title_stripped():
    dto = CreateScrapBookInput(title="  Trip  ")
    assert dto.title == "Trip"
    assert dto.description == ""
    assert dto.image == ""


def test_scrap_book_blank_title_rejected():
    with pytest.raises(ValidationError, match="Title is required"):
        CreateScrapBookInput(title="   ")
