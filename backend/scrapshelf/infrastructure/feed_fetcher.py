"""HTTP Feed Fetcher: default FeedFetcher collaborator (httpx + ElementTree).

Invariants:
    - fetch() raises FeedFetchError for HTTP errors, network errors and bad XML
    - Only link/title/published/summary are extracted; everything else is ignored
    - Items without a link are dropped
"""

import logging
import xml.etree.ElementTree as ET
from email.utils import parsedate_to_datetime
from datetime import datetime

import httpx

from scrapshelf.core.repository_protocols import FeedItem, FeedRecord

logger = logging.getLogger(__name__)

_ATOM = "{http://www.w3.org/2005/Atom}"


class FeedFetchError(Exception):
    """One feed source could not be fetched or read."""


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_feed(raw: bytes) -> list[FeedItem]:
    """Extract items from an RSS 2.0 or Atom document."""
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise FeedFetchError(f"Malformed feed XML: {e}") from e

    items: list[FeedItem] = []
    for node in root.iter("item"):
        link = (node.findtext("link") or "").strip()
        if link:
            items.append(FeedItem(
                link=link,
                title=(node.findtext("title") or "Untitled").strip(),
                published_at=_parse_date(node.findtext("pubDate")),
                summary=node.findtext("description"),
            ))
    for node in root.iter(f"{_ATOM}entry"):
        link_el = node.find(f"{_ATOM}link")
        link = (link_el.get("href", "") if link_el is not None else "").strip()
        if link:
            items.append(FeedItem(
                link=link,
                title=(node.findtext(f"{_ATOM}title") or "Untitled").strip(),
                published_at=_parse_date(
                    node.findtext(f"{_ATOM}updated")
                    or node.findtext(f"{_ATOM}published"),
                ),
                summary=node.findtext(f"{_ATOM}summary"),
            ))
    return items


class HttpFeedFetcher:
    """Fetches feed documents over HTTP. Shares one httpx.AsyncClient."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        user_agent: str = "Scrapshelf/1.0",
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout, follow_redirects=True,
        )
        self._user_agent = user_agent

    async def fetch(self, feed: FeedRecord) -> list[FeedItem]:
        try:
            response = await self._client.get(
                feed.url.strip(), headers={"User-Agent": self._user_agent},
            )
        except httpx.TimeoutException as e:
            raise FeedFetchError(f"Timed out fetching {feed.url}") from e
        except httpx.HTTPError as e:
            raise FeedFetchError(f"Network error: {e}") from e
        if response.status_code != 200:
            raise FeedFetchError(f"HTTP {response.status_code}")
        return parse_feed(response.content)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
