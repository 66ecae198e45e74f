"""Feed Schemas: feed registration input, feed listing and refresh aggregate.

Invariants:
    - AddFeedInput.url is an http(s) URL that looks like a feed
      (mentions rss/feed/atom or ends in xml)
    - RefreshSummary counts always match its outcomes list
"""

from datetime import datetime

from pydantic import (
    BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator,
)

from scrapshelf.core.domain_types import FeedVisibility

_HTTP_URL = TypeAdapter(HttpUrl)
_FEED_HINTS = ("rss", "feed", "atom")


class AddFeedInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str = Field(min_length=1, max_length=2048)
    title: str | None = Field(None, max_length=200)

    @field_validator("url")
    @classmethod
    def validate_feed_url(cls, v: str) -> str:
        v = v.strip()
        try:
            _HTTP_URL.validate_python(v)
        except ValidationError:
            raise ValueError("URL must be a valid http(s) URL")
        lowered = v.lower()
        if not any(h in lowered for h in _FEED_HINTS) and not lowered.endswith("xml"):
            raise ValueError("URL does not look like an RSS/Atom feed")
        return v


class FeedIdInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    feed_id: str = Field(min_length=1)


class FeedResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    url: str
    title: str
    description: str | None
    visibility: FeedVisibility
    user_id: str | None
    last_fetched: datetime | None


class SourceOutcome(BaseModel):
    """Result of refreshing one feed source. ok=False carries the failure reason."""
    feed_id: str
    title: str
    ok: bool
    new_items: int = 0
    error: str | None = None


class RefreshSummary(BaseModel):
    total: int
    succeeded: int
    failed: int
    new_items: int
    outcomes: list[SourceOutcome]

    @classmethod
    def from_outcomes(cls, outcomes: list[SourceOutcome]) -> "RefreshSummary":
        succeeded = sum(1 for o in outcomes if o.ok)
        return cls(
            total=len(outcomes),
            succeeded=succeeded,
            failed=len(outcomes) - succeeded,
            new_items=sum(o.new_items for o in outcomes),
            outcomes=outcomes,
        )
