"""Feed Handlers: procedure group "feed" (public/user listings, registration, refresh).

Invariants:
    - getPublicFeeds needs no identity; getUserFeeds needs one
    - refreshAll is admin-only and reports per-source outcomes, never fails on one source
    - delete: owner or admin; a feed the caller cannot see is NOT_FOUND
"""

from urllib.parse import urlparse

from scrapshelf.core.context import Context
from scrapshelf.core.domain_types import FeedId, FeedVisibility, Role, UserId
from scrapshelf.core.errors import ConflictError, ForbiddenError, NotFoundError
from scrapshelf.core.procedure import ProcedureGroup, mutation, query
from scrapshelf.schemas.feed import (
    AddFeedInput, FeedIdInput, FeedResponse, RefreshSummary,
)
from scrapshelf.services.feed_refresh import FeedRefresher


class FeedHandlers:
    def __init__(self, refresher: FeedRefresher):
        self.refresher = refresher

    async def get_public_feeds(self, ctx: Context, _: None) -> list[FeedResponse]:
        feeds = await ctx.db.feeds.list_public()
        return [FeedResponse.model_validate(f) for f in feeds]

    async def get_user_feeds(self, ctx: Context, _: None) -> list[FeedResponse]:
        identity = ctx.require_identity()
        feeds = await ctx.db.feeds.list_for_user(identity.user_id)
        return [FeedResponse.model_validate(f) for f in feeds]

    async def add_feed(self, ctx: Context, dto: AddFeedInput) -> FeedResponse:
        identity = ctx.require_identity()
        return await self._register(
            ctx, dto, FeedVisibility.PRIVATE, identity.user_id,
        )

    async def add_public_feed(self, ctx: Context, dto: AddFeedInput) -> FeedResponse:
        ctx.require_role(Role.ADMIN)
        return await self._register(ctx, dto, FeedVisibility.PUBLIC, None)

    async def delete_feed(self, ctx: Context, dto: FeedIdInput) -> dict:
        identity = ctx.require_identity()
        feed = await ctx.db.feeds.get(FeedId(dto.feed_id))
        visible = feed is not None and (
            feed.visibility is FeedVisibility.PUBLIC
            or feed.user_id == identity.user_id
            or identity.is_admin
        )
        if not visible:
            raise NotFoundError.for_resource("Feed", dto.feed_id)
        if feed.user_id != identity.user_id and not identity.is_admin:
            raise ForbiddenError("You may only delete your own feeds")
        await ctx.db.feeds.delete(feed.id)
        return {"success": True}

    async def refresh_all(self, ctx: Context, _: None) -> RefreshSummary:
        ctx.require_role(Role.ADMIN)
        return await self.refresher.refresh_all(ctx.db)

    async def _register(
        self, ctx: Context, dto: AddFeedInput,
        visibility: FeedVisibility, user_id: UserId | None,
    ) -> FeedResponse:
        if await ctx.db.feeds.find_by_url(dto.url):
            raise ConflictError("This feed is already registered")
        title = dto.title or urlparse(dto.url).netloc or "Untitled Feed"
        feed = await ctx.db.feeds.create(
            url=dto.url, title=title, description=None,
            visibility=visibility, user_id=user_id,
        )
        return FeedResponse.model_validate(feed)


def build_feed_group(refresher: FeedRefresher) -> ProcedureGroup:
    h = FeedHandlers(refresher)
    return ProcedureGroup("feed", (
        query("getPublicFeeds", h.get_public_feeds,
              description="Feeds registered by administrators"),
        query("getUserFeeds", h.get_user_feeds,
              description="The caller's private feeds"),
        mutation("add", h.add_feed, AddFeedInput,
                 description="Register a private feed for the caller"),
        mutation("addPublic", h.add_public_feed, AddFeedInput,
                 description="Register a public feed (admin)"),
        mutation("delete", h.delete_feed, FeedIdInput),
        mutation("refreshAll", h.refresh_all,
                 description="Fetch every feed source and report per-source outcomes"),
    ))
