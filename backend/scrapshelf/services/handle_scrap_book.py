"""Scrap Book Handlers: procedure group "scrapBook"."""

from scrapshelf.core.context import Context
from scrapshelf.core.domain_types import ScrapBookId
from scrapshelf.core.errors import NotFoundError
from scrapshelf.core.procedure import ProcedureGroup, mutation, query
from scrapshelf.schemas.scrap_book import (
    CreateScrapBookInput, ScrapBookIdInput, ScrapBookResponse,
)


class ScrapBookHandlers:
    async def list_scrap_books(
        self, ctx: Context, _: None,
    ) -> list[ScrapBookResponse]:
        """The caller's scrap books, newest first."""
        identity = ctx.require_identity()
        books = await ctx.db.scrap_books.list_for_user(identity.user_id)
        return [ScrapBookResponse.model_validate(b) for b in books]

    async def get_by_id(
        self, ctx: Context, dto: ScrapBookIdInput,
    ) -> ScrapBookResponse:
        book = await ctx.db.scrap_books.get(ScrapBookId(dto.id))
        if book is None:
            raise NotFoundError.for_resource("ScrapBook", dto.id)
        return ScrapBookResponse.model_validate(book)

    async def create(
        self, ctx: Context, dto: CreateScrapBookInput,
    ) -> ScrapBookResponse:
        identity = ctx.require_identity()
        book = await ctx.db.scrap_books.create(
            user_id=identity.user_id, title=dto.title,
            description=dto.description, image=dto.image,
        )
        return ScrapBookResponse.model_validate(book)


def build_scrap_book_group() -> ProcedureGroup:
    h = ScrapBookHandlers()
    return ProcedureGroup("scrapBook", (
        query("list", h.list_scrap_books),
        query("getById", h.get_by_id, ScrapBookIdInput),
        mutation("create", h.create, CreateScrapBookInput),
    ))
