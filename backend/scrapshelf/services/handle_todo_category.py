"""Category Handlers: procedure group "todoCategory".

Invariants:
    - Every procedure requires an identity
    - Category names are unique per user (CONFLICT otherwise)
    - Another user's category is reported as NOT_FOUND, never as FORBIDDEN
    - update applies only the fields the caller sent
"""

from scrapshelf.core.context import Context
from scrapshelf.core.domain_types import CategoryId, UserId
from scrapshelf.core.errors import ConflictError, NotFoundError
from scrapshelf.core.procedure import ProcedureGroup, mutation, query
from scrapshelf.core.repository_protocols import CategoryRecord
from scrapshelf.schemas.category import (
    CategoryIdInput, CategoryResponse, CreateCategoryInput, UpdateCategoryRequest,
)


class CategoryHandlers:
    async def list_categories(
        self, ctx: Context, _: None,
    ) -> list[CategoryResponse]:
        identity = ctx.require_identity()
        categories = await ctx.db.categories.list_for_user(identity.user_id)
        return [CategoryResponse.model_validate(c) for c in categories]

    async def create(
        self, ctx: Context, dto: CreateCategoryInput,
    ) -> CategoryResponse:
        identity = ctx.require_identity()
        if await ctx.db.categories.find_by_name(identity.user_id, dto.name):
            raise ConflictError(f"Category '{dto.name}' already exists")
        category = await ctx.db.categories.create(
            user_id=identity.user_id, name=dto.name, color=dto.color,
        )
        return CategoryResponse.model_validate(category)

    async def update(
        self, ctx: Context, dto: UpdateCategoryRequest,
    ) -> CategoryResponse:
        identity = ctx.require_identity()
        category = await self._owned(ctx, identity.user_id, dto.id)
        changes = dto.data.changes()
        new_name = changes.get("name")
        if new_name is not None and new_name != category.name:
            if await ctx.db.categories.find_by_name(identity.user_id, new_name):
                raise ConflictError(f"Category '{new_name}' already exists")
        if not changes:
            return CategoryResponse.model_validate(category)
        updated = await ctx.db.categories.update(category.id, changes)
        return CategoryResponse.model_validate(updated)

    async def delete(self, ctx: Context, dto: CategoryIdInput) -> dict:
        identity = ctx.require_identity()
        category = await self._owned(ctx, identity.user_id, dto.id)
        await ctx.db.categories.delete(category.id)
        return {"success": True}

    async def _owned(
        self, ctx: Context, user_id: UserId, category_id: str,
    ) -> CategoryRecord:
        category = await ctx.db.categories.get(CategoryId(category_id))
        if category is None or category.user_id != user_id:
            raise NotFoundError.for_resource("Category", category_id)
        return category


def build_todo_category_group() -> ProcedureGroup:
    h = CategoryHandlers()
    return ProcedureGroup("todoCategory", (
        query("list", h.list_categories),
        mutation("create", h.create, CreateCategoryInput),
        mutation("update", h.update, UpdateCategoryRequest),
        mutation("delete", h.delete, CategoryIdInput),
    ))
