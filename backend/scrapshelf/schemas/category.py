"""Category Schemas: create/update DTOs with hex-color and length constraints.

Invariants:
    - name: 1-50 chars and not blank
    - color: #RGB or #RRGGBB, value preserved exactly as sent
    - CreateCategoryInput.color defaults to #3B82F6
    - UpdateCategoryInput never injects defaults: absent fields stay absent
    - UpdateCategoryInput rejects explicit null; a field is either sent with a value or omitted
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scrapshelf.core.domain_types import DEFAULT_CATEGORY_COLOR, HEX_COLOR_PATTERN


class _CategoryFields(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("name", check_fields=False)
    @classmethod
    def reject_blank_name(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("name cannot be empty or whitespace")
        return v


class CreateCategoryInput(_CategoryFields):
    name: str = Field(min_length=1, max_length=50)
    color: str = Field(DEFAULT_CATEGORY_COLOR, pattern=HEX_COLOR_PATTERN)


class UpdateCategoryInput(_CategoryFields):
    name: str | None = Field(None, min_length=1, max_length=50)
    color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)

    @field_validator("name", "color")
    @classmethod
    def reject_explicit_null(cls, v: str | None) -> str:
        # Only runs for fields the caller sent; omitted fields keep their default
        if v is None:
            raise ValueError("Field may be omitted but not null")
        return v

    def changes(self) -> dict:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class CategoryIdInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    id: str = Field(min_length=1)


class UpdateCategoryRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    id: str = Field(min_length=1)
    data: UpdateCategoryInput


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    color: str
    user_id: str
    created_at: datetime
    updated_at: datetime
