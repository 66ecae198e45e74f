"""Scrap Book Schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateScrapBookInput(BaseModel):
    """Title is required and stripped; description/image default to empty strings."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    title: str = Field(min_length=1, max_length=100)
    description: str = Field("", max_length=2000)
    image: str = Field("", max_length=2048)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v


class ScrapBookIdInput(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)
    id: str = Field(min_length=1)


class ScrapBookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    image: str
    user_id: str
    created_at: datetime
