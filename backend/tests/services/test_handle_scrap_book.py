"""Scrap Book Handlers: scrapBook.* through the Direct Caller."""

import pytest

from scrapshelf.core.errors import (
    InputValidationError, NotFoundError, UnauthenticatedError,
)


async def test_create_and_get_by_id(caller_for):
    created = await caller_for("user-token").mutate(
        "scrapBook.create", {"title": " Trip ", "image": "https://img/1.png"},
    )
    assert created["title"] == "Trip"
    fetched = await caller_for().query("scrapBook.getById", {"id": created["id"]})
    assert fetched == created


async def test_list_is_per_user(caller_for):
    ada = caller_for("user-token")
    await ada.mutate("scrapBook.create", {"title": "Mine"})
    await caller_for("other-token").mutate("scrapBook.create", {"title": "Theirs"})
    assert [b["title"] for b in await ada.query("scrapBook.list")] == ["Mine"]


async def test_list_requires_identity(caller_for):
    with pytest.raises(UnauthenticatedError):
        await caller_for().query("scrapBook.list")


async def test_unknown_id(caller_for):
    with pytest.raises(NotFoundError):
        await caller_for().query("scrapBook.getById", {"id": "missing"})


async def test_blank_title(caller_for):
    with pytest.raises(InputValidationError) as exc_info:
        await caller_for("user-token").mutate("scrapBook.create", {"title": "  "})
    assert exc_info.value.fields == {"title"}
