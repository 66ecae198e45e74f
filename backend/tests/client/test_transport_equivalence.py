"""Transport Equivalence: DirectCaller and BatchedRpcClient give the same answers.

Tests cover:
    - Same (procedure, input, session) -> same result through both transports
    - Same error class and details through both transports
    - Several client calls in one turn reach the server as one batch
"""

import asyncio
import json

import httpx
import pytest

from scrapshelf.client import BatchedRpcClient
from scrapshelf.core.errors import (
    ForbiddenError, InputValidationError, ProcedureNotFoundError, UnauthenticatedError,
)

from tests.fakes import bearer, items


@pytest.fixture
async def client_for(app):
    clients = []

    def make(token: str | None = None) -> BatchedRpcClient:
        http = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test",
        )
        client = BatchedRpcClient(http_client=http, headers=bearer(token) if token else None)
        clients.append(http)
        return client

    yield make
    for http in clients:
        await http.aclose()


async def test_same_results(caller_for, client_for):
    direct = caller_for("user-token")
    remote = client_for("user-token")
    await direct.mutate("todoCategory.create", {"name": "Work", "color": "#abc"})
    await remote.mutate("scrapBook.create", {"title": "Trip"})

    for path in ("todoCategory.list", "scrapBook.list", "feed.getUserFeeds"):
        assert await remote.query(path) == await direct.query(path)


async def test_same_refresh_summary(caller_for, client_for, store, fetcher):
    feed = store.add_feed("https://a.example.com/rss", "A")
    fetcher.responses[feed.url] = items("https://a/1")
    remote = await client_for("admin-token").mutate("feed.refreshAll")
    direct = await caller_for("admin-token").mutate("feed.refreshAll")
    assert remote["total"] == direct["total"] == 1
    assert remote["outcomes"][0].keys() == direct["outcomes"][0].keys()


@pytest.mark.parametrize("token,path,kind,payload,error", [
    (None, "feed.getUserFeeds", "query", None, UnauthenticatedError),
    ("user-token", "feed.refreshAll", "mutate", None, ForbiddenError),
    ("user-token", "todoCategory.create", "mutate", {"name": "", "color": "x"},
     InputValidationError),
    (None, "nothing.here", "query", None, ProcedureNotFoundError),
])
async def test_same_errors(caller_for, client_for, token, path, kind, payload, error):
    with pytest.raises(error) as direct_exc:
        await getattr(caller_for(token), kind)(path, payload)
    with pytest.raises(error) as remote_exc:
        await getattr(client_for(token), kind)(path, payload)
    assert remote_exc.value.message == direct_exc.value.message
    assert remote_exc.value.to_wire() == direct_exc.value.to_wire()


async def test_turn_is_one_server_batch(app):
    seen_sizes = []

    class _CountingTransport(httpx.ASGITransport):
        async def handle_async_request(self, request):
            seen_sizes.append(len(json.loads(request.content)))
            return await super().handle_async_request(request)

    http = httpx.AsyncClient(transport=_CountingTransport(app=app), base_url="http://test")
    client = BatchedRpcClient(http_client=http, headers=bearer("user-token"))
    results = await asyncio.gather(
        client.mutate("todoCategory.create", {"name": "A"}),
        client.mutate("todoCategory.create", {"name": "B"}),
        client.query("todoCategory.list"),
        return_exceptions=True,
    )
    assert seen_sizes == [3]
    assert [c["name"] for c in results[2]] == ["A", "B"]
    await http.aclose()


async def test_unknown_name_fails_only_its_own_call(caller_for, client_for):
    client = client_for("user-token")
    listed, empty_name, long_name = await asyncio.gather(
        client.query("todoCategory.list"),
        client.query(""),
        client.query("x" * 300),
        return_exceptions=True,
    )
    assert listed == []
    assert isinstance(empty_name, ProcedureNotFoundError)
    assert isinstance(long_name, ProcedureNotFoundError)
    with pytest.raises(ProcedureNotFoundError):
        await caller_for("user-token").query("")
