"""Root conftest: environment defaults plus in-memory wiring shared by every suite.

Invariants:
    - No test touches a real database or the network
    - Every test gets a fresh, empty InMemoryStore
    - rpc_router is the real application router, fed by a FakeFetcher
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest

from scrapshelf.config import Settings
from scrapshelf.infrastructure.memory_store import InMemoryStore
from scrapshelf.services.app_router import create_app_router
from scrapshelf.services.context_factory import ContextFactory
from scrapshelf.services.direct_caller import DirectCaller

from tests.fakes import FakeFetcher, TokenResolver, bearer


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def resolver():
    return TokenResolver()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def factory(store, resolver):
    return ContextFactory(store.provider(), resolver)


@pytest.fixture
def rpc_router(fetcher):
    return create_app_router(
        fetcher, Settings(feed_refresh_timeout_seconds=0.5),
    )


@pytest.fixture
def caller_for(rpc_router, factory):
    """DirectCaller factory: caller_for("user-token"), or caller_for() for anonymous."""
    def make(token: str | None = None) -> DirectCaller:
        return DirectCaller(rpc_router, factory, bearer(token) if token else None)
    return make


@pytest.fixture
def app(rpc_router, factory):
    """FastAPI app wired to the in-memory store (no lifespan, no database)."""
    from scrapshelf.main import create_app

    application = create_app()
    application.state.rpc_router = rpc_router
    application.state.context_factory = factory
    return application


@pytest.fixture
async def http(app):
    from httpx import ASGITransport, AsyncClient

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
