"""Scrapshelf API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ScrapshelfError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, session resolver, feed fetcher and procedure router are built
      once on startup by the lifespan and stored on app.state
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scrapshelf.api.error_handlers import register_error_handlers
from scrapshelf.api.routes import health, rpc
from scrapshelf.config import get_settings
from scrapshelf.infrastructure.database import init_db
from scrapshelf.infrastructure.feed_fetcher import HttpFeedFetcher
from scrapshelf.infrastructure.observability import setup_logging
from scrapshelf.infrastructure.repositories import sql_persistence_provider
from scrapshelf.services.app_router import create_app_router
from scrapshelf.services.context_factory import ContextFactory
from scrapshelf.services.session_resolver import DatabaseSessionResolver

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    fetcher = HttpFeedFetcher(
        timeout=settings.feed_refresh_timeout_seconds,
        user_agent=settings.feed_user_agent,
    )
    app.state.context_factory = ContextFactory(
        sql_persistence_provider(manager),
        DatabaseSessionResolver(manager),
        cookie_name=settings.session_cookie_name,
    )
    app.state.rpc_router = create_app_router(fetcher, settings)
    logger.info(
        f"Scrapshelf API started with {len(app.state.rpc_router)} procedures",
    )
    yield
    logger.info("Scrapshelf API shutting down")
    await fetcher.aclose()
    await manager.dispose()


def create_app(lifespan=lifespan) -> FastAPI:
    """Build the FastAPI app. Tests pass their own lifespan."""
    settings = get_settings()
    app = FastAPI(title="Scrapshelf API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(health.router)
    app.include_router(rpc.router)
    register_error_handlers(app)
    return app


app = create_app()
