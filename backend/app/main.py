"""Sleep Olympics API: FastAPI application factory.

Invariants:
    - create_app takes an already validated DocumentStore: no route group can be
      mounted before the data-access stage succeeded
    - Middleware order is fixed by configure_middleware
    - Route groups registered explicitly, each receiving the store by injection
    - No module-level app: importing this module opens no connections

Design Decisions:
    - Lifespan over @app.on_event for runtime knobs that need a running loop
"""

import logging
from contextlib import asynccontextmanager

import anyio.to_thread
from fastapi import FastAPI

from app.api.error_handlers import register_error_handlers
from app.api.middleware import configure_middleware
from app.api.routes import (
    auth, competitions, health, invitations, notifications, sleep, users,
)
from app.config import Settings
from app.core.store_protocol import DocumentStore

logger = logging.getLogger(__name__)

ROUTE_GROUPS = (auth, users, sleep, competitions, notifications, invitations)


def _lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        if settings.threadpool_size:
            limiter = anyio.to_thread.current_default_thread_limiter()
            limiter.total_tokens = settings.threadpool_size
            logger.info(f"Thread pool limited to {settings.threadpool_size} workers")
        if settings.max_memory_mb:
            logger.info(f"Memory ceiling hint: {settings.max_memory_mb} MB")
        logger.info(
            "Sleep Olympics API started",
            extra={"environment": settings.environment},
        )
        yield
        logger.info("Sleep Olympics API shutting down")

    return lifespan


def create_app(settings: Settings, store: DocumentStore) -> FastAPI:
    app = FastAPI(
        title="Sleep Olympics API",
        version=settings.version,
        lifespan=_lifespan(settings),
    )
    app.state.settings = settings
    app.state.store = store

    configure_middleware(app, settings)
    register_error_handlers(app, settings)

    app.include_router(health.build_router(settings))
    for group in ROUTE_GROUPS:
        app.include_router(group.build_router(store))
    return app
