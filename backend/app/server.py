"""Server Bootstrap: ordered startup and the process entry point.

Invariants:
    - Stages run strictly in order: settings -> Firebase store -> document store
      verification -> app construction -> listener bind -> serve
    - A failed stage raises FatalInitializationError and nothing after it runs;
      in particular no socket is bound
    - main() is the only place that turns a fatal error into a process exit
"""

import asyncio
import logging
import socket
import sys

import uvicorn
from fastapi import FastAPI

from app.config import Settings, get_settings
from app.core.errors import FatalInitializationError
from app.infrastructure.document_store import FirestoreDocumentStore, verify_store_surface
from app.infrastructure.firebase import initialize_store
from app.infrastructure.observability import setup_logging
from app.main import create_app

logger = logging.getLogger(__name__)


async def bootstrap(settings: Settings) -> FastAPI:
    """Run every pre-listener stage and return the ready application."""
    logger.info(
        "Environment variables loaded",
        extra={"environment": settings.environment},
    )
    client = await initialize_store(settings)
    store = FirestoreDocumentStore(client)
    verify_store_surface(store)
    return create_app(settings, store)


def bind_listener(settings: Settings) -> socket.socket:
    try:
        return socket.create_server((settings.host, settings.port))
    except OSError as exc:
        raise FatalInitializationError(
            "listener", f"Cannot bind {settings.host}:{settings.port}: {exc}",
        ) from exc


async def start_server(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    app = await bootstrap(settings)
    sock = bind_listener(settings)
    server = uvicorn.Server(uvicorn.Config(
        app, log_config=None, access_log=False, lifespan="on",
    ))
    logger.info(
        f"Server running on port {settings.port} in {settings.environment} mode",
        extra={"port": settings.port, "environment": settings.environment},
    )
    try:
        await server.serve(sockets=[sock])
    finally:
        sock.close()


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    try:
        asyncio.run(start_server(settings))
    except FatalInitializationError as exc:
        logger.critical(
            f"Startup failed: {exc.message}",
            extra={"stage": exc.stage},
            exc_info=exc.__cause__ is not None,
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
