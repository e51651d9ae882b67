"""FastAPI server main entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI

from staticpool import __version__
from staticpool.server.config import ServerSettings, load_server_settings
from staticpool.server.handler import StaticHandler
from staticpool.server.io_pool import IOPool
from staticpool.server.routes.static import create_static_router

logger = logging.getLogger("staticpool.server")


def _configure_logging(settings: ServerSettings) -> None:
    numeric_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.getLogger("staticpool").setLevel(numeric_level)
    # Also set root handler if none configured
    if not logging.getLogger().handlers:
        logging.basicConfig(level=numeric_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")


# ── Application factory ─────────────────────────────────────


def create_app(settings: Optional[ServerSettings] = None) -> FastAPI:
    """Create and configure FastAPI application.

    The I/O pool and the resolved root are built here, once, and passed
    to the handler.  The pool is shut down when the app stops.

    Args:
        settings: Server settings (None = load from env/config via auto-discovery)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = load_server_settings()

    _configure_logging(settings)

    root = settings.root.expanduser().resolve()
    pool = IOPool(max_workers=settings.pool_size, max_pending=settings.max_pending)
    handler = StaticHandler(
        root,
        pool,
        min_gzip_size=settings.gzip_min_size,
        gzip_level=settings.gzip_level,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Serving %s with %d I/O workers", root, settings.pool_size)
        if settings.max_pending:
            logger.info("I/O queue limit: %d", settings.max_pending)
        else:
            logger.info("I/O queue limit: unbounded")
        yield
        pool.shutdown(wait=True)
        logger.info("Shutdown complete")

    # Docs routes would shadow files of the same name
    app = FastAPI(
        title="StaticPool",
        description="Static file server with pooled disk I/O",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.root = root
    app.state.io_pool = pool
    app.state.handler = handler

    app.include_router(create_static_router(handler))

    return app


# ── Server runner ────────────────────────────────────────────


def run_server(
    root: Optional[Path] = None,
    port: Optional[int] = None,
    host: Optional[str] = None,
    config_path: Optional[Path] = None,
    pool_size: Optional[int] = None,
    max_pending: Optional[int] = None,
    log_level: Optional[str] = None,
) -> None:
    """Run the server.

    Config file values are used as defaults. CLI flags (non-None) override them.
    """
    settings = load_server_settings(config_path)

    # Only override settings when explicitly provided (not None)
    if root is not None:
        settings.root = root
    if port is not None:
        settings.port = port
    if host is not None:
        settings.host = host
    if pool_size is not None:
        settings.pool_size = pool_size
    if max_pending is not None:
        settings.max_pending = max_pending
    if log_level is not None:
        settings.log_level = log_level

    if not settings.root.is_dir():
        logger.error("Root directory does not exist: %s", settings.root)
        raise SystemExit(1)

    app = create_app(settings)
    logger.info("Serving %s at http://%s:%d", settings.root, settings.host, settings.port)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        access_log=False,
    )


if __name__ == "__main__":
    run_server()
