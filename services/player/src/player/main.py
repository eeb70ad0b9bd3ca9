"""
FastAPI application entry point for the CallSync player service.

Creates and configures the FastAPI app, registers routers and
middleware, builds the content source at startup and exposes the ASGI
application.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
import uvicorn
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from cs_common.config import Settings, get_settings
from cs_common.logging import configure_logging

from .middleware.request_context import RequestContextMiddleware
from .routers import documents, health, recordings, sessions, transcripts
from .sources import FileContentSource, HttpContentSource
from .sources.base import ContentSource

logger = structlog.get_logger()


def build_content_source(settings: Settings) -> ContentSource:
    """Instantiate the content source selected by ``content_backend``."""
    if settings.content_backend == "http":
        return HttpContentSource(
            settings.content_base_url,
            max_attempts=settings.fetch_max_attempts,
            timeout=settings.http_timeout_s,
        )
    return FileContentSource(settings.content_root)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    settings: Settings = app.state.settings
    if getattr(app.state, "content_source", None) is None:
        app.state.content_source = build_content_source(settings)
    logger.info(
        "player_api_starting",
        content_source=app.state.content_source.name,
        host=settings.api_host,
        port=settings.api_port,
    )

    yield

    await app.state.content_source.close()
    logger.info("player_api_stopped")


def create_app(
    settings: Settings | None = None,
    content_source: ContentSource | None = None,
) -> FastAPI:
    """Build and return the fully-configured FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, json_logs=settings.json_logs)

    app = FastAPI(
        title="CallSync Player API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.content_source = content_source

    api_prefix = "/api/v1"
    app.include_router(transcripts.router, prefix=api_prefix)
    app.include_router(recordings.router, prefix=api_prefix)
    app.include_router(documents.router, prefix=api_prefix)
    app.include_router(sessions.router, prefix=api_prefix)

    # Health is mounted at root (no /api/v1 prefix).
    app.include_router(health.router)

    app.mount("/metrics", make_asgi_app())
    app.add_middleware(RequestContextMiddleware)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "player.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )
