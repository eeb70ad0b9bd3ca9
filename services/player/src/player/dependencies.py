"""
FastAPI dependency providers for the CallSync player API.

Resources built during startup live on ``app.state``; these callables
hand them to route handlers so tests can override them.
"""

from __future__ import annotations

from fastapi import Request

from cs_common.config import Settings, get_settings

from .sources.base import ContentSource
from .transcript_parser import TranscriptParser


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with (process settings otherwise)."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_content_source(request: Request) -> ContentSource | None:
    """Return the shared content source from app state."""
    return getattr(request.app.state, "content_source", None)


def get_parser(request: Request) -> TranscriptParser:
    return TranscriptParser(get_app_settings(request))
