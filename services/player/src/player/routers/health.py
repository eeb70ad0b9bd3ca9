"""
Health check API router for the CallSync player.

Reports overall status and whether a content source is configured.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    services: dict[str, str]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    source = getattr(request.app.state, "content_source", None)
    services = {"content_source": source.name if source is not None else "not_configured"}
    return HealthResponse(status="healthy", services=services)
