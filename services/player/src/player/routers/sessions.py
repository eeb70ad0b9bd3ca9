"""
Session list API router for CallSync.

Formats raw voice-call session records for the accordion list.
"""

from __future__ import annotations

from fastapi import APIRouter

from ..schemas.recording_schemas import SessionListRequest
from ..sessions import SessionList

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("/format", response_model=SessionList)
async def format_sessions(body: SessionListRequest) -> SessionList:
    sessions = SessionList()
    sessions.load(body.sessions)
    return sessions
