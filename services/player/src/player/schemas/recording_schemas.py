"""
Recording and session API schemas for CallSync.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from cs_common.models import CallSession, DocumentInfo, Recording


class PairRecordingsRequest(BaseModel):
    documents: list[DocumentInfo] = Field(default_factory=list)


class PairRecordingsResponse(BaseModel):
    recordings: list[Recording]
    total: int


class SessionListRequest(BaseModel):
    sessions: list[CallSession] = Field(default_factory=list)
