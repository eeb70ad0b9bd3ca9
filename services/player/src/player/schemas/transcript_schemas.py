"""
Transcript API schemas for CallSync.

Pydantic request/response models for transcript parsing and
active-entry lookup.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from cs_common.models import SpeakerCategory, TranscriptEntry


class ParseTranscriptRequest(BaseModel):
    content: str = Field(default="", description="Raw transcript text.")
    recording_start_time: str | None = Field(
        default=None,
        description="HH:MM:SS playback zero; extracted from content when omitted.",
    )


class TranscriptEntryResponse(BaseModel):
    model_config = {"from_attributes": True}

    timestamp: str
    seconds: float
    speaker: str
    text: str
    entry_index: int
    display_time: str
    speaker_category: SpeakerCategory


class ParseTranscriptResponse(BaseModel):
    recording_start_time: str
    entries: list[TranscriptEntryResponse]
    total: int


class ActiveEntryRequest(BaseModel):
    entries: list[TranscriptEntry] = Field(default_factory=list)
    current_time: float = Field(..., description="Playback position in seconds.")


class ActiveEntryResponse(BaseModel):
    active_index: int
    entry: TranscriptEntry | None = None


class TranscriptContentResponse(BaseModel):
    document_id: str
    content: str
