"""
Recording and document data models for CallSync.

Defines the Pydantic models for attached call documents, the recordings
derived from them (each optionally paired with a transcript), and the
raw voice-call session records listed above the player.
"""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import BaseModel, Field


class RecordingType(str, enum.Enum):
    """Role of a recording within a (possibly dual-leg) call."""

    VIRTUAL_AGENT = "virtual_agent"
    AGENT = "agent"
    CALL = "call"


class TranscriptCategory(str, enum.Enum):
    """Which recording leg a transcript document belongs to."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


class LoadStatus(str, enum.Enum):
    """Load lifecycle of the selected recording's transcript or audio."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    EMPTY = "empty"
    FAILED = "failed"


class DocumentInfo(BaseModel):
    """A document attached to a call (audio file or transcript).

    Attributes:
        document_id: Opaque identifier used by the content source.
        title: Document title / filename.
        file_type: File extension or type code (e.g. ``MP3``, ``TXT``).
        download_url: Optional direct URL for the document.
    """

    model_config = {"from_attributes": True, "frozen": True}

    document_id: str = Field(..., min_length=1, description="Content-source identifier.")
    title: str = Field(default="", description="Document title or filename.")
    file_type: str = Field(default="", description="File type code.")
    download_url: str | None = Field(default=None, description="Direct download URL.")


class Recording(BaseModel):
    """A playable recording, optionally paired with its transcript.

    Attributes:
        recording_id: Identifier (the audio document id).
        audio_url: URL the audio element plays.
        audio_title: Audio document title as uploaded.
        type: Recording role used for ordering and labels.
        label: Display label (numbered when several recordings exist).
        icon: Display icon.
        transcript_doc: Paired transcript document, if any.
        is_secondary: Whether the audio carries the secondary marker.
        duration_display: ``M:SS`` once metadata has loaded.
    """

    model_config = {"from_attributes": True}

    recording_id: str = Field(..., min_length=1, description="Audio document id.")
    audio_url: str | None = Field(default=None, description="Playable audio URL.")
    audio_title: str = Field(default="", description="Audio document title.")
    type: RecordingType = Field(default=RecordingType.CALL, description="Recording role.")
    label: str = Field(default="Recording", description="Display label.")
    icon: str = Field(default="🎙️", description="Display icon.")
    transcript_doc: DocumentInfo | None = Field(default=None, description="Paired transcript.")
    is_secondary: bool = Field(default=False, description="Secondary marker present.")
    duration_display: str = Field(default="--:--", description="Formatted duration.")

    @property
    def has_transcript(self) -> bool:
        return self.transcript_doc is not None


class CallSession(BaseModel):
    """A voice-call session record as returned by the host platform.

    Attributes:
        session_id: Unique identifier.
        created_date: When the call happened.
        duration: Call length in seconds (``None`` if unknown).
        agent_name: Handling agent name.
        call_type: Call type label.
        documents: Documents attached to the session.
    """

    model_config = {"from_attributes": True}

    session_id: str = Field(..., description="Unique session identifier.")
    created_date: datetime | None = Field(default=None, description="Call timestamp.")
    duration: float | None = Field(default=None, ge=0.0, description="Duration in seconds.")
    agent_name: str | None = Field(default=None, description="Handling agent name.")
    call_type: str | None = Field(default=None, description="Call type label.")
    documents: list[DocumentInfo] = Field(default_factory=list, description="Attached documents.")
