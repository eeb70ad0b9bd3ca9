"""
Shared data models for CallSync.

This package contains the transcript entry, recording, document,
session and playback-state models shared by the player service.
"""

from cs_common.models.playback import ActiveEntryChange, PlaybackState
from cs_common.models.recording import (
    CallSession,
    DocumentInfo,
    LoadStatus,
    Recording,
    RecordingType,
    TranscriptCategory,
)
from cs_common.models.transcript import SpeakerCategory, TranscriptEntry

__all__ = [
    "ActiveEntryChange",
    "CallSession",
    "DocumentInfo",
    "LoadStatus",
    "PlaybackState",
    "Recording",
    "RecordingType",
    "SpeakerCategory",
    "TranscriptCategory",
    "TranscriptEntry",
]
