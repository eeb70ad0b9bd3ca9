"""Shared fixtures for player service tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from cs_common.config import Settings
from cs_common.models import DocumentInfo, TranscriptEntry
from player.player import CallTranscriptPlayer
from player.sources import InMemoryContentSource
from player.transcript_parser import TranscriptParser

# ─── Sample data ────────────────────────────────────────────────

PRIMARY_TRANSCRIPT = """Call ID: 1234
------------------------------

[10:30:00     Virtual Agent]     Hello, how can I help you today?
[10:30:07     Customer]     I need to reset my password.
[10:30:15     Virtual Agent]     Sure, let me transfer you.
"""

SECONDARY_TRANSCRIPT = """Call ID: 1234
------------------------------

[10:31:00     Agent Smith]     Hi, this is Smith from support.
[10:31:04     Caller]     Hi, my password is locked.
"""


# ─── Fixtures ───────────────────────────────────────────────────


@pytest.fixture()
def primary_transcript() -> str:
    return PRIMARY_TRANSCRIPT


@pytest.fixture()
def secondary_transcript() -> str:
    return SECONDARY_TRANSCRIPT


@pytest.fixture()
def settings() -> Settings:
    """Settings with defaults only, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture()
def parser(settings: Settings) -> TranscriptParser:
    return TranscriptParser(settings)


@pytest.fixture()
def entries() -> tuple[TranscriptEntry, ...]:
    """Three entries starting at 0, 10 and 20 seconds."""
    return tuple(
        TranscriptEntry(
            timestamp=f"10:00:{s:02d}",
            seconds=float(s),
            speaker=speaker,
            text=f"line {i}",
            entry_index=i,
        )
        for i, (s, speaker) in enumerate([(0, "Virtual Agent"), (10, "Customer"), (20, "Agent")])
    )


@pytest.fixture()
def documents() -> list[DocumentInfo]:
    """A dual-leg call: two audio files and both transcripts."""
    return [
        DocumentInfo(document_id="audio1", title="call.mp3", file_type="MP3", download_url="/a/1"),
        DocumentInfo(document_id="audio2", title="call_2.mp3", file_type="mp3", download_url="/a/2"),
        DocumentInfo(
            document_id="va1",
            title="va_transcript_1.txt",
            file_type="TXT",
            download_url="/t/va1",
        ),
        DocumentInfo(
            document_id="rt1",
            title="rt_transcript_1.txt",
            file_type="TXT",
            download_url="/t/rt1",
        ),
    ]


@pytest.fixture()
def memory_source() -> InMemoryContentSource:
    return InMemoryContentSource(
        transcripts={"va1": PRIMARY_TRANSCRIPT, "rt1": SECONDARY_TRANSCRIPT},
        audio={"audio1": b"ID3-primary", "audio2": b"ID3-secondary"},
    )


@pytest.fixture()
def player(memory_source: InMemoryContentSource, settings: Settings) -> CallTranscriptPlayer:
    return CallTranscriptPlayer(memory_source, settings, session_id="session123")


@pytest.fixture()
def mock_source() -> AsyncMock:
    """Async mock standing in for a ``ContentSource``."""
    source = AsyncMock()
    source.name = "mock"
    source.fetch_transcript_text = AsyncMock(return_value=PRIMARY_TRANSCRIPT)
    source.fetch_audio_bytes = AsyncMock(return_value=b"audio")
    source.close = AsyncMock()
    return source
