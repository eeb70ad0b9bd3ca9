"""
Transcript data models for CallSync.

Defines the Pydantic model for a parsed transcript entry and the
speaker categories used for display classification.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field, computed_field

from cs_common.utils import format_time_from_seconds


class SpeakerCategory(str, enum.Enum):
    """Display category derived from a speaker label."""

    BOT = "bot"
    CUSTOMER = "customer"
    AGENT = "agent"


class TranscriptEntry(BaseModel):
    """One parsed, timestamped transcript line.

    Entries are immutable once parsed; the parser emits them in
    source-text order.

    Attributes:
        timestamp: Wall-clock ``HH:MM:SS`` exactly as in the source text.
        seconds: Offset in seconds from the recording start (never negative).
        speaker: Free-text speaker label (may be empty).
        text: Trimmed transcript content.
        entry_index: 0-based position among successfully parsed lines.
    """

    model_config = {"from_attributes": True, "frozen": True}

    timestamp: str = Field(..., pattern=r"^\d{2}:\d{2}:\d{2}$", description="Source wall-clock time.")
    seconds: float = Field(..., ge=0.0, description="Offset from recording start in seconds.")
    speaker: str = Field(default="", description="Speaker label.")
    text: str = Field(default="", description="Trimmed transcript text.")
    entry_index: int = Field(..., ge=0, description="0-based position in the parsed sequence.")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_time(self) -> str:
        """Offset rendered as ``M:SS``."""
        return format_time_from_seconds(self.seconds)
