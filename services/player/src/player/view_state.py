"""
Derived view state for the CallSync player.

Everything the transcript panel renders is computed here by pure
functions from the entries, the playback state and the load status, so
the same inputs always produce the same view.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import BaseModel, Field

from cs_common.models import LoadStatus, PlaybackState, SpeakerCategory, TranscriptEntry
from cs_common.utils import format_time_from_seconds

from .speaker import classify_speaker, speaker_css_class
from .synchronizer import find_active_index

ENTRY_CLASS = "transcript-entry"
ACTIVE_ENTRY_CLASS = "transcript-entry active-entry"


@dataclass(frozen=True, slots=True)
class Box:
    """Vertical extent of an element, in viewport pixels."""

    top: float
    bottom: float


def needs_scroll(entry: Box, viewport: Box) -> bool:
    """True when *entry* is fully or partially outside *viewport*."""
    return entry.top < viewport.top or entry.bottom > viewport.bottom


def entry_css_class(is_active: bool) -> str:
    return ACTIVE_ENTRY_CLASS if is_active else ENTRY_CLASS


class EntryView(BaseModel):
    """Render-ready transcript entry."""

    entry_index: int
    timestamp: str
    display_time: str
    speaker: str
    text: str
    speaker_category: SpeakerCategory
    speaker_class: str
    entry_class: str
    is_active: bool


class TranscriptViewState(BaseModel):
    """Snapshot of everything the transcript panel shows.

    Attributes:
        entries: Per-entry rendering data.
        active_index: Active entry, ``-1`` when none.
        scroll_target: Entry to scroll to, or ``None``.
        current_time_display: ``M:SS`` playback position.
        duration_display: ``M:SS`` recording length.
        progress_percent: Position as a percentage of duration.
        progress_style: Inline style for the progress bar fill.
        handle_style: Inline style for the progress handle.
        is_playing: Whether audio is playing.
        play_pause_label: ``Pause`` while playing, ``Play`` otherwise.
        play_pause_icon: Icon matching the label.
        playback_speed: Current rate.
        auto_scroll: Whether auto-scroll is on.
        auto_scroll_icon: Lock icon reflecting the auto-scroll toggle.
        auto_scroll_title: Tooltip for the auto-scroll toggle.
        status: Transcript load status.
        is_loading: Transcript fetch in flight.
        has_transcript: At least one entry is available.
        no_transcript_available: Loading finished with nothing to show.
    """

    entries: list[EntryView] = Field(default_factory=list)
    active_index: int = -1
    scroll_target: int | None = None
    current_time_display: str = "0:00"
    duration_display: str = "0:00"
    progress_percent: float = 0.0
    progress_style: str = "width: 0%"
    handle_style: str = "left: 0%"
    is_playing: bool = False
    play_pause_label: str = "Play"
    play_pause_icon: str = "utility:play"
    playback_speed: float = 1.0
    auto_scroll: bool = True
    auto_scroll_icon: str = "utility:lock"
    auto_scroll_title: str = ""
    status: LoadStatus = LoadStatus.IDLE
    is_loading: bool = False
    has_transcript: bool = False
    no_transcript_available: bool = False


def _percent(current_time: float, duration: float) -> float:
    if duration <= 0:
        return 0.0
    return min(100.0, max(0.0, current_time / duration * 100.0))


def _format_percent(value: float) -> str:
    return f"{value:g}%"


def auto_scroll_title(enabled: bool) -> str:
    if enabled:
        return "Auto-scroll enabled (click to disable)"
    return "Auto-scroll disabled (click to enable)"


def derive_view_state(
    entries: Sequence[TranscriptEntry],
    state: PlaybackState,
    status: LoadStatus = LoadStatus.LOADED,
    *,
    scroll_requested: bool = False,
) -> TranscriptViewState:
    """Build the panel view from entries and playback state.

    The active index is recomputed from ``state.current_time`` rather than
    read from *state*, so the result is consistent even for a state that
    has not been through a synchronizer.

    Args:
        entries: Parsed transcript entries.
        state: Current playback state.
        status: Transcript load status.
        scroll_requested: Whether the caller wants the active entry
            scrolled into view (typically from an ``ActiveEntryChange``).
    """
    active = find_active_index([e.seconds for e in entries], state.current_time)
    views = [
        EntryView(
            entry_index=i,
            timestamp=e.timestamp,
            display_time=e.display_time,
            speaker=e.speaker,
            text=e.text,
            speaker_category=classify_speaker(e.speaker),
            speaker_class=speaker_css_class(e.speaker),
            entry_class=entry_css_class(i == active),
            is_active=i == active,
        )
        for i, e in enumerate(entries)
    ]
    percent = _percent(state.current_time, state.duration)
    is_loading = status == LoadStatus.LOADING
    has_transcript = not is_loading and bool(entries)

    return TranscriptViewState(
        entries=views,
        active_index=active,
        scroll_target=active if scroll_requested and state.auto_scroll and active >= 0 else None,
        current_time_display=format_time_from_seconds(state.current_time),
        duration_display=format_time_from_seconds(state.duration),
        progress_percent=percent,
        progress_style=f"width: {_format_percent(percent)}",
        handle_style=f"left: {_format_percent(percent)}",
        is_playing=state.is_playing,
        play_pause_label="Pause" if state.is_playing else "Play",
        play_pause_icon="utility:pause" if state.is_playing else "utility:play",
        playback_speed=state.playback_speed,
        auto_scroll=state.auto_scroll,
        auto_scroll_icon="utility:lock" if state.auto_scroll else "utility:unlock",
        auto_scroll_title=auto_scroll_title(state.auto_scroll),
        status=status,
        is_loading=is_loading,
        has_transcript=has_transcript,
        no_transcript_available=not is_loading and not has_transcript,
    )
