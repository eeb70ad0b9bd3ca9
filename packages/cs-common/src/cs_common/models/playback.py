"""
Playback state models for CallSync.

``PlaybackState`` is the mutable per-recording state owned by the
playback synchronizer. ``ActiveEntryChange`` is the event emitted when
the active transcript entry changes.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class PlaybackState:
    """Per-recording playback state.

    Attributes:
        current_time: Current playback position in seconds.
        active_entry_index: Index of the active entry, ``-1`` if none.
        duration: Media duration in seconds (``0`` until metadata loads).
        is_playing: Whether the media element is playing.
        playback_speed: Current playback rate.
        auto_scroll: Whether the transcript follows the active entry.
    """

    current_time: float = 0.0
    active_entry_index: int = -1
    duration: float = 0.0
    is_playing: bool = False
    playback_speed: float = 1.0
    auto_scroll: bool = True


@dataclass(frozen=True, slots=True)
class ActiveEntryChange:
    """Emitted when the active entry index changes.

    Attributes:
        previous_index: Index before the change (``-1`` if none).
        current_index: Index after the change (``-1`` if none).
        current_time: Playback time that produced the change.
        scroll_requested: Whether the listener should consider scrolling.
    """

    previous_index: int
    current_index: int
    current_time: float
    scroll_requested: bool
