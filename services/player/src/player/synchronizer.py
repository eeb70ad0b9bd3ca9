"""
Playback synchronizer for CallSync.

Keeps the :class:`PlaybackState` of the selected recording and derives
the active transcript entry from the current playback time.

Active-entry rule
-----------------
Entry ``i`` is active while ``entries[i].seconds <= t < entries[i+1].seconds``;
the last entry stays active to the end of the recording and ``-1`` is
returned before the first entry starts. When several entries share a
start time the last of them wins.

Listeners registered with :meth:`PlaybackSynchronizer.add_listener` are
invoked only when the active index actually changes.
"""

from __future__ import annotations

import bisect
import math
from collections.abc import Callable, Sequence

import structlog
from structlog.typing import FilteringBoundLogger

from cs_common.config import Settings
from cs_common.metrics import ACTIVE_ENTRY_CHANGES
from cs_common.models import ActiveEntryChange, PlaybackState, TranscriptEntry

logger = structlog.get_logger(__name__)

DEFAULT_SKIP_SECONDS = 10.0
DEFAULT_PLAYBACK_SPEEDS = (0.5, 1.0, 1.5, 2.0)

ChangeListener = Callable[[ActiveEntryChange], None]


def _is_monotonic(starts: Sequence[float]) -> bool:
    return all(a <= b for a, b in zip(starts, starts[1:]))


def _scan_active_index(starts: Sequence[float], current_time: float) -> int:
    """Linear scan used when start times are not sorted."""
    for i, start in enumerate(starts):
        end = starts[i + 1] if i + 1 < len(starts) else math.inf
        if start <= current_time < end:
            return i
    return -1


def find_active_index(starts: Sequence[float], current_time: float) -> int:
    """Return the index of the entry active at *current_time*.

    Args:
        starts: Entry start offsets in seconds, in entry order.
        current_time: Playback position in seconds.

    Returns:
        The active index, or ``-1`` when no entry applies.
    """
    if not starts or math.isnan(current_time):
        return -1
    if _is_monotonic(starts):
        return bisect.bisect_right(starts, current_time) - 1
    return _scan_active_index(starts, current_time)


class PlaybackSynchronizer:
    """Owns playback state and the active-entry index for one recording.

    Args:
        settings: Supplies skip step, allowed speeds and the auto-scroll
            default.
        log: Bound structlog logger; defaults to the module logger.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        log: FilteringBoundLogger | None = None,
    ) -> None:
        self._skip_seconds = settings.skip_seconds if settings else DEFAULT_SKIP_SECONDS
        self._speeds = tuple(settings.playback_speeds) if settings else DEFAULT_PLAYBACK_SPEEDS
        auto_scroll = settings.auto_scroll if settings else True
        self._log = log or logger
        self._entries: tuple[TranscriptEntry, ...] = ()
        self._starts: list[float] = []
        self._monotonic = True
        self._listeners: list[ChangeListener] = []
        self.state = PlaybackState(auto_scroll=auto_scroll)

    # ── Properties ──────────────────────────────────────────

    @property
    def entries(self) -> tuple[TranscriptEntry, ...]:
        return self._entries

    @property
    def active_index(self) -> int:
        return self.state.active_entry_index

    @property
    def active_entry(self) -> TranscriptEntry | None:
        idx = self.state.active_entry_index
        return self._entries[idx] if idx >= 0 else None

    @property
    def speeds(self) -> tuple[float, ...]:
        return self._speeds

    # ── Listeners ───────────────────────────────────────────

    def add_listener(self, listener: ChangeListener) -> None:
        """Register a callback invoked on every active-index change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ── Entry sequence ──────────────────────────────────────

    def reset(self, entries: Sequence[TranscriptEntry] = ()) -> None:
        """Replace the entry sequence and rewind to time 0, index -1.

        Duration and play state are cleared too; the caller is switching
        recordings.
        """
        self._install(entries)
        self.state.current_time = 0.0
        self.state.active_entry_index = -1
        self.state.duration = 0.0
        self.state.is_playing = False

    def load_entries(self, entries: Sequence[TranscriptEntry]) -> ActiveEntryChange | None:
        """Install *entries* without rewinding and resolve the index."""
        self._install(entries)
        self.state.active_entry_index = -1
        return self.update(self.state.current_time)

    def _install(self, entries: Sequence[TranscriptEntry]) -> None:
        self._entries = tuple(entries)
        self._starts = [e.seconds for e in self._entries]
        self._monotonic = _is_monotonic(self._starts)
        if not self._monotonic:
            self._log.warning("transcript_entries_not_monotonic", entries=len(self._entries))

    # ── Time ────────────────────────────────────────────────

    def _resolve(self, current_time: float) -> int:
        if not self._starts or math.isnan(current_time):
            return -1
        if self._monotonic:
            return bisect.bisect_right(self._starts, current_time) - 1
        return _scan_active_index(self._starts, current_time)

    def update(self, current_time: float) -> ActiveEntryChange | None:
        """Record a playback-time sample.

        Returns:
            The change that was emitted, or ``None`` when the active index
            is unchanged (no listeners are called in that case).
        """
        if math.isnan(current_time):
            return None
        self.state.current_time = current_time
        new_index = self._resolve(current_time)
        previous = self.state.active_entry_index
        if new_index == previous:
            return None

        self.state.active_entry_index = new_index
        change = ActiveEntryChange(
            previous_index=previous,
            current_index=new_index,
            current_time=current_time,
            scroll_requested=self.state.auto_scroll and new_index >= 0,
        )
        ACTIVE_ENTRY_CHANGES.inc()
        self._notify(change)
        return change

    def _notify(self, change: ActiveEntryChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                self._log.exception(
                    "active_entry_listener_failed",
                    listener=getattr(listener, "__name__", repr(listener)),
                    current_index=change.current_index,
                )

    def _clamp(self, target: float) -> float:
        target = max(0.0, target)
        if self.state.duration > 0:
            target = min(target, self.state.duration)
        return target

    def seek(self, target: float) -> ActiveEntryChange | None:
        """Seek to *target* seconds, clamped to ``[0, duration]``."""
        return self.update(self._clamp(target))

    def seek_to_entry(self, entry_index: int) -> ActiveEntryChange | None:
        """Seek to the start of the entry at *entry_index*, clamped like :meth:`seek`.

        Raises:
            IndexError: If *entry_index* is out of range.
        """
        if not 0 <= entry_index < len(self._entries):
            raise IndexError(f"entry index {entry_index} out of range")
        return self.seek(self._entries[entry_index].seconds)

    def seek_to_fraction(self, fraction: float) -> ActiveEntryChange | None:
        """Seek to ``fraction * duration``; a no-op while duration is unknown."""
        if self.state.duration <= 0:
            return None
        return self.seek(fraction * self.state.duration)

    def skip_back(self) -> ActiveEntryChange | None:
        return self.seek(self.state.current_time - self._skip_seconds)

    def skip_forward(self) -> ActiveEntryChange | None:
        return self.seek(self.state.current_time + self._skip_seconds)

    def set_duration(self, duration: float) -> None:
        if math.isnan(duration) or math.isinf(duration) or duration < 0:
            self._log.debug("invalid_duration_ignored", duration=duration)
            return
        self.state.duration = duration

    def progress_percent(self) -> float:
        """Playback position as a percentage of duration (0 when unknown)."""
        if self.state.duration <= 0:
            return 0.0
        return min(100.0, max(0.0, self.state.current_time / self.state.duration * 100.0))

    # ── Transport controls ──────────────────────────────────

    def play(self) -> None:
        self.state.is_playing = True

    def pause(self) -> None:
        self.state.is_playing = False

    def toggle_play(self) -> bool:
        self.state.is_playing = not self.state.is_playing
        return self.state.is_playing

    def set_speed(self, speed: float) -> None:
        """Set the playback rate.

        Raises:
            ValueError: If *speed* is not one of the configured speeds.
        """
        if speed not in self._speeds:
            raise ValueError(f"unsupported playback speed {speed!r}; expected one of {self._speeds}")
        self.state.playback_speed = speed

    def toggle_auto_scroll(self) -> bool:
        self.state.auto_scroll = not self.state.auto_scroll
        return self.state.auto_scroll
