"""
Tests for the playback synchronizer.

Validates the active-entry boundary rule, change-only notification,
seeking and clamping, and the transport controls.
"""

from __future__ import annotations

import math
from unittest.mock import MagicMock

import pytest

from cs_common.config import Settings
from cs_common.models import TranscriptEntry
from player.synchronizer import PlaybackSynchronizer, find_active_index


def _entry(i: int, seconds: float) -> TranscriptEntry:
    return TranscriptEntry(timestamp="10:00:00", seconds=seconds, entry_index=i)


@pytest.fixture()
def sync(entries) -> PlaybackSynchronizer:
    s = PlaybackSynchronizer(Settings(_env_file=None))
    s.reset(entries)
    return s


# ── find_active_index ──


class TestFindActiveIndex:
    @pytest.mark.parametrize(
        ("t", "expected"),
        [(5, 0), (10, 1), (9.999, 0), (0, 0), (25, 2), (1e9, 2)],
    )
    def test_boundaries(self, t: float, expected: int) -> None:
        assert find_active_index([0.0, 10.0, 20.0], t) == expected

    def test_before_first_entry(self) -> None:
        assert find_active_index([3.0, 10.0], 2.9) == -1

    def test_empty(self) -> None:
        assert find_active_index([], 5.0) == -1

    def test_nan_time(self) -> None:
        assert find_active_index([0.0], math.nan) == -1

    def test_duplicate_starts_last_wins(self) -> None:
        assert find_active_index([0.0, 5.0, 5.0, 9.0], 5.0) == 2

    def test_non_monotonic_uses_interval_rule(self) -> None:
        # entry 0 covers [10, 5) which is empty; entry 1 covers [5, inf)
        assert find_active_index([10.0, 5.0], 7.0) == 1
        assert find_active_index([10.0, 5.0], 3.0) == -1

    def test_partition(self) -> None:
        starts = [0.0, 2.5, 2.5, 7.0]
        for t in [x / 4 for x in range(0, 40)]:
            idx = find_active_index(starts, t)
            matches = [
                i for i in range(len(starts))
                if starts[i] <= t < (starts[i + 1] if i + 1 < len(starts) else math.inf)
            ]
            assert matches == [idx]


# ── update ──


class TestUpdate:
    def test_change_emitted_once(self, sync: PlaybackSynchronizer) -> None:
        listener = MagicMock()
        sync.add_listener(listener)

        first = sync.update(5.0)
        second = sync.update(6.0)

        assert first is not None
        assert (first.previous_index, first.current_index) == (-1, 0)
        assert second is None
        listener.assert_called_once_with(first)

    def test_time_recorded_even_without_change(self, sync: PlaybackSynchronizer) -> None:
        sync.update(5.0)
        sync.update(6.0)
        assert sync.state.current_time == 6.0

    def test_monotonic_time_gives_monotonic_index(self, sync: PlaybackSynchronizer) -> None:
        seen = []
        for t in range(0, 30):
            sync.update(float(t))
            seen.append(sync.active_index)
        assert seen == sorted(seen)

    def test_scroll_requested_only_with_auto_scroll(self, sync: PlaybackSynchronizer) -> None:
        assert sync.update(1.0).scroll_requested is True
        sync.toggle_auto_scroll()
        assert sync.update(12.0).scroll_requested is False

    def test_no_scroll_for_negative_index(self) -> None:
        s = PlaybackSynchronizer()
        s.reset([_entry(0, 5.0)])
        s.update(6.0)
        change = s.update(1.0)
        assert change.current_index == -1
        assert change.scroll_requested is False

    def test_nan_ignored(self, sync: PlaybackSynchronizer) -> None:
        sync.update(12.0)
        assert sync.update(math.nan) is None
        assert sync.state.current_time == 12.0

    def test_failing_listener_does_not_stop_others(self, sync: PlaybackSynchronizer) -> None:
        bad = MagicMock(side_effect=RuntimeError("boom"))
        good = MagicMock()
        sync.add_listener(bad)
        sync.add_listener(good)
        sync.update(1.0)
        good.assert_called_once()

    def test_remove_listener(self, sync: PlaybackSynchronizer) -> None:
        listener = MagicMock()
        sync.add_listener(listener)
        sync.remove_listener(listener)
        sync.update(1.0)
        listener.assert_not_called()

    def test_active_entry(self, sync: PlaybackSynchronizer, entries) -> None:
        assert sync.active_entry is None
        sync.update(11.0)
        assert sync.active_entry == entries[1]


# ── reset / load ──


class TestReset:
    def test_reset_rewinds(self, sync: PlaybackSynchronizer) -> None:
        sync.set_duration(60.0)
        sync.play()
        sync.update(15.0)

        sync.reset([])

        assert sync.state.current_time == 0.0
        assert sync.state.active_entry_index == -1
        assert sync.state.duration == 0.0
        assert sync.state.is_playing is False
        assert sync.entries == ()

    def test_load_entries_resolves_current_position(self, entries) -> None:
        s = PlaybackSynchronizer()
        s.update(12.0)
        change = s.load_entries(entries)
        assert change is not None
        assert s.active_index == 1
        assert s.state.current_time == 12.0


# ── seeking ──


class TestSeek:
    def test_seek_clamps_to_duration(self, sync: PlaybackSynchronizer) -> None:
        sync.set_duration(30.0)
        sync.seek(99.0)
        assert sync.state.current_time == 30.0
        assert sync.active_index == 2

    def test_seek_clamps_to_zero(self, sync: PlaybackSynchronizer) -> None:
        sync.set_duration(30.0)
        sync.seek(-4.0)
        assert sync.state.current_time == 0.0

    def test_seek_unknown_duration_only_clamps_low(self, sync: PlaybackSynchronizer) -> None:
        sync.seek(99.0)
        assert sync.state.current_time == 99.0

    def test_seek_resolves_from_scratch(self, sync: PlaybackSynchronizer) -> None:
        sync.set_duration(30.0)
        sync.seek(25.0)
        sync.seek(3.0)
        assert sync.active_index == 0

    def test_seek_to_entry(self, sync: PlaybackSynchronizer) -> None:
        sync.seek_to_entry(2)
        assert sync.state.current_time == 20.0
        assert sync.active_index == 2

    def test_seek_to_entry_past_duration_is_clamped(self) -> None:
        sync = PlaybackSynchronizer(Settings(_env_file=None))
        sync.reset([_entry(0, 0.0), _entry(1, 100.0)])
        sync.set_duration(60.0)
        sync.seek_to_entry(1)
        assert sync.state.current_time == 60.0
        assert sync.active_index == 0
        assert sync.progress_percent() == 100.0

    def test_seek_to_entry_before_metadata(self) -> None:
        sync = PlaybackSynchronizer(Settings(_env_file=None))
        sync.reset([_entry(0, 0.0), _entry(1, 100.0)])
        sync.seek_to_entry(1)
        assert sync.state.current_time == 100.0
        assert sync.active_index == 1

    def test_seek_to_entry_out_of_range(self, sync: PlaybackSynchronizer) -> None:
        with pytest.raises(IndexError):
            sync.seek_to_entry(3)

    def test_seek_to_fraction(self, sync: PlaybackSynchronizer) -> None:
        sync.set_duration(40.0)
        sync.seek_to_fraction(0.5)
        assert sync.state.current_time == 20.0

    def test_seek_to_fraction_clamped(self, sync: PlaybackSynchronizer) -> None:
        sync.set_duration(40.0)
        sync.seek_to_fraction(1.5)
        assert sync.state.current_time == 40.0

    def test_seek_to_fraction_without_duration_is_noop(self, sync: PlaybackSynchronizer) -> None:
        assert sync.seek_to_fraction(0.5) is None
        assert sync.state.current_time == 0.0


# ── controls ──


class TestControls:
    def test_skip_forward_and_back(self, sync: PlaybackSynchronizer) -> None:
        sync.set_duration(25.0)
        sync.skip_forward()
        assert sync.state.current_time == 10.0
        sync.skip_forward()
        sync.skip_forward()
        assert sync.state.current_time == 25.0
        sync.skip_back()
        assert sync.state.current_time == 15.0

    def test_skip_back_floor(self, sync: PlaybackSynchronizer) -> None:
        sync.set_duration(25.0)
        sync.seek(4.0)
        sync.skip_back()
        assert sync.state.current_time == 0.0

    def test_custom_skip_step(self) -> None:
        s = PlaybackSynchronizer(Settings(_env_file=None, skip_seconds=5))
        s.set_duration(60.0)
        s.skip_forward()
        assert s.state.current_time == 5.0

    def test_set_speed(self, sync: PlaybackSynchronizer) -> None:
        sync.set_speed(1.5)
        assert sync.state.playback_speed == 1.5

    def test_set_speed_rejects_unknown(self, sync: PlaybackSynchronizer) -> None:
        with pytest.raises(ValueError):
            sync.set_speed(3.0)

    def test_toggle_play(self, sync: PlaybackSynchronizer) -> None:
        assert sync.toggle_play() is True
        assert sync.toggle_play() is False

    def test_invalid_duration_ignored(self, sync: PlaybackSynchronizer) -> None:
        sync.set_duration(30.0)
        sync.set_duration(math.nan)
        sync.set_duration(math.inf)
        assert sync.state.duration == 30.0

    def test_progress_percent(self, sync: PlaybackSynchronizer) -> None:
        assert sync.progress_percent() == 0.0
        sync.set_duration(40.0)
        sync.seek(10.0)
        assert sync.progress_percent() == 25.0
