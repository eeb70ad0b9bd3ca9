"""
Tests for the call transcript player controller.

Validates document loading and auto-selection, transcript/audio fetch
handling (including failures and stale responses), media event
handlers and the derived view.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from prometheus_client import REGISTRY

from cs_common.config import Settings
from cs_common.exceptions import ContentFetchError, UnknownRecordingError
from cs_common.models import DocumentInfo, LoadStatus
from player.player import CallTranscriptPlayer
from player.sources.base import ContentSource
from player.view_state import Box


def _stale_count() -> float:
    return (
        REGISTRY.get_sample_value("callsync_stale_fetches_discarded_total", {"kind": "transcript"})
        or 0.0
    )


class GatedSource(ContentSource):
    """Content source whose transcript fetches block until released."""

    name = "gated"

    def __init__(self, transcripts: dict[str, str]) -> None:
        self.transcripts = transcripts
        self.gates: dict[str, asyncio.Event] = {d: asyncio.Event() for d in transcripts}

    async def fetch_transcript_text(self, document_id: str) -> str:
        await self.gates[document_id].wait()
        return self.transcripts[document_id]

    async def fetch_audio_bytes(self, document_id: str) -> bytes:
        return b"audio"


# ── loading ──


class TestLoadDocuments:
    async def test_auto_selects_first_and_loads(self, player: CallTranscriptPlayer, documents) -> None:
        recs = player.load_documents(documents)
        assert player.selected_recording_id == "audio1"
        assert player.transcript_status is LoadStatus.LOADING
        assert player.view_state().is_loading is True

        await player.wait_for_pending()

        assert len(recs) == 2
        assert player.transcript_status is LoadStatus.LOADED
        assert player.recording_start_time == "10:30:00"
        assert [e.seconds for e in player.entries] == [0.0, 7.0, 15.0]
        assert player.audio_status is LoadStatus.LOADED
        assert player.audio_content == b"ID3-primary"

    async def test_no_documents(self, player: CallTranscriptPlayer) -> None:
        assert player.load_documents(None) == []
        assert player.no_recordings_available is True
        assert player.selected_recording_id is None
        assert player.view_state().no_transcript_available is True

    async def test_recording_labels(self, player: CallTranscriptPlayer, documents) -> None:
        player.load_documents(documents)
        await player.wait_for_pending()
        assert player.has_multiple_recordings is True
        assert player.recording_count_label == "2 Recordings"
        assert player.current_recording_title == "🤖 1. Virtual Agent"
        assert player.pill_class("audio1") == "recording-pill active"
        assert player.pill_class("audio2") == "recording-pill"

    async def test_fetches_requested_ids(self, mock_source: AsyncMock, settings: Settings, documents) -> None:
        player = CallTranscriptPlayer(mock_source, settings, session_id="session123")
        player.load_documents(documents)
        await player.wait_for_pending()
        mock_source.fetch_transcript_text.assert_awaited_once_with("va1")
        mock_source.fetch_audio_bytes.assert_awaited_once_with("audio1")


# ── selection ──


class TestSelectRecording:
    async def test_switch_resets_state(self, player: CallTranscriptPlayer, documents) -> None:
        player.load_documents(documents)
        await player.wait_for_pending()
        player.handle_loaded_metadata(60.0)
        player.handle_play_pause()
        player.handle_time_update(8.0)

        player.select_recording("audio2")

        assert player.state.is_playing is False
        assert player.state.current_time == 0.0
        assert player.state.duration == 0.0
        assert player.state.active_entry_index == -1
        assert player.entries == ()
        assert player.transcript_status is LoadStatus.LOADING

        await player.wait_for_pending()
        assert player.entries[0].speaker == "Agent Smith"
        assert player.recording_start_time == "10:31:00"

    async def test_unknown_recording(self, player: CallTranscriptPlayer, documents) -> None:
        player.load_documents(documents)
        with pytest.raises(UnknownRecordingError):
            player.select_recording("nope")
        await player.wait_for_pending()

    async def test_recording_without_transcript(self, memory_source, settings) -> None:
        player = CallTranscriptPlayer(memory_source, settings)
        player.load_documents([DocumentInfo(document_id="audio1", title="call.mp3", file_type="MP3")])
        assert player.transcript_status is LoadStatus.EMPTY
        await player.wait_for_pending()
        view = player.view_state()
        assert view.no_transcript_available is True
        assert player.transcript_download_url() is None

    async def test_generation_increments(self, player: CallTranscriptPlayer, documents) -> None:
        player.load_documents(documents)
        g1 = player.generation
        player.select_recording("audio2")
        assert player.generation == g1 + 1
        await player.wait_for_pending()


# ── stale responses ──


class TestStaleFetch:
    async def test_switch_mid_fetch_discards_stale_result(self, settings, documents) -> None:
        source = GatedSource({"va1": "[10:00:00   VA]   stale", "rt1": "[10:00:00   Agent]   fresh"})
        player = CallTranscriptPlayer(source, settings)
        before = _stale_count()

        player.load_documents(documents)       # fetch va1 in flight
        player.select_recording("audio2")      # fetch rt1 in flight

        source.gates["rt1"].set()
        await asyncio.sleep(0)
        source.gates["va1"].set()
        await player.wait_for_pending()

        assert [e.text for e in player.entries] == ["fresh"]
        assert player.transcript_status is LoadStatus.LOADED
        assert _stale_count() == before + 1

    async def test_stale_result_arriving_first_is_ignored(self, settings, documents) -> None:
        source = GatedSource({"va1": "[10:00:00   VA]   stale", "rt1": "[10:00:00   Agent]   fresh"})
        player = CallTranscriptPlayer(source, settings)

        player.load_documents(documents)
        player.select_recording("audio2")

        source.gates["va1"].set()
        for _ in range(5):
            await asyncio.sleep(0)
        assert player.entries == ()
        assert player.transcript_status is LoadStatus.LOADING

        source.gates["rt1"].set()
        await player.wait_for_pending()
        assert [e.text for e in player.entries] == ["fresh"]

    async def test_reselecting_same_recording_discards_older_fetch(self, settings, documents) -> None:
        source = GatedSource({"va1": "[10:00:00   VA]   hello", "rt1": ""})
        player = CallTranscriptPlayer(source, settings)
        before = _stale_count()

        player.load_documents(documents)
        player.select_recording("audio1")

        source.gates["va1"].set()
        await player.wait_for_pending()

        assert len(player.entries) == 1
        assert _stale_count() == before + 1


# ── failures ──


class TestFetchFailures:
    async def test_transcript_failure_degrades(self, mock_source, settings, documents) -> None:
        mock_source.fetch_transcript_text.side_effect = ContentFetchError("va1", "boom")
        player = CallTranscriptPlayer(mock_source, settings)
        player.load_documents(documents)
        await player.wait_for_pending()

        assert player.transcript_status is LoadStatus.FAILED
        assert player.entries == ()
        assert player.audio_status is LoadStatus.LOADED
        assert player.view_state().no_transcript_available is True

    async def test_audio_failure_does_not_affect_transcript(self, mock_source, settings, documents) -> None:
        mock_source.fetch_audio_bytes.side_effect = ContentFetchError("audio1", "boom")
        player = CallTranscriptPlayer(mock_source, settings)
        player.load_documents(documents)
        await player.wait_for_pending()

        assert player.audio_status is LoadStatus.FAILED
        assert player.transcript_status is LoadStatus.LOADED
        assert len(player.entries) == 3

    async def test_empty_audio(self, mock_source, settings, documents) -> None:
        mock_source.fetch_audio_bytes.return_value = b""
        player = CallTranscriptPlayer(mock_source, settings)
        player.load_documents(documents)
        await player.wait_for_pending()
        assert player.audio_status is LoadStatus.EMPTY
        assert player.audio_content is None

    async def test_empty_transcript(self, mock_source, settings, documents) -> None:
        mock_source.fetch_transcript_text.return_value = ""
        player = CallTranscriptPlayer(mock_source, settings)
        player.load_documents(documents)
        await player.wait_for_pending()
        assert player.transcript_status is LoadStatus.EMPTY
        assert player.recording_start_time == "00:00:00"

    async def test_failure_logged(self, mock_source, settings, documents) -> None:
        mock_source.fetch_transcript_text.side_effect = ContentFetchError("va1", "boom")
        log = MagicMock()
        log.bind.return_value = log
        player = CallTranscriptPlayer(mock_source, settings, log=log)
        player.load_documents(documents)
        await player.wait_for_pending()
        events = [c.args[0] for c in log.exception.call_args_list]
        assert "transcript_load_failed" in events


# ── media events ──


@pytest.fixture()
async def loaded(player: CallTranscriptPlayer, documents) -> CallTranscriptPlayer:
    player.load_documents(documents)
    await player.wait_for_pending()
    player.handle_loaded_metadata(30.0)
    return player


class TestMediaEvents:
    async def test_time_update_moves_highlight(self, loaded: CallTranscriptPlayer) -> None:
        change = loaded.handle_time_update(8.0)
        assert change.current_index == 1
        assert loaded.handle_time_update(9.0) is None
        view = loaded.view_state()
        assert view.active_index == 1
        assert view.entries[1].entry_class == "transcript-entry active-entry"
        assert view.scroll_target is None

    async def test_scroll_target_reported_once_per_change(self, loaded: CallTranscriptPlayer) -> None:
        loaded.handle_time_update(8.0)
        assert loaded.view_state().scroll_target == 1
        assert loaded.handle_time_update(8.0) is None
        assert loaded.view_state().scroll_target is None
        assert loaded.view_state().active_index == 1

    async def test_should_scroll_to(self, loaded: CallTranscriptPlayer) -> None:
        viewport = Box(top=100, bottom=400)
        loaded.handle_time_update(0.0)
        assert loaded.should_scroll_to(Box(500, 550), viewport) is False
        loaded.handle_time_update(8.0)
        assert loaded.should_scroll_to(Box(150, 200), viewport) is False
        assert loaded.should_scroll_to(Box(500, 550), viewport) is True
        loaded.handle_time_update(9.0)
        assert loaded.should_scroll_to(Box(500, 550), viewport) is False

    async def test_should_scroll_to_respects_auto_scroll(self, loaded: CallTranscriptPlayer) -> None:
        loaded.handle_time_update(8.0)
        loaded.handle_toggle_auto_scroll()
        assert loaded.should_scroll_to(Box(500, 550), Box(top=100, bottom=400)) is False

    async def test_playback_update_callback(self, memory_source, settings, documents) -> None:
        updates = MagicMock()
        player = CallTranscriptPlayer(
            memory_source, settings, session_id="session123", on_playback_update=updates
        )
        player.load_documents(documents)
        await player.wait_for_pending()
        player.handle_time_update(3.0)
        updates.assert_called_once_with("session123", 3.0, False)

    async def test_failing_callback_is_contained(self, memory_source, settings, documents) -> None:
        player = CallTranscriptPlayer(
            memory_source, settings, on_playback_update=MagicMock(side_effect=RuntimeError("x"))
        )
        player.load_documents(documents)
        await player.wait_for_pending()
        assert player.handle_time_update(8.0).current_index == 1

    async def test_loaded_metadata_updates_recording(self, loaded: CallTranscriptPlayer) -> None:
        assert loaded.state.duration == 30.0
        assert loaded.selected_recording.duration_display == "0:30"
        assert loaded.recordings[1].duration_display == "--:--"

    async def test_transcript_click_seeks_and_plays(self, loaded: CallTranscriptPlayer) -> None:
        loaded.handle_transcript_click(2)
        assert loaded.state.current_time == 15.0
        assert loaded.state.is_playing is True
        assert loaded.view_state().active_index == 2

    async def test_transcript_click_past_duration_is_clamped(self, loaded: CallTranscriptPlayer) -> None:
        loaded.handle_loaded_metadata(12.0)
        loaded.handle_transcript_click(2)
        assert loaded.state.current_time == 12.0
        assert loaded.view_state().active_index == 1
        assert loaded.view_state().progress_percent == 100.0

    async def test_progress_click(self, loaded: CallTranscriptPlayer) -> None:
        loaded.handle_progress_click(0.5)
        assert loaded.state.current_time == 15.0
        loaded.handle_progress_click(2.0)
        assert loaded.state.current_time == 30.0

    async def test_skip_controls(self, loaded: CallTranscriptPlayer) -> None:
        loaded.handle_skip_forward()
        assert loaded.state.current_time == 10.0
        loaded.handle_skip_back()
        loaded.handle_skip_back()
        assert loaded.state.current_time == 0.0

    async def test_speed_and_auto_scroll(self, loaded: CallTranscriptPlayer) -> None:
        loaded.handle_speed_change(2.0)
        assert loaded.view_state().playback_speed == 2.0
        assert loaded.handle_toggle_auto_scroll() is False
        loaded.handle_time_update(8.0)
        assert loaded.view_state().scroll_target is None

    async def test_audio_ended_pauses(self, loaded: CallTranscriptPlayer) -> None:
        loaded.handle_play_pause()
        loaded.handle_audio_ended()
        assert loaded.state.is_playing is False
        assert loaded.selected_recording_id == "audio1"

    async def test_download_url(self, loaded: CallTranscriptPlayer) -> None:
        assert loaded.transcript_download_url() == "/t/va1"

    async def test_close(self, mock_source, settings, documents) -> None:
        player = CallTranscriptPlayer(mock_source, settings)
        player.load_documents(documents)
        await player.close()
        mock_source.close.assert_awaited_once()
