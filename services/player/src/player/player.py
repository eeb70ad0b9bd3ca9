"""
Call transcript player controller for CallSync.

Owns the recording list, the selected recording, the playback
synchronizer and the in-flight content fetches for one call session.

Flow
----
1. :meth:`CallTranscriptPlayer.load_documents` pairs audio with
   transcripts and auto-selects the first recording.
2. :meth:`CallTranscriptPlayer.select_recording` pauses playback, resets
   the synchronizer and schedules the transcript and audio fetches,
   each tagged with ``(recording_id, generation)``.
3. When a fetch completes, its result is applied only if the tag still
   matches the current selection; otherwise it is discarded.
4. Media events (time updates, metadata, clicks) are forwarded to the
   ``handle_*`` methods. Every handler runs to completion on the event
   loop; only the fetches suspend.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine, Sequence
from typing import Any

import structlog
from structlog.typing import FilteringBoundLogger

from cs_common.config import Settings
from cs_common.exceptions import UnknownRecordingError
from cs_common.metrics import FETCH_FAILURES, STALE_FETCHES_DISCARDED
from cs_common.models import (
    ActiveEntryChange,
    DocumentInfo,
    LoadStatus,
    PlaybackState,
    Recording,
    TranscriptEntry,
)
from cs_common.utils import format_time_from_seconds

from .pairing import pair_recordings
from .sources.base import ContentSource
from .synchronizer import PlaybackSynchronizer
from .transcript_parser import TranscriptParser
from .view_state import Box, TranscriptViewState, derive_view_state, needs_scroll

logger = structlog.get_logger()

PlaybackUpdateCallback = Callable[[str | None, float, bool], None]


class CallTranscriptPlayer:
    """Synchronized audio + transcript player for one call session.

    Args:
        content_source: Where transcript text and audio bytes come from.
        settings: Parser, pairing and playback settings.
        session_id: Call session id reported in playback updates.
        on_playback_update: Called with ``(session_id, current_time,
            is_playing)`` on every time update.
        log: Bound structlog logger; defaults to the module logger.
    """

    def __init__(
        self,
        content_source: ContentSource,
        settings: Settings | None = None,
        *,
        session_id: str | None = None,
        on_playback_update: PlaybackUpdateCallback | None = None,
        log: FilteringBoundLogger | None = None,
    ) -> None:
        self._source = content_source
        self._settings = settings or Settings()
        self.session_id = session_id
        self._on_playback_update = on_playback_update
        self._log = (log or logger).bind(session_id=session_id)

        self._parser = TranscriptParser(self._settings, log=self._log)
        self.synchronizer = PlaybackSynchronizer(self._settings, log=self._log)
        self.synchronizer.add_listener(self._on_active_change)

        self.recordings: list[Recording] = []
        self.selected_recording_id: str | None = None
        self.recording_start_time: str | None = None
        self.transcript_status = LoadStatus.IDLE
        self.audio_status = LoadStatus.IDLE
        self.audio_content: bytes | None = None
        self.is_loading_recordings = True

        self._generation = 0
        self._scroll_target: int | None = None
        self._pending: set[asyncio.Task[None]] = set()

    # ── Properties ──────────────────────────────────────────

    @property
    def entries(self) -> tuple[TranscriptEntry, ...]:
        return self.synchronizer.entries

    @property
    def state(self) -> PlaybackState:
        return self.synchronizer.state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def selected_recording(self) -> Recording | None:
        return self._find(self.selected_recording_id)

    @property
    def has_recordings(self) -> bool:
        return not self.is_loading_recordings and bool(self.recordings)

    @property
    def no_recordings_available(self) -> bool:
        return not self.is_loading_recordings and not self.recordings

    @property
    def has_multiple_recordings(self) -> bool:
        return len(self.recordings) > 1

    @property
    def recording_count_label(self) -> str:
        return f"{len(self.recordings)} Recordings"

    @property
    def current_recording_title(self) -> str:
        rec = self.selected_recording
        return f"{rec.icon} {rec.label}" if rec else "Call Recording"

    def pill_class(self, recording_id: str) -> str:
        if recording_id == self.selected_recording_id:
            return "recording-pill active"
        return "recording-pill"

    def _find(self, recording_id: str | None) -> Recording | None:
        if recording_id is None:
            return None
        return next((r for r in self.recordings if r.recording_id == recording_id), None)

    # ── Documents & selection ───────────────────────────────

    def load_documents(self, documents: Sequence[DocumentInfo] | None) -> list[Recording]:
        """Pair *documents* into recordings and select the first one.

        Must be called from a running event loop when the documents
        contain audio, since selection schedules fetches.
        """
        self.recordings = pair_recordings(documents or (), self._settings, log=self._log)
        self.is_loading_recordings = False
        if self.recordings:
            first = self.recordings[0].recording_id
            self._log.info("auto_selecting_first_recording", recording_id=first)
            self.select_recording(first)
        else:
            self.transcript_status = LoadStatus.EMPTY
        return self.recordings

    def select_recording(self, recording_id: str) -> None:
        """Switch playback to *recording_id*.

        Pauses playback, rewinds, discards the previous transcript and
        schedules fresh fetches. Results of fetches started for an
        earlier selection are ignored when they arrive.

        Raises:
            UnknownRecordingError: If *recording_id* is not a loaded recording.
        """
        rec = self._find(recording_id)
        if rec is None:
            raise UnknownRecordingError(recording_id)

        self._generation += 1
        generation = self._generation
        self.selected_recording_id = recording_id
        self.synchronizer.reset(())
        self.recording_start_time = None
        self._scroll_target = None
        self.audio_content = None

        log = self._log.bind(recording_id=recording_id, generation=generation)
        log.info("recording_selected", has_transcript=rec.has_transcript)

        if rec.transcript_doc is not None:
            self.transcript_status = LoadStatus.LOADING
            self._spawn(self.load_transcript(recording_id, generation, rec.transcript_doc.document_id))
        else:
            self.transcript_status = LoadStatus.EMPTY

        self.audio_status = LoadStatus.LOADING
        self._spawn(self.load_audio(recording_id, generation))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _is_current(self, recording_id: str, generation: int) -> bool:
        return recording_id == self.selected_recording_id and generation == self._generation

    def _discard_stale(self, log: FilteringBoundLogger, kind: str) -> None:
        STALE_FETCHES_DISCARDED.labels(kind=kind).inc()
        log.debug("stale_fetch_discarded", kind=kind, current_generation=self._generation)

    async def load_transcript(self, recording_id: str, generation: int, document_id: str) -> None:
        """Fetch, parse and (if still current) apply a transcript."""
        log = self._log.bind(
            recording_id=recording_id,
            generation=generation,
            document_id=document_id,
        )
        log.debug("transcript_fetch_started")
        try:
            content = await self._source.fetch_transcript_text(document_id)
            start_time = self._parser.extract_start_time(content)
            entries = self._parser.parse(content, start_time)
        except Exception:
            if not self._is_current(recording_id, generation):
                self._discard_stale(log, "transcript")
                return
            FETCH_FAILURES.labels(kind="transcript").inc()
            log.exception("transcript_load_failed")
            self.transcript_status = LoadStatus.FAILED
            return

        if not self._is_current(recording_id, generation):
            self._discard_stale(log, "transcript")
            return

        if not content or not content.strip():
            log.warning("transcript_content_empty")
        self.recording_start_time = start_time
        self.synchronizer.load_entries(entries)
        self.transcript_status = LoadStatus.LOADED if entries else LoadStatus.EMPTY
        log.info("transcript_loaded", entries=len(entries), recording_start_time=start_time)

    async def load_audio(self, recording_id: str, generation: int) -> None:
        """Fetch (and if still current) keep the selected recording's audio."""
        log = self._log.bind(recording_id=recording_id, generation=generation)
        try:
            payload = await self._source.fetch_audio_bytes(recording_id)
        except Exception:
            if not self._is_current(recording_id, generation):
                self._discard_stale(log, "audio")
                return
            FETCH_FAILURES.labels(kind="audio").inc()
            log.exception("audio_load_failed")
            self.audio_status = LoadStatus.FAILED
            return

        if not self._is_current(recording_id, generation):
            self._discard_stale(log, "audio")
            return

        if not payload:
            log.warning("audio_content_empty")
            self.audio_status = LoadStatus.EMPTY
            return
        self.audio_content = payload
        self.audio_status = LoadStatus.LOADED
        log.debug("audio_loaded", size=len(payload))

    async def wait_for_pending(self) -> None:
        """Wait until every scheduled fetch has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def close(self) -> None:
        """Cancel in-flight fetches and close the content source."""
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        await self._source.close()

    # ── Media events ────────────────────────────────────────

    def _on_active_change(self, change: ActiveEntryChange) -> None:
        self._scroll_target = change.current_index if change.scroll_requested else None

    def handle_time_update(self, current_time: float) -> ActiveEntryChange | None:
        """Media ``timeupdate``: advance the synchronizer and notify."""
        change = self.synchronizer.update(current_time)
        if change is None:
            self._scroll_target = None
        if self._on_playback_update is not None:
            try:
                self._on_playback_update(
                    self.session_id,
                    self.state.current_time,
                    self.state.is_playing,
                )
            except Exception:
                self._log.exception("playback_update_callback_failed")
        return change

    def handle_loaded_metadata(self, duration: float) -> None:
        """Media ``loadedmetadata``: record duration on state and recording."""
        self.synchronizer.set_duration(duration)
        rec = self.selected_recording
        if rec is not None:
            rec.duration_display = format_time_from_seconds(self.state.duration)

    def handle_audio_ended(self) -> None:
        self.synchronizer.pause()

    def handle_play_pause(self) -> bool:
        return self.synchronizer.toggle_play()

    def handle_skip_back(self) -> ActiveEntryChange | None:
        return self.synchronizer.skip_back()

    def handle_skip_forward(self) -> ActiveEntryChange | None:
        return self.synchronizer.skip_forward()

    def handle_speed_change(self, speed: float) -> None:
        self.synchronizer.set_speed(speed)

    def handle_progress_click(self, fraction: float) -> ActiveEntryChange | None:
        """Seek to a fraction of the duration (clamped)."""
        return self.synchronizer.seek_to_fraction(fraction)

    def handle_transcript_click(self, entry_index: int) -> ActiveEntryChange | None:
        """Seek to an entry's start and start playback if paused."""
        change = self.synchronizer.seek_to_entry(entry_index)
        if not self.state.is_playing:
            self.synchronizer.play()
        return change

    def handle_toggle_auto_scroll(self) -> bool:
        return self.synchronizer.toggle_auto_scroll()

    # ── Derived state ───────────────────────────────────────

    def view_state(self) -> TranscriptViewState:
        return derive_view_state(
            self.entries,
            self.state,
            self.transcript_status,
            scroll_requested=self._scroll_target is not None,
        )

    def should_scroll_to(self, entry_box: Box, viewport_box: Box) -> bool:
        """Whether the pending scroll target must be scrolled into view.

        The host measures the target entry and the transcript viewport;
        an entry already fully visible needs no scroll.
        """
        if self._scroll_target is None or not self.state.auto_scroll:
            return False
        return needs_scroll(entry_box, viewport_box)

    def transcript_download_url(self) -> str | None:
        """Download URL of the selected recording's transcript, if any."""
        rec = self.selected_recording
        if rec is None or rec.transcript_doc is None:
            return None
        return rec.transcript_doc.download_url
