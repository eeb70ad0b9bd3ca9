"""
Transcript parser for CallSync.

Converts semi-structured call transcript text into an ordered sequence
of :class:`TranscriptEntry` objects timed relative to the recording
start.

Expected input::

    Call ID: 1234
    ------------------------------

    [10:00:00     Virtual Agent]     Hello, how can I help?
    [10:00:07     Customer]     I need to reset my password.

Parsing rules
-------------
* Header lines (``Call ID:``), separator lines (``---`` or made only of
  separator characters) and blank lines are skipped.
* Every other line must match ``[HH:MM:SS <speaker>] <text>``. Lines
  that don't match, or whose clock time is out of range, are skipped;
  they never abort the parse and never consume an entry index.
* ``seconds`` is the line time minus the recording start time, clamped
  to zero when the line precedes the start.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

import structlog
from structlog.typing import FilteringBoundLogger

from cs_common.config import Settings
from cs_common.metrics import ENTRIES_PARSED, LINES_SKIPPED, TRANSCRIPTS_PARSED
from cs_common.models import TranscriptEntry
from cs_common.utils import clock_to_seconds, timestamp_to_seconds

logger = structlog.get_logger(__name__)

DEFAULT_START_TIME = "00:00:00"

# [HH:MM:SS <ws> speaker] <ws?> text
LINE_PATTERN = re.compile(r"^\[(\d{2}:\d{2}:\d{2})\s+(.*?)\]\s*(.*)$")
START_TIME_PATTERN = re.compile(r"\[(\d{2}:\d{2}:\d{2})")


def extract_start_time(content: str | None, default: str = DEFAULT_START_TIME) -> str:
    """Return the timestamp of the first bracketed entry in *content*.

    Scans the whole text for ``[HH:MM:SS`` occurrences and returns the
    first one that is a valid clock time.

    Args:
        content: Raw transcript text.
        default: Value returned when no valid bracketed timestamp exists.
    """
    if not content:
        return default
    for match in START_TIME_PATTERN.finditer(content):
        if clock_to_seconds(match.group(1)) is not None:
            return match.group(1)
    return default


@dataclass
class _ParseStats:
    matched: int = 0
    blank: int = 0
    header: int = 0
    unmatched: int = 0
    invalid_timestamp: int = 0
    clamped: int = 0
    max_drift_s: float = 0.0


class TranscriptParser:
    """Line-oriented transcript parser.

    Args:
        settings: Supplies header/separator markers. Defaults are used
            when omitted.
        log: Bound structlog logger; defaults to the module logger.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        log: FilteringBoundLogger | None = None,
    ) -> None:
        self._header_marker = settings.header_marker if settings else "Call ID:"
        self._separator_prefix = settings.separator_prefix if settings else "---"
        self._separator_chars = frozenset(settings.separator_chars if settings else "-=_*")
        self._default_start_time = (
            settings.default_start_time if settings else DEFAULT_START_TIME
        )
        self._log = log or logger

    # ── Public API ────────────────────────────────────────────

    def extract_start_time(self, content: str | None) -> str:
        """Start time of *content*, falling back to the configured default."""
        return extract_start_time(content, self._default_start_time)

    def iter_entries(
        self,
        content: str | None,
        recording_start_time: str | None = None,
    ) -> Iterator[TranscriptEntry]:
        """Lazily yield entries parsed from *content*.

        Each call returns a fresh iterator; parsing has no side effects
        beyond logging and metrics.

        Args:
            content: Raw transcript text.
            recording_start_time: ``HH:MM:SS`` playback-zero time. When
                ``None`` it is extracted from *content*.

        Raises:
            TranscriptFormatError: If *recording_start_time* is not a valid
                ``HH:MM:SS`` time. Raised eagerly, before iteration.
        """
        if recording_start_time is None:
            recording_start_time = self.extract_start_time(content)
        start_s = timestamp_to_seconds(recording_start_time)
        return self._generate(content or "", start_s, recording_start_time)

    def parse(
        self,
        content: str | None,
        recording_start_time: str | None = None,
    ) -> tuple[TranscriptEntry, ...]:
        """Parse *content* into an immutable tuple of entries."""
        return tuple(self.iter_entries(content, recording_start_time))

    # ── internal ─────────────────────────────────────────────

    def _is_skippable(self, line: str, stats: _ParseStats) -> bool:
        if not line:
            stats.blank += 1
            return True
        if line.startswith(self._header_marker):
            stats.header += 1
            return True
        if line.startswith(self._separator_prefix) or set(line) <= self._separator_chars:
            stats.header += 1
            return True
        return False

    def _generate(
        self,
        content: str,
        start_s: int,
        recording_start_time: str,
    ) -> Iterator[TranscriptEntry]:
        stats = _ParseStats()

        for line_no, raw_line in enumerate(content.splitlines(), start=1):
            line = raw_line.strip()
            if self._is_skippable(line, stats):
                continue

            match = LINE_PATTERN.match(line)
            if match is None:
                stats.unmatched += 1
                LINES_SKIPPED.labels(reason="unmatched").inc()
                self._log.debug("transcript_line_unmatched", line_no=line_no, line=line[:80])
                continue

            timestamp, speaker, text = match.groups()
            line_s = clock_to_seconds(timestamp)
            if line_s is None:
                stats.invalid_timestamp += 1
                LINES_SKIPPED.labels(reason="invalid_timestamp").inc()
                self._log.debug(
                    "transcript_line_invalid_timestamp",
                    line_no=line_no,
                    timestamp=timestamp,
                )
                continue

            offset = line_s - start_s
            if offset < 0:
                stats.clamped += 1
                stats.max_drift_s = max(stats.max_drift_s, float(-offset))
                offset = 0

            yield TranscriptEntry(
                timestamp=timestamp,
                seconds=float(offset),
                speaker=speaker.strip(),
                text=text.strip(),
                entry_index=stats.matched,
            )
            stats.matched += 1

        self._finish(stats, recording_start_time)

    def _finish(self, stats: _ParseStats, recording_start_time: str) -> None:
        TRANSCRIPTS_PARSED.inc()
        ENTRIES_PARSED.inc(stats.matched)
        if stats.clamped:
            self._log.warning(
                "transcript_offsets_clamped",
                clamped_lines=stats.clamped,
                max_drift_s=stats.max_drift_s,
                recording_start_time=recording_start_time,
            )
        self._log.info(
            "transcript_parsed",
            entries=stats.matched,
            unmatched_lines=stats.unmatched,
            invalid_timestamps=stats.invalid_timestamp,
            header_lines=stats.header,
            blank_lines=stats.blank,
            recording_start_time=recording_start_time,
        )


_default_parser = TranscriptParser()


def iter_transcript(
    content: str | None,
    recording_start_time: str | None = None,
) -> Iterator[TranscriptEntry]:
    """Module-level shortcut for :meth:`TranscriptParser.iter_entries`."""
    return _default_parser.iter_entries(content, recording_start_time)


def parse_transcript(
    content: str | None,
    recording_start_time: str | None = None,
) -> tuple[TranscriptEntry, ...]:
    """Module-level shortcut for :meth:`TranscriptParser.parse`."""
    return _default_parser.parse(content, recording_start_time)
