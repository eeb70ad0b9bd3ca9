"""
Prometheus metrics helpers for CallSync.

Shared metric definitions for the transcript parser, the playback
synchronizer and the content-fetch path. The player API exposes them on
``/metrics``.
"""

from __future__ import annotations

from prometheus_client import Counter

TRANSCRIPTS_PARSED = Counter(
    "callsync_transcripts_parsed_total",
    "Total number of transcripts parsed.",
)
ENTRIES_PARSED = Counter(
    "callsync_transcript_entries_parsed_total",
    "Total number of transcript entries produced by the parser.",
)
LINES_SKIPPED = Counter(
    "callsync_transcript_lines_skipped_total",
    "Transcript lines skipped by the parser.",
    ["reason"],
)
ACTIVE_ENTRY_CHANGES = Counter(
    "callsync_active_entry_changes_total",
    "Number of times the active transcript entry changed.",
)
STALE_FETCHES_DISCARDED = Counter(
    "callsync_stale_fetches_discarded_total",
    "Fetch results discarded because the selection changed.",
    ["kind"],
)
FETCH_FAILURES = Counter(
    "callsync_fetch_failures_total",
    "Content fetch failures by content kind.",
    ["kind"],
)
