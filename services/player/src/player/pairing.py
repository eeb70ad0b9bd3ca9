"""
Recording / transcript pairing for CallSync.

A call may carry one or two audio legs plus their transcripts. Audio
documents are recognised by file type; transcripts by filename token:

* ``va_…`` / ``…va_transcript…`` → primary transcript
* ``rt_…`` / ``…rt_transcript…`` → secondary transcript

Audio whose title contains the secondary marker (``_2``) is the agent
leg and takes the secondary transcript; any other audio takes the
primary one. When several documents match a category the last wins.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog
from structlog.typing import FilteringBoundLogger

from cs_common.config import Settings
from cs_common.models import DocumentInfo, Recording, RecordingType, TranscriptCategory

logger = structlog.get_logger(__name__)

RECORDING_ORDER: dict[RecordingType, int] = {
    RecordingType.VIRTUAL_AGENT: 0,
    RecordingType.AGENT: 1,
    RecordingType.CALL: 2,
}

_LABELS: dict[RecordingType, tuple[str, str]] = {
    RecordingType.VIRTUAL_AGENT: ("Virtual Agent", "🤖"),
    RecordingType.AGENT: ("Agent Call", "👤"),
    RecordingType.CALL: ("Recording", "🎙️"),
}


@dataclass(frozen=True)
class _Rules:
    audio_file_types: frozenset[str]
    secondary_marker: str
    primary_prefix: str
    primary_token: str
    secondary_prefix: str
    secondary_token: str

    @classmethod
    def from_settings(cls, settings: Settings | None) -> _Rules:
        if settings is None:
            settings = Settings()
        return cls(
            audio_file_types=frozenset(settings.audio_file_types),
            secondary_marker=settings.secondary_marker.lower(),
            primary_prefix=settings.primary_transcript_prefix.lower(),
            primary_token=settings.primary_transcript_token.lower(),
            secondary_prefix=settings.secondary_transcript_prefix.lower(),
            secondary_token=settings.secondary_transcript_token.lower(),
        )


def _transcript_category(title: str, rules: _Rules) -> TranscriptCategory | None:
    title = title.lower()
    if title.startswith(rules.primary_prefix) or rules.primary_token in title:
        return TranscriptCategory.PRIMARY
    if title.startswith(rules.secondary_prefix) or rules.secondary_token in title:
        return TranscriptCategory.SECONDARY
    return None


def classify_transcript(title: str, settings: Settings | None = None) -> TranscriptCategory | None:
    """Return the transcript category of a document *title*, if any."""
    return _transcript_category(title, _Rules.from_settings(settings))


def is_audio(document: DocumentInfo, settings: Settings | None = None) -> bool:
    rules = _Rules.from_settings(settings)
    return (document.file_type or "").upper() in rules.audio_file_types


def is_secondary_audio(title: str, settings: Settings | None = None) -> bool:
    return _Rules.from_settings(settings).secondary_marker in title.lower()


def pair_recordings(
    documents: Sequence[DocumentInfo],
    settings: Settings | None = None,
    *,
    log: FilteringBoundLogger | None = None,
) -> list[Recording]:
    """Build the ordered, labelled recording list for a document set.

    Args:
        documents: All documents attached to the call.
        settings: Filename rules and audio types; defaults when omitted.
        log: Bound structlog logger; defaults to the module logger.

    Returns:
        Recordings sorted virtual agent, agent, then plain call. Labels
        are numbered (``"1. Virtual Agent"``) when more than one exists.
    """
    log = log or logger
    rules = _Rules.from_settings(settings)

    audio_docs = [d for d in documents if (d.file_type or "").upper() in rules.audio_file_types]
    transcripts: dict[TranscriptCategory, DocumentInfo] = {}
    for doc in documents:
        category = _transcript_category(doc.title or "", rules)
        if category is not None:
            transcripts[category] = doc

    recordings: list[Recording] = []
    for audio in audio_docs:
        secondary = rules.secondary_marker in (audio.title or "").lower()
        if secondary:
            rec_type = RecordingType.AGENT
            transcript = transcripts.get(TranscriptCategory.SECONDARY)
        else:
            transcript = transcripts.get(TranscriptCategory.PRIMARY)
            rec_type = RecordingType.VIRTUAL_AGENT if transcript else RecordingType.CALL
        label, icon = _LABELS[rec_type]
        recordings.append(
            Recording(
                recording_id=audio.document_id,
                audio_url=audio.download_url,
                audio_title=audio.title,
                type=rec_type,
                label=label,
                icon=icon,
                transcript_doc=transcript,
                is_secondary=secondary,
            )
        )

    recordings.sort(key=lambda r: RECORDING_ORDER[r.type])
    if len(recordings) > 1:
        for n, rec in enumerate(recordings, start=1):
            rec.label = f"{n}. {rec.label}"

    log.info(
        "recordings_paired",
        documents=len(documents),
        recordings=len(recordings),
        with_transcript=sum(1 for r in recordings if r.has_transcript),
    )
    if not recordings and documents:
        log.warning("no_audio_recordings_found", documents=len(documents))
    return recordings


def pair_filenames(
    audio_names: Iterable[str],
    transcript_names: Iterable[str],
    settings: Settings | None = None,
) -> dict[str, str | None]:
    """Pair audio filenames with transcript filenames.

    Returns:
        Mapping of each audio filename to its transcript filename, or
        ``None`` when no transcript applies.
    """
    rules = _Rules.from_settings(settings)
    found: dict[TranscriptCategory, str] = {}
    for name in transcript_names:
        category = _transcript_category(name, rules)
        if category is not None:
            found[category] = name

    pairs: dict[str, str | None] = {}
    for audio in audio_names:
        if rules.secondary_marker in audio.lower():
            pairs[audio] = found.get(TranscriptCategory.SECONDARY)
        else:
            pairs[audio] = found.get(TranscriptCategory.PRIMARY)
    return pairs
