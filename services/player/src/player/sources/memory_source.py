"""
In-memory content source for CallSync.

Serves documents from dictionaries. Used by tests and by any host that
already holds document content in process.
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from cs_common.exceptions import ContentFetchError

from .base import ContentSource

logger = structlog.get_logger()


class InMemoryContentSource(ContentSource):
    """Content source backed by plain mappings.

    Args:
        transcripts: Transcript text keyed by document id.
        audio: Audio bytes keyed by document id.
    """

    name: str = "memory"

    def __init__(
        self,
        transcripts: Mapping[str, str] | None = None,
        audio: Mapping[str, bytes] | None = None,
    ) -> None:
        self.transcripts: dict[str, str] = dict(transcripts or {})
        self.audio: dict[str, bytes] = dict(audio or {})

    def add_transcript(self, document_id: str, text: str) -> None:
        self.transcripts[document_id] = text

    def add_audio(self, document_id: str, payload: bytes) -> None:
        self.audio[document_id] = payload

    async def fetch_transcript_text(self, document_id: str) -> str:
        try:
            return self.transcripts[document_id]
        except KeyError:
            logger.debug("memory_transcript_missing", document_id=document_id)
            raise ContentFetchError(document_id, "transcript not found") from None

    async def fetch_audio_bytes(self, document_id: str) -> bytes:
        try:
            return self.audio[document_id]
        except KeyError:
            logger.debug("memory_audio_missing", document_id=document_id)
            raise ContentFetchError(document_id, "audio not found") from None
