"""
Abstract base class for content sources in CallSync.

A content source delivers the raw bytes behind a document id: transcript
text for the parser and audio for the player. Every implementation
reports failure by raising :class:`ContentFetchError`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ContentSource(ABC):
    """Base class every document content source must implement.

    Attributes:
        name: Short source name used in logs.
    """

    name: str = "base"

    @abstractmethod
    async def fetch_transcript_text(self, document_id: str) -> str:
        """Return the transcript text stored under *document_id*.

        Raises:
            ContentFetchError: If the document cannot be delivered.
        """

    @abstractmethod
    async def fetch_audio_bytes(self, document_id: str) -> bytes:
        """Return the audio payload stored under *document_id*.

        Raises:
            ContentFetchError: If the document cannot be delivered.
        """

    async def close(self) -> None:
        """Release any resources held by the source (override if needed)."""
