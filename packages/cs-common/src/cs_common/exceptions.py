"""
Exception hierarchy for CallSync.

Line-level parse problems are never raised; they are skipped by the
parser. These exceptions cover caller errors and I/O boundaries.
"""

from __future__ import annotations


class CallSyncError(Exception):
    """Base class for all CallSync errors."""


class TranscriptFormatError(CallSyncError, ValueError):
    """Raised when a caller-supplied value is not a valid ``HH:MM:SS`` time."""


class ContentFetchError(CallSyncError):
    """Raised when a content source cannot deliver a document.

    Args:
        document_id: The document that failed to load.
        reason: Human-readable failure description.
    """

    def __init__(self, document_id: str, reason: str) -> None:
        super().__init__(f"Failed to fetch document {document_id!r}: {reason}")
        self.document_id = document_id
        self.reason = reason


class UnknownRecordingError(CallSyncError, KeyError):
    """Raised when a recording id is not part of the loaded document set."""
