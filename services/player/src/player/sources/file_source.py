"""
Filesystem content source for CallSync.

Reads ``<root_dir>/<document_id>`` off the event loop. Document ids that
would resolve outside ``root_dir`` are rejected.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from cs_common.exceptions import ContentFetchError

from .base import ContentSource

logger = structlog.get_logger()


class FileContentSource(ContentSource):
    """Serve documents from a directory.

    Args:
        root_dir: Directory holding one file per document id.
        encoding: Text encoding used for transcripts.
    """

    name: str = "file"

    def __init__(self, root_dir: str | Path, *, encoding: str = "utf-8") -> None:
        self.root_dir = Path(root_dir).resolve()
        self.encoding = encoding

    def _path_for(self, document_id: str) -> Path:
        path = (self.root_dir / document_id).resolve()
        if not path.is_relative_to(self.root_dir) or path == self.root_dir:
            raise ContentFetchError(document_id, "document id escapes content root")
        return path

    async def _read(self, document_id: str) -> bytes:
        path = self._path_for(document_id)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            raise ContentFetchError(document_id, "file not found") from None
        except OSError as exc:
            logger.warning("file_source_read_failed", path=str(path), error=str(exc))
            raise ContentFetchError(document_id, str(exc)) from exc

    async def fetch_transcript_text(self, document_id: str) -> str:
        raw = await self._read(document_id)
        try:
            return raw.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise ContentFetchError(document_id, f"not valid {self.encoding} text") from exc

    async def fetch_audio_bytes(self, document_id: str) -> bytes:
        return await self._read(document_id)
