"""
Document content API router for CallSync.

Serves transcript text through the configured content source.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException

from cs_common.exceptions import ContentFetchError
from cs_common.metrics import FETCH_FAILURES

from ..dependencies import get_content_source
from ..schemas.transcript_schemas import TranscriptContentResponse
from ..sources.base import ContentSource

logger = structlog.get_logger()

router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("/{document_id}/transcript", response_model=TranscriptContentResponse)
async def get_transcript_content(
    document_id: str,
    source: ContentSource | None = Depends(get_content_source),
) -> TranscriptContentResponse:
    if source is None:
        raise HTTPException(status_code=503, detail="No content source configured")
    try:
        content = await source.fetch_transcript_text(document_id)
    except ContentFetchError as exc:
        FETCH_FAILURES.labels(kind="transcript").inc()
        logger.warning("transcript_content_not_found", document_id=document_id, reason=exc.reason)
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return TranscriptContentResponse(document_id=document_id, content=content)
