"""
Transcript API router for CallSync.

Endpoints for parsing transcript text and resolving the active entry
for a playback position.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from cs_common.exceptions import TranscriptFormatError

from ..dependencies import get_parser
from ..schemas.transcript_schemas import (
    ActiveEntryRequest,
    ActiveEntryResponse,
    ParseTranscriptRequest,
    ParseTranscriptResponse,
    TranscriptEntryResponse,
)
from ..speaker import classify_speaker
from ..synchronizer import find_active_index
from ..transcript_parser import TranscriptParser

router = APIRouter(prefix="/transcripts", tags=["transcripts"])


@router.post("/parse", response_model=ParseTranscriptResponse)
async def parse_transcript(
    body: ParseTranscriptRequest,
    parser: TranscriptParser = Depends(get_parser),
) -> ParseTranscriptResponse:
    start_time = body.recording_start_time or parser.extract_start_time(body.content)
    try:
        entries = parser.parse(body.content, start_time)
    except TranscriptFormatError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return ParseTranscriptResponse(
        recording_start_time=start_time,
        entries=[
            TranscriptEntryResponse(
                **e.model_dump(),
                speaker_category=classify_speaker(e.speaker),
            )
            for e in entries
        ],
        total=len(entries),
    )


@router.post("/active", response_model=ActiveEntryResponse)
async def active_entry(body: ActiveEntryRequest) -> ActiveEntryResponse:
    index = find_active_index([e.seconds for e in body.entries], body.current_time)
    return ActiveEntryResponse(
        active_index=index,
        entry=body.entries[index] if index >= 0 else None,
    )
