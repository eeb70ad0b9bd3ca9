"""
Recording pairing API router for CallSync.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cs_common.config import Settings

from ..dependencies import get_app_settings
from ..pairing import pair_recordings
from ..schemas.recording_schemas import PairRecordingsRequest, PairRecordingsResponse

router = APIRouter(prefix="/recordings", tags=["recordings"])


@router.post("/pair", response_model=PairRecordingsResponse)
async def pair(
    body: PairRecordingsRequest,
    settings: Settings = Depends(get_app_settings),
) -> PairRecordingsResponse:
    recordings = pair_recordings(body.documents, settings)
    return PairRecordingsResponse(recordings=recordings, total=len(recordings))
