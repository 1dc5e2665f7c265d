from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, File, UploadFile

from framespdf.api import deps
from framespdf.core.errors import FramesPDFError
from framespdf.services.job_service import AudioJobItem

from . import schemas


router = APIRouter(tags=["audio"])


@router.post("/upload_audio", response_model=schemas.AudioUploadResponse)
async def upload_audio(
    service: deps.IngestDependency,
    audios: Optional[List[UploadFile]] = File(default=None),
) -> schemas.AudioUploadResponse:
    uploads = deps.require_uploads(audios, "audios")
    try:
        records = await service.ingest_audio(uploads)
    except FramesPDFError as exc:
        raise deps.http_error(exc) from exc
    return schemas.AudioUploadResponse(
        audios=[schemas.AudioAssetModel.model_validate(record) for record in records]
    )


@router.post("/convert_audio", response_model=schemas.ConvertAudioResponse)
async def convert_audio(
    payload: schemas.ConvertAudioRequest,
    coordinator: deps.CoordinatorDependency,
) -> schemas.ConvertAudioResponse:
    try:
        results = await coordinator.convert_audio(
            [
                AudioJobItem(
                    id=item.id,
                    format=item.format,
                    bitrate_kbps=item.bitrate_kbps,
                    sample_rate=item.sample_rate,
                    channels=item.channels,
                )
                for item in payload.items
            ]
        )
    except FramesPDFError as exc:
        raise deps.http_error(exc) from exc
    return schemas.ConvertAudioResponse(
        results=[schemas.ConvertAudioResult.model_validate(result) for result in results]
    )


__all__ = ["router"]
