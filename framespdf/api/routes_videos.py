from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, File, UploadFile

from framespdf.api import deps
from framespdf.core.errors import FramesPDFError
from framespdf.services.job_service import FramesJobItem

from . import schemas


router = APIRouter(tags=["videos"])


@router.post("/upload", response_model=schemas.VideoUploadResponse)
async def upload_videos(
    service: deps.IngestDependency,
    videos: Optional[List[UploadFile]] = File(default=None),
) -> schemas.VideoUploadResponse:
    uploads = deps.require_uploads(videos, "videos")
    try:
        records = await service.ingest_videos(uploads)
    except FramesPDFError as exc:
        raise deps.http_error(exc) from exc
    return schemas.VideoUploadResponse(
        videos=[schemas.VideoAssetModel.model_validate(record) for record in records]
    )


@router.post("/process", response_model=schemas.ProcessResponse)
async def process_videos(
    payload: schemas.ProcessRequest,
    coordinator: deps.CoordinatorDependency,
) -> schemas.ProcessResponse:
    try:
        results = await coordinator.frames_to_pdf(
            [FramesJobItem(id=item.id, fps=item.fps) for item in payload.items],
            jpeg_quality=payload.jpeg_quality,
            pdf_density=payload.pdf_density,
            pdf_quality=payload.pdf_quality,
        )
    except FramesPDFError as exc:
        raise deps.http_error(exc) from exc
    return schemas.ProcessResponse(results=[schemas.ProcessResult.model_validate(result) for result in results])


__all__ = ["router"]
