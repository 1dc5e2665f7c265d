from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, File, UploadFile

from framespdf.api import deps
from framespdf.core.errors import FramesPDFError
from framespdf.services.job_service import ImagesPDFItem

from . import schemas


router = APIRouter(tags=["images"])


@router.post("/upload_images", response_model=schemas.ImageUploadResponse)
async def upload_images(
    service: deps.IngestDependency,
    images: Optional[List[UploadFile]] = File(default=None),
) -> schemas.ImageUploadResponse:
    uploads = deps.require_uploads(images, "images")
    try:
        records = await service.ingest_images(uploads)
    except FramesPDFError as exc:
        raise deps.http_error(exc) from exc
    return schemas.ImageUploadResponse(
        images=[schemas.ImageAssetModel.model_validate(record) for record in records]
    )


@router.post("/images_pdf", response_model=schemas.ImagesPDFResponse)
async def images_pdf(
    payload: schemas.ImagesPDFRequest,
    coordinator: deps.CoordinatorDependency,
) -> schemas.ImagesPDFResponse:
    try:
        result = await coordinator.images_to_pdf(
            [ImagesPDFItem(id=item.id, order=item.order) for item in payload.items],
            pdf_density=payload.pdf_density,
            pdf_quality=payload.pdf_quality,
            out_name=payload.out_name,
        )
    except FramesPDFError as exc:
        raise deps.http_error(exc) from exc
    return schemas.ImagesPDFResponse.model_validate(result)


__all__ = ["router"]
