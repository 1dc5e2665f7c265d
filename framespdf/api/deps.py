from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from framespdf.core.config import Settings
from framespdf.core.errors import (
    EmptyBatchError,
    FramesPDFError,
    ToolTimeoutError,
    UnknownAssetError,
    UnsupportedFormatError,
    UploadTooLargeError,
)
from framespdf.core.logging import get_logger
from framespdf.core.registry import AssetRegistry
from framespdf.core.storage import LocalStorage
from framespdf.services.ingest_service import IngestService
from framespdf.services.job_service import JobCoordinator
from framespdf.tools.toolkit import MediaToolkit

logger = get_logger(component="api")


def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_storage(request: Request) -> LocalStorage:
    storage: LocalStorage = request.app.state.storage
    return storage


def get_registry(request: Request) -> AssetRegistry:
    registry: AssetRegistry = request.app.state.registry
    return registry


def get_toolkit(request: Request) -> MediaToolkit:
    toolkit: MediaToolkit = request.app.state.toolkit
    return toolkit


def get_ingest_service(
    settings: Settings = Depends(get_app_settings),
    storage: LocalStorage = Depends(get_storage),
    registry: AssetRegistry = Depends(get_registry),
    toolkit: MediaToolkit = Depends(get_toolkit),
) -> IngestService:
    return IngestService(settings, storage, registry, toolkit)


def get_job_coordinator(
    storage: LocalStorage = Depends(get_storage),
    registry: AssetRegistry = Depends(get_registry),
    toolkit: MediaToolkit = Depends(get_toolkit),
) -> JobCoordinator:
    return JobCoordinator(storage, registry, toolkit)


IngestDependency = Annotated[IngestService, Depends(get_ingest_service)]
CoordinatorDependency = Annotated[JobCoordinator, Depends(get_job_coordinator)]


def http_error(exc: FramesPDFError) -> HTTPException:
    """Translate a service error into the HTTP status the client sees."""
    if isinstance(exc, (UnknownAssetError, UnsupportedFormatError, EmptyBatchError)):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, UploadTooLargeError):
        code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    elif isinstance(exc, ToolTimeoutError):
        code = status.HTTP_504_GATEWAY_TIMEOUT
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.warning("request_failed", status_code=code, error_type=type(exc).__name__, error=str(exc))
    return HTTPException(status_code=code, detail=str(exc))


def require_uploads(files, field: str) -> list:
    if not files:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"no files uploaded (field must be '{field}')",
        )
    return list(files)


__all__ = [
    "get_app_settings",
    "get_storage",
    "get_registry",
    "get_toolkit",
    "get_ingest_service",
    "get_job_coordinator",
    "IngestDependency",
    "CoordinatorDependency",
    "http_error",
    "require_uploads",
]
