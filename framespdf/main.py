from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from framespdf.api import get_api_router
from framespdf.core.config import Settings, get_settings
from framespdf.core.logging import configure_logging, get_logger, level_from_name
from framespdf.core.registry import AssetRegistry
from framespdf.core.storage import AUDIO_PREFIX, DOWNLOAD_PREFIX, UPLOADS_PREFIX, get_storage
from framespdf.tools.toolkit import MediaToolkit

logger = get_logger(component="app")


def create_app(
    settings: Optional[Settings] = None,
    *,
    toolkit: Optional[MediaToolkit] = None,
    registry: Optional[AssetRegistry] = None,
) -> FastAPI:
    """Build the service; raises ``ToolNotFoundError`` when a media binary is missing."""
    settings = settings or get_settings()
    configure_logging(level=level_from_name(settings.log_level), renderer=settings.log_format)

    toolkit = toolkit or MediaToolkit.resolve(settings)
    registry = registry or AssetRegistry()
    storage = get_storage(settings)
    storage.ensure_layout()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings
        app.state.storage = storage
        app.state.registry = registry
        app.state.toolkit = toolkit
        logger.info("work_dir", path=str(settings.work_root.resolve()))
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        lifespan=lifespan,
        openapi_url="/openapi.json",
        docs_url="/docs",
    )

    app.include_router(get_api_router())
    app.mount(DOWNLOAD_PREFIX, StaticFiles(directory=storage.pdfs_dir), name="download")
    app.mount(UPLOADS_PREFIX, StaticFiles(directory=storage.upload_dir), name="uploads")
    app.mount(AUDIO_PREFIX, StaticFiles(directory=storage.audio_dir), name="audio")
    return app


__all__ = ["create_app"]
