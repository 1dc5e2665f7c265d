from __future__ import annotations

from fastapi import APIRouter, Depends

from framespdf.api import deps
from framespdf.core.config import Settings
from framespdf.tools.toolkit import locate_tools

from .schemas import EnvCheckResponse, HealthResponse


router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/env-check", response_model=EnvCheckResponse, summary="Report which media binaries resolve")
async def env_check(settings: Settings = Depends(deps.get_app_settings)) -> EnvCheckResponse:
    located = locate_tools(settings)
    return EnvCheckResponse(**{label: path is not None for label, path in located.items()})


__all__ = ["router"]
