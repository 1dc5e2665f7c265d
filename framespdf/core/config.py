from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FPS = 1.0
DEFAULT_JPEG_QUALITY = 2
DEFAULT_PDF_DENSITY = 150
DEFAULT_PDF_QUALITY = 92
DEFAULT_AUDIO_FORMAT = "mp3"

GIB = 1 << 30


class Settings(BaseSettings):
    """Centralised runtime configuration for the framespdf service."""

    model_config = SettingsConfigDict(
        env_prefix="FRAMESPDF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "framespdf"
    environment: str = Field(default="development", description="Deployment environment label.")
    version: str = Field(default="0.1.0", description="API version for metadata and OpenAPI.")
    log_level: str = Field(default="info")
    log_format: Literal["json", "console"] = Field(default="json", description="structlog renderer.")

    host: str = Field(default="0.0.0.0", description="Bind address used by `framespdf serve`.")
    port: int = Field(default=5060, description="Bind port used by `framespdf serve`.")

    work_root: Path = Field(default_factory=lambda: Path("work"), description="Root for uploads and artefacts.")
    id_bytes: int = Field(default=8, ge=4, description="Random bytes per asset identifier.")

    tool_timeout_s: float = Field(
        default=1800.0,
        ge=0,
        description="Deadline for a single external process; 0 disables the deadline.",
    )
    max_video_upload_bytes: int = Field(default=20 * GIB, description="Byte cap for one /upload request.")
    max_upload_bytes: int = Field(default=5 * GIB, description="Byte cap for image and audio upload requests.")

    ffmpeg_bin: str = Field(default="ffmpeg")
    ffprobe_bin: str = Field(default="ffprobe")
    imagemagick_bins: tuple[str, ...] = Field(
        default=("magick", "convert"),
        description="ImageMagick entry points, first resolvable wins.",
    )

    @property
    def environment_lower(self) -> str:
        return self.environment.lower()

    @property
    def upload_dir(self) -> Path:
        return self.work_root / "uploads"

    @property
    def frames_dir(self) -> Path:
        return self.work_root / "frames"

    @property
    def pdfs_dir(self) -> Path:
        return self.work_root / "pdfs"

    @property
    def audio_dir(self) -> Path:
        return self.work_root / "audio"

    @property
    def timeout(self) -> float | None:
        return self.tool_timeout_s or None


@lru_cache()
def get_settings() -> Settings:
    load_dotenv(".env", override=False)

    _ENV_ALIAS_MAP = {
        "FRAMESPDF_ENV": "FRAMESPDF_ENVIRONMENT",
        "FRAMESPDF_WORK_DIR": "FRAMESPDF_WORK_ROOT",
        "FRAMESPDF_TIMEOUT": "FRAMESPDF_TOOL_TIMEOUT_S",
    }

    for source, target in _ENV_ALIAS_MAP.items():
        value = os.getenv(source)
        if value:
            os.environ[target] = value

    return Settings()


__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_FPS",
    "DEFAULT_JPEG_QUALITY",
    "DEFAULT_PDF_DENSITY",
    "DEFAULT_PDF_QUALITY",
    "DEFAULT_AUDIO_FORMAT",
]
