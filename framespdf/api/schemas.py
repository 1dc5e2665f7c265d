from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str = Field(default="ok", description="Health status indicator.")
    time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EnvCheckResponse(BaseModel):
    ffmpeg: bool
    ffprobe: bool
    imagemagick: bool


class AssetModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., json_schema_extra={"example": "9f86d081884c7d65"})
    name: str = Field(..., description="Sanitised original filename.")
    rel_path: str = Field(..., description="Location below /uploads.")
    size_bytes: int
    uploaded_at: datetime


class VideoAssetModel(AssetModel):
    duration_seconds: float = Field(default=0.0, description="0 when ffprobe could not report a duration.")


class ImageAssetModel(AssetModel):
    url: str


class AudioAssetModel(AssetModel):
    duration_seconds: float = 0.0
    codec: str = ""
    channels: int = 0
    sample_rate: int = 0
    bitrate_kbps: int = 0
    probe_json: str = Field(default="", description="Raw ffprobe output.")


class VideoUploadResponse(BaseModel):
    videos: List[VideoAssetModel]


class ImageUploadResponse(BaseModel):
    images: List[ImageAssetModel]


class AudioUploadResponse(BaseModel):
    audios: List[AudioAssetModel]


class ProcessItem(BaseModel):
    id: str
    fps: Optional[float] = Field(default=None, json_schema_extra={"example": 1.0})


class ProcessRequest(BaseModel):
    items: List[ProcessItem] = Field(default_factory=list)
    jpeg_quality: Optional[int] = Field(default=None, description="ffmpeg -q:v, defaults to 2.")
    pdf_density: Optional[int] = Field(default=None, description="Defaults to 150.")
    pdf_quality: Optional[int] = Field(default=None, description="Defaults to 92.")


class ProcessResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    duration_seconds: float
    fps: float
    estimated_frames: int = Field(..., description="ceil(duration * fps); display only.")
    frames_wrote: int = Field(..., description="Frames actually produced by ffmpeg.")
    pdf_url: str


class ProcessResponse(BaseModel):
    results: List[ProcessResult]


class ImagesPDFItem(BaseModel):
    id: str
    order: int = 0


class ImagesPDFRequest(BaseModel):
    items: List[ImagesPDFItem] = Field(default_factory=list)
    pdf_density: Optional[int] = None
    pdf_quality: Optional[int] = None
    out_name: Optional[str] = Field(default=None, json_schema_extra={"example": "album.pdf"})


class ImagesPDFResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pdf_url: str
    count: int


class ConvertAudioItem(BaseModel):
    id: str
    format: str = Field(default="", json_schema_extra={"example": "mp3"})
    bitrate_kbps: Optional[int] = None
    sample_rate: Optional[int] = None
    channels: Optional[int] = Field(default=None, description="Only 1 or 2 are forwarded to ffmpeg.")


class ConvertAudioRequest(BaseModel):
    items: List[ConvertAudioItem] = Field(default_factory=list)


class ConvertAudioResult(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    format: str
    out_url: str


class ConvertAudioResponse(BaseModel):
    results: List[ConvertAudioResult]


__all__ = [
    "HealthResponse",
    "EnvCheckResponse",
    "VideoAssetModel",
    "ImageAssetModel",
    "AudioAssetModel",
    "VideoUploadResponse",
    "ImageUploadResponse",
    "AudioUploadResponse",
    "ProcessRequest",
    "ProcessResponse",
    "ImagesPDFRequest",
    "ImagesPDFResponse",
    "ConvertAudioRequest",
    "ConvertAudioResponse",
]
