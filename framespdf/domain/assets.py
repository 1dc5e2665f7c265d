from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import ClassVar, Literal, Union

AssetKind = Literal["video", "image", "audio"]


@dataclass(frozen=True, slots=True)
class VideoAsset:
    """An uploaded video and the duration reported by ffprobe (0 when unknown)."""

    id: str
    name: str
    rel_path: str
    abs_path: Path
    size_bytes: int
    uploaded_at: datetime
    duration_seconds: float = 0.0

    kind: ClassVar[AssetKind] = "video"


@dataclass(frozen=True, slots=True)
class ImageAsset:
    """An uploaded still image, retrievable from ``url``."""

    id: str
    name: str
    rel_path: str
    abs_path: Path
    size_bytes: int
    uploaded_at: datetime
    url: str

    kind: ClassVar[AssetKind] = "image"


@dataclass(frozen=True, slots=True)
class AudioAsset:
    """An uploaded audio file with best-effort probe fields.

    ``probe_json`` keeps ffprobe's output verbatim so clients can display it.
    """

    id: str
    name: str
    rel_path: str
    abs_path: Path
    size_bytes: int
    uploaded_at: datetime
    duration_seconds: float = 0.0
    codec: str = ""
    channels: int = 0
    sample_rate: int = 0
    bitrate_kbps: int = 0
    probe_json: str = ""

    kind: ClassVar[AssetKind] = "audio"


Asset = Union[VideoAsset, ImageAsset, AudioAsset]


__all__ = ["AssetKind", "Asset", "VideoAsset", "ImageAsset", "AudioAsset"]
