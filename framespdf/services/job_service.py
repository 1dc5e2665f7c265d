from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from framespdf.core.config import (
    DEFAULT_AUDIO_FORMAT,
    DEFAULT_FPS,
    DEFAULT_JPEG_QUALITY,
    DEFAULT_PDF_DENSITY,
    DEFAULT_PDF_QUALITY,
)
from framespdf.core.errors import EmptyBatchError, NoFramesExtractedError, UnknownAssetError
from framespdf.core.logging import get_logger
from framespdf.core.registry import AssetRegistry
from framespdf.core.storage import LocalStorage
from framespdf.domain.assets import AudioAsset, ImageAsset, VideoAsset
from framespdf.ingest.asset_id import new_identifier, sanitize_name, strip_ext
from framespdf.tools.toolkit import MediaToolkit, resolve_audio_format


@dataclass(slots=True)
class FramesJobItem:
    id: str
    fps: Optional[float] = None


@dataclass(slots=True)
class ImagesPDFItem:
    id: str
    order: int = 0


@dataclass(slots=True)
class AudioJobItem:
    id: str
    format: str = ""
    bitrate_kbps: Optional[int] = None
    sample_rate: Optional[int] = None
    channels: Optional[int] = None


@dataclass(slots=True)
class FramesJobResult:
    id: str
    name: str
    duration_seconds: float
    fps: float
    estimated_frames: int
    frames_wrote: int
    pdf_url: str


@dataclass(slots=True)
class ImagesPDFResult:
    pdf_url: str
    count: int


@dataclass(slots=True)
class AudioJobResult:
    id: str
    name: str
    format: str
    out_url: str


def rectify(value: Optional[int], default: int) -> int:
    """Substitute ``default`` for an absent or zero parameter; no clamping."""
    return value if value else default


def estimate_frames(duration_seconds: float, fps: float) -> int:
    return int(math.ceil(duration_seconds * fps))


def pdf_output_name(out_name: Optional[str], *, now: Optional[datetime] = None) -> str:
    """Pick the images PDF filename, enforcing a case-insensitive ``.pdf`` suffix."""
    if out_name and out_name.strip():
        name = sanitize_name(out_name)
    else:
        stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
        name = f"images_{stamp}_{new_identifier(4)}.pdf"
    if not name.lower().endswith(".pdf"):
        name += ".pdf"
    return name


def normalise_audio_format(fmt: Optional[str]) -> str:
    return (fmt or "").strip().lower() or DEFAULT_AUDIO_FORMAT


class JobCoordinator:
    """Run the three transformation kinds over client-submitted batches.

    Items are handled strictly in submission order, one external process at a
    time, and the first failing item aborts the batch. Results of items that
    completed earlier stay on disk but are not returned.
    """

    def __init__(self, storage: LocalStorage, registry: AssetRegistry, toolkit: MediaToolkit):
        self.storage = storage
        self.registry = registry
        self.toolkit = toolkit
        self.logger = get_logger(component="job_coordinator")

    async def frames_to_pdf(
        self,
        items: Sequence[FramesJobItem],
        *,
        jpeg_quality: Optional[int] = None,
        pdf_density: Optional[int] = None,
        pdf_quality: Optional[int] = None,
    ) -> list[FramesJobResult]:
        if not items:
            raise EmptyBatchError()
        jpeg_quality = rectify(jpeg_quality, DEFAULT_JPEG_QUALITY)
        pdf_density = rectify(pdf_density, DEFAULT_PDF_DENSITY)
        pdf_quality = rectify(pdf_quality, DEFAULT_PDF_QUALITY)

        results: list[FramesJobResult] = []
        for item in items:
            video = self._require_video(item.id)
            fps = item.fps if item.fps and item.fps > 0 else DEFAULT_FPS

            frames = await asyncio.to_thread(
                self.toolkit.extract_frames,
                video.abs_path,
                self.storage.frames_dir_for(video.id),
                fps,
                jpeg_quality,
            )
            if not frames:
                raise NoFramesExtractedError(video.name)

            pdf_path = self.storage.pdf_path(f"{video.id}_{strip_ext(video.name)}.pdf")
            await asyncio.to_thread(self.toolkit.assemble_pdf, frames, pdf_path, pdf_density, pdf_quality)

            results.append(
                FramesJobResult(
                    id=video.id,
                    name=video.name,
                    duration_seconds=video.duration_seconds,
                    fps=fps,
                    estimated_frames=estimate_frames(video.duration_seconds, fps),
                    frames_wrote=len(frames),
                    pdf_url=self.storage.download_url(pdf_path),
                )
            )
            self.logger.info("frames_pdf_built", asset_id=video.id, frames=len(frames), pdf=pdf_path.name)
        return results

    async def images_to_pdf(
        self,
        items: Sequence[ImagesPDFItem],
        *,
        pdf_density: Optional[int] = None,
        pdf_quality: Optional[int] = None,
        out_name: Optional[str] = None,
    ) -> ImagesPDFResult:
        if not items:
            raise EmptyBatchError()
        pdf_density = rectify(pdf_density, DEFAULT_PDF_DENSITY)
        pdf_quality = rectify(pdf_quality, DEFAULT_PDF_QUALITY)

        ordered = sorted(items, key=lambda item: item.order)
        paths = [self._require_image(item.id).abs_path for item in ordered]

        pdf_path = self.storage.pdf_path(pdf_output_name(out_name))
        await asyncio.to_thread(self.toolkit.assemble_pdf, paths, pdf_path, pdf_density, pdf_quality)
        self.logger.info("images_pdf_built", count=len(paths), pdf=pdf_path.name)
        return ImagesPDFResult(pdf_url=self.storage.download_url(pdf_path), count=len(paths))

    async def convert_audio(self, items: Sequence[AudioJobItem]) -> list[AudioJobResult]:
        if not items:
            raise EmptyBatchError()
        formats = [normalise_audio_format(item.format) for item in items]
        for fmt in formats:
            resolve_audio_format(fmt)

        results: list[AudioJobResult] = []
        for item, fmt in zip(items, formats):
            audio = self._require_audio(item.id)
            out_path = self.storage.audio_path(f"{strip_ext(audio.name)}.{fmt}")
            await asyncio.to_thread(
                self.toolkit.transcode_audio,
                audio.abs_path,
                out_path,
                fmt,
                bitrate_kbps=item.bitrate_kbps or 0,
                sample_rate=item.sample_rate or 0,
                channels=item.channels or 0,
            )
            results.append(
                AudioJobResult(
                    id=audio.id,
                    name=audio.name,
                    format=fmt.upper(),
                    out_url=self.storage.audio_url(out_path),
                )
            )
            self.logger.info("audio_converted", asset_id=audio.id, format=fmt, output=out_path.name)
        return results

    def _require_video(self, asset_id: str) -> VideoAsset:
        video = self.registry.lookup_video(asset_id)
        if video is None:
            raise UnknownAssetError("video", asset_id)
        return video

    def _require_image(self, asset_id: str) -> ImageAsset:
        image = self.registry.lookup_image(asset_id)
        if image is None:
            raise UnknownAssetError("image", asset_id)
        return image

    def _require_audio(self, asset_id: str) -> AudioAsset:
        audio = self.registry.lookup_audio(asset_id)
        if audio is None:
            raise UnknownAssetError("audio", asset_id)
        return audio


__all__ = [
    "JobCoordinator",
    "FramesJobItem",
    "ImagesPDFItem",
    "AudioJobItem",
    "FramesJobResult",
    "ImagesPDFResult",
    "AudioJobResult",
    "rectify",
    "estimate_frames",
    "pdf_output_name",
    "normalise_audio_format",
]
