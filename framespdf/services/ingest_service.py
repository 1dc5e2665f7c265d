from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Sequence, TypeVar

from framespdf.core.config import Settings
from framespdf.core.errors import ToolError
from framespdf.core.logging import get_logger
from framespdf.core.registry import AssetRegistry
from framespdf.core.storage import ByteBudget, LocalStorage, StoredUpload, UploadSource
from framespdf.domain.assets import Asset, AudioAsset, ImageAsset, VideoAsset
from framespdf.ingest.asset_id import new_identifier, sanitize_name
from framespdf.ingest.ffprobe_parser import AudioProbe
from framespdf.tools.toolkit import MediaToolkit

RecordT = TypeVar("RecordT", VideoAsset, ImageAsset, AudioAsset)


class IngestService:
    """Persist uploaded batches under ``uploads/<id>/<name>`` and register them.

    A batch is processed in submission order. The first storage error aborts
    the rest of the batch; files already written for earlier items are left on
    disk but only fully written items are ever registered.
    """

    def __init__(self, settings: Settings, storage: LocalStorage, registry: AssetRegistry, toolkit: MediaToolkit):
        self.settings = settings
        self.storage = storage
        self.registry = registry
        self.toolkit = toolkit
        self.logger = get_logger(component="ingest_service")

    async def ingest_videos(self, uploads: Sequence[UploadSource]) -> list[VideoAsset]:
        async def build(asset_id: str, name: str, stored: StoredUpload) -> VideoAsset:
            duration = await self._probe_duration(stored)
            return VideoAsset(
                id=asset_id,
                name=name,
                rel_path=stored.rel_path,
                abs_path=stored.abs_path,
                size_bytes=stored.size_bytes,
                uploaded_at=_now(),
                duration_seconds=duration,
            )

        return await self._ingest(uploads, build, limit_bytes=self.settings.max_video_upload_bytes)

    async def ingest_images(self, uploads: Sequence[UploadSource]) -> list[ImageAsset]:
        async def build(asset_id: str, name: str, stored: StoredUpload) -> ImageAsset:
            return ImageAsset(
                id=asset_id,
                name=name,
                rel_path=stored.rel_path,
                abs_path=stored.abs_path,
                size_bytes=stored.size_bytes,
                uploaded_at=_now(),
                url=self.storage.upload_url(stored.rel_path),
            )

        return await self._ingest(uploads, build, limit_bytes=self.settings.max_upload_bytes)

    async def ingest_audio(self, uploads: Sequence[UploadSource]) -> list[AudioAsset]:
        async def build(asset_id: str, name: str, stored: StoredUpload) -> AudioAsset:
            probe = await self._probe_audio(stored)
            return AudioAsset(
                id=asset_id,
                name=name,
                rel_path=stored.rel_path,
                abs_path=stored.abs_path,
                size_bytes=stored.size_bytes,
                uploaded_at=_now(),
                duration_seconds=probe.duration_seconds,
                codec=probe.codec,
                channels=probe.channels,
                sample_rate=probe.sample_rate,
                bitrate_kbps=probe.bitrate_kbps,
                probe_json=probe.raw_json,
            )

        return await self._ingest(uploads, build, limit_bytes=self.settings.max_upload_bytes)

    async def _ingest(
        self,
        uploads: Sequence[UploadSource],
        build: Callable[[str, str, StoredUpload], Awaitable[RecordT]],
        *,
        limit_bytes: int,
    ) -> list[RecordT]:
        budget = ByteBudget(limit_bytes=limit_bytes)
        records: list[RecordT] = []
        for upload in uploads:
            asset_id = new_identifier(self.settings.id_bytes)
            name = sanitize_name(upload.filename)
            stored = await self.storage.write_upload(upload, asset_id=asset_id, name=name, budget=budget)
            record = await build(asset_id, name, stored)
            self._register(record)
            records.append(record)
        return records

    def _register(self, record: Asset) -> None:
        self.registry.register(record)
        self.logger.info(
            "asset_registered",
            kind=record.kind,
            asset_id=record.id,
            name=record.name,
            size_bytes=record.size_bytes,
        )

    async def _probe_duration(self, stored: StoredUpload) -> float:
        try:
            return await asyncio.to_thread(self.toolkit.inspect, stored.abs_path)
        except (ToolError, ValueError) as exc:
            self.logger.warning("duration_probe_failed", path=str(stored.abs_path), error=str(exc))
            return 0.0

    async def _probe_audio(self, stored: StoredUpload) -> AudioProbe:
        try:
            return await asyncio.to_thread(self.toolkit.inspect_full, stored.abs_path)
        except ToolError as exc:
            self.logger.warning("audio_probe_failed", path=str(stored.abs_path), error=str(exc))
            return AudioProbe()


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


__all__ = ["IngestService"]
