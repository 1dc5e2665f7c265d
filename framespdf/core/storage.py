from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from .config import Settings
from .errors import StorageError, UploadTooLargeError

CHUNK_SIZE = 1024 * 1024

DOWNLOAD_PREFIX = "/download"
UPLOADS_PREFIX = "/uploads"
AUDIO_PREFIX = "/audio"


class UploadSource(Protocol):
    """The subset of ``fastapi.UploadFile`` that ingestion relies on."""

    filename: Optional[str]

    async def read(self, size: int = -1) -> bytes: ...


@dataclass(slots=True)
class StoredUpload:
    rel_path: str
    abs_path: Path
    size_bytes: int


@dataclass(slots=True)
class ByteBudget:
    """Remaining bytes a single upload request may still write."""

    limit_bytes: int
    used_bytes: int = 0

    def consume(self, count: int) -> None:
        self.used_bytes += count
        if self.used_bytes > self.limit_bytes:
            raise UploadTooLargeError(self.limit_bytes)


class LocalStorage:
    """Filesystem layout under the work root and the URLs each directory is served from."""

    def __init__(self, *, upload_dir: Path, frames_dir: Path, pdfs_dir: Path, audio_dir: Path):
        self.upload_dir = upload_dir
        self.frames_dir = frames_dir
        self.pdfs_dir = pdfs_dir
        self.audio_dir = audio_dir

    def ensure_layout(self) -> None:
        for directory in (self.upload_dir, self.frames_dir, self.pdfs_dir, self.audio_dir):
            directory.mkdir(parents=True, exist_ok=True)

    async def write_upload(
        self,
        source: UploadSource,
        *,
        asset_id: str,
        name: str,
        budget: ByteBudget | None = None,
    ) -> StoredUpload:
        """Stream ``source`` to ``uploads/<asset_id>/<name>``.

        The write only counts as complete once both the copy and the close of
        the destination succeed.
        """
        rel_path = f"{asset_id}/{name}"
        target = self.upload_dir / asset_id / name
        try:
            await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"mkdir: {exc}") from exc

        try:
            handle = await asyncio.to_thread(target.open, "wb")
        except OSError as exc:
            raise StorageError(f"open: {exc}") from exc

        # blocking file calls go to a worker thread; only the upload read stays on the loop
        written = 0
        try:
            try:
                while True:
                    chunk = await source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    if budget is not None:
                        budget.consume(len(chunk))
                    await asyncio.to_thread(handle.write, chunk)
                    written += len(chunk)
            finally:
                await asyncio.to_thread(handle.close)
        except StorageError:
            raise
        except OSError as exc:
            raise StorageError(f"write: {exc}") from exc
        return StoredUpload(rel_path=rel_path, abs_path=target, size_bytes=written)

    def frames_dir_for(self, asset_id: str) -> Path:
        return self.frames_dir / asset_id

    def pdf_path(self, filename: str) -> Path:
        return self.pdfs_dir / filename

    def audio_path(self, filename: str) -> Path:
        return self.audio_dir / filename

    @staticmethod
    def download_url(pdf_path: Path) -> str:
        return f"{DOWNLOAD_PREFIX}/{pdf_path.name}"

    @staticmethod
    def upload_url(rel_path: str) -> str:
        return f"{UPLOADS_PREFIX}/{rel_path}"

    @staticmethod
    def audio_url(audio_path: Path) -> str:
        return f"{AUDIO_PREFIX}/{audio_path.name}"


def get_storage(settings: Settings) -> LocalStorage:
    return LocalStorage(
        upload_dir=settings.upload_dir,
        frames_dir=settings.frames_dir,
        pdfs_dir=settings.pdfs_dir,
        audio_dir=settings.audio_dir,
    )


__all__ = [
    "UploadSource",
    "StoredUpload",
    "ByteBudget",
    "LocalStorage",
    "get_storage",
    "DOWNLOAD_PREFIX",
    "UPLOADS_PREFIX",
    "AUDIO_PREFIX",
]
