from __future__ import annotations

import threading
from typing import Dict, Optional

from framespdf.core.errors import DuplicateAssetError
from framespdf.domain.assets import Asset, AudioAsset, ImageAsset, VideoAsset


class AssetRegistry:
    """Process-lifetime index of uploaded assets, one map per asset kind.

    A single lock guards all three maps and is only held for the dictionary
    access itself, never across file I/O or subprocess calls. Entries are never
    removed or replaced.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._videos: Dict[str, VideoAsset] = {}
        self._images: Dict[str, ImageAsset] = {}
        self._audios: Dict[str, AudioAsset] = {}

    def _table_for(self, record: Asset) -> Dict[str, Asset]:
        if isinstance(record, VideoAsset):
            return self._videos  # type: ignore[return-value]
        if isinstance(record, ImageAsset):
            return self._images  # type: ignore[return-value]
        if isinstance(record, AudioAsset):
            return self._audios  # type: ignore[return-value]
        raise TypeError(f"unsupported asset record: {type(record).__name__}")

    def register(self, record: Asset) -> Asset:
        table = self._table_for(record)
        with self._lock:
            if record.id in table:
                raise DuplicateAssetError(record.id)
            table[record.id] = record
        return record

    def lookup_video(self, asset_id: str) -> Optional[VideoAsset]:
        with self._lock:
            return self._videos.get(asset_id)

    def lookup_image(self, asset_id: str) -> Optional[ImageAsset]:
        with self._lock:
            return self._images.get(asset_id)

    def lookup_audio(self, asset_id: str) -> Optional[AudioAsset]:
        with self._lock:
            return self._audios.get(asset_id)

    def counts(self) -> dict[str, int]:
        with self._lock:
            return {"videos": len(self._videos), "images": len(self._images), "audios": len(self._audios)}


__all__ = ["AssetRegistry"]
