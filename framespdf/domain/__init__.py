"""Asset records and naming helpers reused by the services and the API."""

from framespdf.domain.assets import Asset, AssetKind, AudioAsset, ImageAsset, VideoAsset
from framespdf.ingest.asset_id import new_identifier, sanitize_name, strip_ext

__all__ = [
    "Asset",
    "AssetKind",
    "AudioAsset",
    "ImageAsset",
    "VideoAsset",
    "new_identifier",
    "sanitize_name",
    "strip_ext",
]
