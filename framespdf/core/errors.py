"""Exception hierarchy shared by ingestion, job coordination and the tool adapter."""

from __future__ import annotations

from typing import Optional


class FramesPDFError(Exception):
    """Base class for every error raised by framespdf itself."""


class UnknownAssetError(FramesPDFError, LookupError):
    def __init__(self, kind: str, asset_id: str):
        self.kind = kind
        self.asset_id = asset_id
        super().__init__(f"unknown {kind} id: {asset_id}")


class EmptyBatchError(FramesPDFError, ValueError):
    def __init__(self, message: str = "no items provided"):
        super().__init__(message)


class DuplicateAssetError(FramesPDFError, ValueError):
    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"asset already registered: {asset_id}")


class StorageError(FramesPDFError, OSError):
    """A create/write/close failure while persisting an upload."""


class UploadTooLargeError(StorageError):
    def __init__(self, limit_bytes: int):
        self.limit_bytes = limit_bytes
        super().__init__(f"upload exceeds {limit_bytes} bytes")


class UnsupportedFormatError(FramesPDFError, ValueError):
    def __init__(self, fmt: str):
        self.format = fmt
        super().__init__(f"unsupported format: {fmt}")


class ToolError(FramesPDFError):
    """An external process exited non-zero or could not be spawned."""

    def __init__(self, tool: str, message: str, *, returncode: Optional[int] = None, stderr: str = ""):
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class ToolTimeoutError(ToolError):
    def __init__(self, tool: str, timeout_s: float, *, stderr: str = ""):
        self.timeout_s = timeout_s
        super().__init__(tool, f"{tool} timed out after {timeout_s:g}s", stderr=stderr)


class ToolNotFoundError(ToolError):
    def __init__(self, tool: str):
        super().__init__(tool, f"{tool} not found in PATH")


class NoFramesExtractedError(ToolError):
    def __init__(self, source_name: str):
        self.source_name = source_name
        super().__init__("ffmpeg", f"no frames extracted from {source_name}")


__all__ = [
    "FramesPDFError",
    "UnknownAssetError",
    "EmptyBatchError",
    "DuplicateAssetError",
    "StorageError",
    "UploadTooLargeError",
    "UnsupportedFormatError",
    "ToolError",
    "ToolTimeoutError",
    "ToolNotFoundError",
    "NoFramesExtractedError",
]
