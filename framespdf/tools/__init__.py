"""Boundary around the external media binaries (ffprobe, ffmpeg, ImageMagick)."""

from framespdf.tools.runner import run_tool
from framespdf.tools.toolkit import AUDIO_FORMATS, AudioFormat, MediaToolkit, locate_tools, resolve_audio_format

__all__ = [
    "AUDIO_FORMATS",
    "AudioFormat",
    "MediaToolkit",
    "locate_tools",
    "resolve_audio_format",
    "run_tool",
]
