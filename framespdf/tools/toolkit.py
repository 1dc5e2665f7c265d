from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence

from framespdf.core.config import Settings
from framespdf.core.errors import ToolNotFoundError, UnsupportedFormatError
from framespdf.ingest.ffprobe_parser import AudioProbe, parse_audio_probe, parse_duration_output

from .runner import run_tool

FRAME_PATTERN = "frame_%05d.jpg"
FRAME_GLOB = "frame_*.jpg"


@dataclass(frozen=True, slots=True)
class AudioFormat:
    codec: str
    lossy: bool


AUDIO_FORMATS: Dict[str, AudioFormat] = {
    "mp3": AudioFormat(codec="libmp3lame", lossy=True),
    "wav": AudioFormat(codec="pcm_s16le", lossy=False),
    "flac": AudioFormat(codec="flac", lossy=False),
    "aac": AudioFormat(codec="aac", lossy=True),
    "ogg": AudioFormat(codec="libvorbis", lossy=True),
    "opus": AudioFormat(codec="libopus", lossy=True),
}


def resolve_audio_format(fmt: str) -> AudioFormat:
    try:
        return AUDIO_FORMATS[fmt]
    except KeyError:
        raise UnsupportedFormatError(fmt) from None


def locate_tools(settings: Settings) -> Dict[str, Optional[str]]:
    """Return the resolved path of every required binary, ``None`` when missing."""
    imagemagick = next(
        (found for found in (shutil.which(name) for name in settings.imagemagick_bins) if found),
        None,
    )
    return {
        "ffmpeg": shutil.which(settings.ffmpeg_bin),
        "ffprobe": shutil.which(settings.ffprobe_bin),
        "imagemagick": imagemagick,
    }


class MediaToolkit:
    """Synchronous wrappers around ffprobe, ffmpeg and ImageMagick.

    Each method spawns exactly one process and blocks until it exits or the
    configured deadline passes. Failures surface as ``ToolError`` subclasses.
    """

    def __init__(self, *, ffmpeg: str, ffprobe: str, imagemagick: str, timeout: Optional[float] = None):
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe
        self.imagemagick = imagemagick
        self.timeout = timeout

    @classmethod
    def resolve(cls, settings: Settings) -> "MediaToolkit":
        located = locate_tools(settings)
        for label, path in located.items():
            if path is None:
                raise ToolNotFoundError(label)
        return cls(
            ffmpeg=located["ffmpeg"],  # type: ignore[arg-type]
            ffprobe=located["ffprobe"],  # type: ignore[arg-type]
            imagemagick=located["imagemagick"],  # type: ignore[arg-type]
            timeout=settings.timeout,
        )

    def inspect(self, path: Path) -> float:
        command = [
            self.ffprobe,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=nw=1:nk=1",
            str(path),
        ]
        proc = run_tool(command, timeout=self.timeout)
        return parse_duration_output(proc.stdout)

    def inspect_full(self, path: Path) -> AudioProbe:
        command = [
            self.ffprobe,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            str(path),
        ]
        proc = run_tool(command, timeout=self.timeout)
        return parse_audio_probe(proc.stdout)

    def extract_frames(self, path: Path, out_dir: Path, fps: float, quality: int) -> list[Path]:
        """Write ``frame_NNNNN.jpg`` files into ``out_dir`` and return them in order.

        Zero-padded sequence numbers make lexical order equal temporal order.
        """
        out_dir.mkdir(parents=True, exist_ok=True)
        for stale in out_dir.glob(FRAME_GLOB):
            stale.unlink()
        command = [
            self.ffmpeg,
            "-hide_banner",
            "-loglevel",
            "error",
            "-nostdin",
            "-y",
            "-fflags",
            "+genpts",
            "-i",
            str(path),
            "-map",
            "0:v:0",
            "-vsync",
            "vfr",
            "-vf",
            f"fps={fps:g}:round=up:start_time=0",
            "-q:v",
            str(quality),
            str(out_dir / FRAME_PATTERN),
        ]
        run_tool(command, timeout=self.timeout)
        return sorted(out_dir.glob(FRAME_GLOB))

    def assemble_pdf(self, images: Sequence[Path], out_path: Path, density: int, quality: int) -> Path:
        command: list[str] = [self.imagemagick]
        for image in images:
            command.extend([str(image), "-auto-orient"])
        command.extend(["-density", str(density), "-quality", str(quality), str(out_path)])
        run_tool(command, timeout=self.timeout)
        return out_path

    def transcode_audio(
        self,
        path: Path,
        out_path: Path,
        fmt: str,
        *,
        bitrate_kbps: int = 0,
        sample_rate: int = 0,
        channels: int = 0,
    ) -> Path:
        target = resolve_audio_format(fmt)
        command = [
            self.ffmpeg,
            "-hide_banner",
            "-loglevel",
            "error",
            "-y",
            "-i",
            str(path),
            "-vn",
            "-c:a",
            target.codec,
        ]
        if sample_rate > 0:
            command.extend(["-ar", str(sample_rate)])
        if channels in (1, 2):
            command.extend(["-ac", str(channels)])
        if bitrate_kbps > 0 and target.lossy:
            command.extend(["-b:a", f"{bitrate_kbps}k"])
        command.append(str(out_path))
        run_tool(command, timeout=self.timeout)
        return out_path


__all__ = [
    "AUDIO_FORMATS",
    "AudioFormat",
    "FRAME_PATTERN",
    "MediaToolkit",
    "locate_tools",
    "resolve_audio_format",
]
