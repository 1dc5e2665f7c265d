from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(slots=True)
class AudioProbe:
    """Fields lifted from ffprobe's JSON for an audio upload.

    Missing or unparseable values stay at zero/empty; ``raw_json`` is the
    unmodified ffprobe output.
    """

    duration_seconds: float = 0.0
    codec: str = ""
    channels: int = 0
    sample_rate: int = 0
    bitrate_kbps: int = 0
    raw_json: str = ""


def parse_duration_output(text: str) -> float:
    """Parse the bare ``format=duration`` value printed by ffprobe.

    Args:
        text: ffprobe stdout.

    Returns:
        The duration in seconds.

    Raises:
        ValueError: When ffprobe reported no usable duration.
    """
    value = text.strip()
    if value in ("", "N/A"):
        raise ValueError("no duration")
    return float(value)


def parse_audio_probe(raw_json: str) -> AudioProbe:
    """Summarise ffprobe ``-show_format -show_streams`` JSON for an audio file.

    The first audio stream supplies codec, channels and sample rate. Its
    bitrate, when present, takes precedence over the container bitrate.

    Args:
        raw_json: ffprobe stdout.

    Returns:
        The parsed probe; never raises on malformed content.
    """
    probe = AudioProbe(raw_json=raw_json)
    try:
        payload = json.loads(raw_json)
    except ValueError:
        return probe
    if not isinstance(payload, dict):
        return probe

    format_info: Dict[str, Any] = payload.get("format") or {}
    duration = _positive_float(format_info.get("duration"))
    if duration:
        probe.duration_seconds = duration
    bitrate = _positive_int(format_info.get("bit_rate"))
    if bitrate:
        probe.bitrate_kbps = bitrate // 1000

    for stream in payload.get("streams") or []:
        if stream.get("codec_type") != "audio":
            continue
        probe.codec = stream.get("codec_name") or ""
        channels = _positive_int(stream.get("channels"))
        if channels:
            probe.channels = channels
        sample_rate = _positive_int(stream.get("sample_rate"))
        if sample_rate:
            probe.sample_rate = sample_rate
        stream_bitrate = _positive_int(stream.get("bit_rate"))
        if stream_bitrate:
            probe.bitrate_kbps = stream_bitrate // 1000
        break
    return probe


def _positive_float(value: Any) -> Optional[float]:
    if value in (None, "N/A", ""):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def _positive_int(value: Any) -> Optional[int]:
    if value in (None, "N/A", ""):
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


__all__ = ["AudioProbe", "parse_duration_output", "parse_audio_probe"]
