import errno
import io
import time
from pathlib import Path

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient

from framespdf.core.config import get_settings
from framespdf.core.errors import ToolError
from framespdf.core.registry import AssetRegistry
from framespdf.core.storage import get_storage
from framespdf.ingest.ffprobe_parser import AudioProbe
from framespdf.main import create_app
from framespdf.services.ingest_service import IngestService
from framespdf.services.job_service import JobCoordinator
from framespdf.tools.toolkit import MediaToolkit, resolve_audio_format


class RecordingToolkit(MediaToolkit):
    """MediaToolkit stand-in that writes placeholder outputs instead of spawning processes."""

    def __init__(self) -> None:
        super().__init__(ffmpeg="ffmpeg", ffprobe="ffprobe", imagemagick="magick", timeout=None)
        self.calls: list[tuple] = []
        self.duration = 10.0
        self.frames_per_video = 3
        self.failures: dict[str, Exception] = {}
        self.audio_probe = AudioProbe(
            duration_seconds=3.5,
            codec="mp3",
            channels=2,
            sample_rate=44100,
            bitrate_kbps=128,
            raw_json='{"format": {"duration": "3.5"}}',
        )

    def _maybe_fail(self, name: str) -> None:
        if name in self.failures:
            raise self.failures[name]

    def spawned(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    def inspect(self, path: Path) -> float:
        self.calls.append(("inspect", path))
        self._maybe_fail("inspect")
        return self.duration

    def inspect_full(self, path: Path) -> AudioProbe:
        self.calls.append(("inspect_full", path))
        self._maybe_fail("inspect_full")
        return self.audio_probe

    def extract_frames(self, path: Path, out_dir: Path, fps: float, quality: int) -> list[Path]:
        self.calls.append(("extract_frames", path, out_dir, fps, quality))
        self._maybe_fail("extract_frames")
        out_dir.mkdir(parents=True, exist_ok=True)
        frames = []
        for index in range(1, self.frames_per_video + 1):
            frame = out_dir / f"frame_{index:05d}.jpg"
            frame.write_bytes(b"jpeg")
            frames.append(frame)
        return frames

    def assemble_pdf(self, images, out_path: Path, density: int, quality: int) -> Path:
        self.calls.append(("assemble_pdf", list(images), out_path, density, quality))
        self._maybe_fail("assemble_pdf")
        out_path.write_bytes(b"%PDF-1.4 placeholder")
        return out_path

    def transcode_audio(self, path, out_path, fmt, *, bitrate_kbps=0, sample_rate=0, channels=0):
        resolve_audio_format(fmt)
        self.calls.append(("transcode_audio", path, out_path, fmt, bitrate_kbps, sample_rate, channels))
        self._maybe_fail("transcode_audio")
        out_path.write_bytes(b"audio")
        return out_path


@pytest.fixture(autouse=True)
def configure_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("FRAMESPDF_ENV", "test")
    monkeypatch.setenv("FRAMESPDF_ENVIRONMENT", "test")
    monkeypatch.setenv("FRAMESPDF_LOG_LEVEL", "debug")
    monkeypatch.setenv("FRAMESPDF_WORK_ROOT", str(tmp_path / "work"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def settings():
    return get_settings()


@pytest.fixture()
def storage(settings):
    store = get_storage(settings)
    store.ensure_layout()
    return store


@pytest.fixture()
def registry():
    return AssetRegistry()


@pytest.fixture()
def toolkit():
    return RecordingToolkit()


@pytest.fixture()
def ingest_service(settings, storage, registry, toolkit):
    return IngestService(settings, storage, registry, toolkit)


@pytest.fixture()
def coordinator(storage, registry, toolkit):
    return JobCoordinator(storage, registry, toolkit)


@pytest.fixture()
def make_upload():
    def _make(filename, payload: bytes = b"data") -> UploadFile:
        return UploadFile(file=io.BytesIO(payload), filename=filename)

    return _make


@pytest.fixture()
def client(settings, toolkit, registry):
    app = create_app(settings, toolkit=toolkit, registry=registry)
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def tool_failure():
    return ToolError("ffmpeg", "ffmpeg exited with status 1: Invalid data found", returncode=1, stderr="Invalid data found")


class WrappedUploadHandle:
    """Destination handle whose write and close can be slowed down or made to fail."""

    def __init__(self, handle, *, write_delay: float = 0.0, fail_close: bool = False) -> None:
        self._handle = handle
        self.write_delay = write_delay
        self.fail_close = fail_close

    def write(self, data: bytes) -> int:
        if self.write_delay:
            time.sleep(self.write_delay)
        return self._handle.write(data)

    def close(self) -> None:
        self._handle.close()
        if self.fail_close:
            raise OSError(errno.ENOSPC, "No space left on device")


@pytest.fixture()
def wrap_upload_handles(monkeypatch, storage):
    """Route every upload destination opened under ``uploads/`` through ``WrappedUploadHandle``."""

    real_open = Path.open

    def _install(**options):
        def _open(self, mode="r", *args, **kwargs):
            handle = real_open(self, mode, *args, **kwargs)
            if mode == "wb" and storage.upload_dir in self.parents:
                return WrappedUploadHandle(handle, **options)
            return handle

        monkeypatch.setattr(Path, "open", _open)

    return _install
