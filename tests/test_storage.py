from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from framespdf.core.errors import StorageError, UploadTooLargeError
from framespdf.core.storage import ByteBudget


def test_ensure_layout_creates_work_directories(storage, settings):
    for directory in (settings.upload_dir, settings.frames_dir, settings.pdfs_dir, settings.audio_dir):
        assert directory.is_dir()


def test_write_upload_streams_to_id_directory(storage, make_upload):
    payload = b"x" * (3 * 1024 * 1024 + 17)
    stored = asyncio.run(storage.write_upload(make_upload("clip.mp4", payload), asset_id="abcd", name="clip.mp4"))
    assert stored.rel_path == "abcd/clip.mp4"
    assert stored.abs_path == storage.upload_dir / "abcd" / "clip.mp4"
    assert stored.size_bytes == len(payload)
    assert stored.abs_path.read_bytes() == payload


def test_write_upload_honours_budget(storage, make_upload):
    budget = ByteBudget(limit_bytes=10)
    with pytest.raises(UploadTooLargeError):
        asyncio.run(
            storage.write_upload(make_upload("big.bin", b"y" * 11), asset_id="big", name="big.bin", budget=budget)
        )


def test_write_upload_wraps_filesystem_errors(storage, make_upload):
    blocker = storage.upload_dir / "taken"
    blocker.write_text("not a directory")
    with pytest.raises(StorageError):
        asyncio.run(storage.write_upload(make_upload("a.png"), asset_id="taken", name="a.png"))


def test_output_urls(storage):
    assert storage.download_url(storage.pdf_path("abc_clip.pdf")) == "/download/abc_clip.pdf"
    assert storage.upload_url("abc/photo.jpg") == "/uploads/abc/photo.jpg"
    assert storage.audio_url(storage.audio_path("song.mp3")) == "/audio/song.mp3"
    assert storage.frames_dir_for("abc") == storage.frames_dir / "abc"
    assert isinstance(storage.pdf_path("x.pdf"), Path)


def test_write_upload_fails_when_close_fails(storage, make_upload, wrap_upload_handles):
    wrap_upload_handles(fail_close=True)
    payload = b"z" * (2 * 1024 * 1024)
    with pytest.raises(StorageError) as excinfo:
        asyncio.run(storage.write_upload(make_upload("clip.mp4", payload), asset_id="full", name="clip.mp4"))
    assert "No space left on device" in str(excinfo.value)
    # every chunk reached the file before close failed
    assert (storage.upload_dir / "full" / "clip.mp4").stat().st_size == len(payload)


def test_write_upload_keeps_event_loop_responsive(storage, make_upload, wrap_upload_handles):
    wrap_upload_handles(write_delay=0.05)
    payload = b"w" * (6 * 1024 * 1024)

    async def scenario() -> int:
        ticks = 0
        finished = asyncio.Event()

        async def ticker() -> None:
            nonlocal ticks
            while not finished.is_set():
                ticks += 1
                await asyncio.sleep(0.005)

        ticking = asyncio.create_task(ticker())
        try:
            await storage.write_upload(make_upload("slow.mp4", payload), asset_id="slow", name="slow.mp4")
        finally:
            finished.set()
            await ticking
        return ticks

    # six 50ms writes leave room for dozens of ticks when they run off the loop
    assert asyncio.run(scenario()) >= 20
