from __future__ import annotations

import asyncio
import threading

import pytest

from framespdf.core.errors import StorageError, ToolTimeoutError, UploadTooLargeError
from framespdf.ingest.ffprobe_parser import AudioProbe
from framespdf.services.ingest_service import IngestService


def test_ingest_videos_registers_every_item_in_order(ingest_service, registry, toolkit, make_upload):
    uploads = [make_upload("first.mp4", b"a" * 10), make_upload("../second.mov", b"b" * 20)]
    records = asyncio.run(ingest_service.ingest_videos(uploads))

    assert [record.name for record in records] == ["first.mp4", ".._second.mov"]
    assert len({record.id for record in records}) == 2
    for record in records:
        assert registry.lookup_video(record.id) == record
        assert record.abs_path.read_bytes()
        assert record.rel_path == f"{record.id}/{record.name}"
        assert record.duration_seconds == toolkit.duration
    assert [record.size_bytes for record in records] == [10, 20]
    assert len(toolkit.spawned("inspect")) == 2


def test_video_probe_failure_defaults_duration_to_zero(ingest_service, registry, toolkit, make_upload):
    toolkit.failures["inspect"] = ToolTimeoutError("ffprobe", 5)
    (record,) = asyncio.run(ingest_service.ingest_videos([make_upload("broken.mp4")]))
    assert record.duration_seconds == 0.0
    assert registry.lookup_video(record.id) is record


def test_ingest_images_sets_public_url_without_probing(ingest_service, toolkit, make_upload):
    (record,) = asyncio.run(ingest_service.ingest_images([make_upload("photo.jpg", b"jpeg")]))
    assert record.url == f"/uploads/{record.id}/photo.jpg"
    assert toolkit.calls == []


def test_ingest_audio_copies_probe_fields(ingest_service, toolkit, make_upload):
    (record,) = asyncio.run(ingest_service.ingest_audio([make_upload("song.mp3")]))
    assert record.codec == "mp3"
    assert record.channels == 2
    assert record.sample_rate == 44100
    assert record.bitrate_kbps == 128
    assert record.duration_seconds == pytest.approx(3.5)
    assert record.probe_json == toolkit.audio_probe.raw_json


def test_audio_probe_failure_is_best_effort(ingest_service, registry, toolkit, tool_failure, make_upload):
    toolkit.failures["inspect_full"] = tool_failure
    (record,) = asyncio.run(ingest_service.ingest_audio([make_upload("noise.bin")]))
    assert (record.codec, record.channels, record.sample_rate, record.probe_json) == ("", 0, 0, "")
    assert registry.lookup_audio(record.id) is not None
    assert AudioProbe().bitrate_kbps == record.bitrate_kbps


def test_storage_error_aborts_batch_without_registering(monkeypatch, ingest_service, registry, storage, make_upload):
    original = storage.write_upload
    calls = {"count": 0}

    async def flaky_write(source, **kwargs):
        calls["count"] += 1
        if calls["count"] == 2:
            raise StorageError("write: disk full")
        return await original(source, **kwargs)

    monkeypatch.setattr(storage, "write_upload", flaky_write)
    uploads = [make_upload("a.png"), make_upload("b.png"), make_upload("c.png")]
    with pytest.raises(StorageError):
        asyncio.run(ingest_service.ingest_images(uploads))
    assert calls["count"] == 2
    assert registry.counts()["images"] == 1


def test_upload_cap_applies_to_whole_request(monkeypatch, settings, storage, registry, toolkit, make_upload):
    monkeypatch.setattr(settings, "max_upload_bytes", 15)
    service = IngestService(settings, storage, registry, toolkit)
    with pytest.raises(UploadTooLargeError):
        asyncio.run(service.ingest_images([make_upload("a.png", b"x" * 10), make_upload("b.png", b"x" * 10)]))
    assert registry.counts()["images"] == 1


def test_concurrent_batches_get_disjoint_identifiers(ingest_service, registry, make_upload):
    results: dict[str, list[str]] = {}

    def client(label: str) -> None:
        uploads = [make_upload(f"{label}-{index}.mp4") for index in range(25)]
        records = asyncio.run(ingest_service.ingest_videos(uploads))
        results[label] = [record.id for record in records]

    threads = [threading.Thread(target=client, args=(label,)) for label in ("alice", "bob")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
        assert not thread.is_alive()

    assert len(results["alice"]) == len(results["bob"]) == 25
    assert not set(results["alice"]) & set(results["bob"])
    assert registry.counts()["videos"] == 50


def test_close_failure_registers_nothing(ingest_service, registry, toolkit, make_upload, wrap_upload_handles):
    wrap_upload_handles(fail_close=True)
    with pytest.raises(StorageError):
        asyncio.run(ingest_service.ingest_videos([make_upload("clip.mp4", b"v" * 64), make_upload("next.mp4")]))
    assert registry.counts()["videos"] == 0
    assert toolkit.spawned("inspect") == []
