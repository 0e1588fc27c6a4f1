from __future__ import annotations

import pytest
from aiohttp import test_utils, web
from conftest import png_bytes

from pytoki.exceptions import TokiMediaError, TokiPersistenceError
from pytoki.media import MediaRepository, decode_image, probe_dimensions
from pytoki.storage import MemoryBackend


def test_store_probes_image_dimensions() -> None:
    repo = MediaRepository(MemoryBackend())
    media = repo.store(png_bytes((8, 5)), "IMAGE/PNG")

    assert media.mime == "image/png"
    assert (media.width, media.height) == (8, 5)
    assert media.filename == f"{media.id}.png"
    assert repo.load(media.id) == png_bytes((8, 5))


def test_store_rejects_empty_payload() -> None:
    repo = MediaRepository(MemoryBackend())
    with pytest.raises(ValueError):
        repo.store(b"", "image/png")
    assert repo.media == ()


def test_unknown_media_is_absent() -> None:
    repo = MediaRepository(MemoryBackend())
    assert repo.load("nope") is None
    assert repo.load(None) is None
    assert repo.load_image("nope") is None


def test_missing_blob_reads_as_absent() -> None:
    backend = MemoryBackend()
    repo = MediaRepository(backend)
    media = repo.store(png_bytes(), "image/png")
    backend.delete_blob(media.filename)
    repo.clear_cache()

    assert repo.load(media.id) is None


def test_cache_cap_evicts_least_recently_used() -> None:
    repo = MediaRepository(MemoryBackend(), max_cache_entries=2)
    first = repo.store(b"one", "audio/m4a")
    second = repo.store(b"two", "audio/m4a")
    repo.load(first.id)
    third = repo.store(b"three", "audio/m4a")

    assert repo.cache_size == 2
    # Evicted payloads are read back from the blob store.
    assert repo.load(second.id) == b"two"
    assert repo.load(third.id) == b"three"


def test_failed_blob_write_registers_nothing() -> None:
    class ReadOnlyBackend(MemoryBackend):
        def write_blob(self, name: str, data: bytes) -> None:
            raise TokiPersistenceError("read-only", table="media")

    repo = MediaRepository(ReadOnlyBackend())
    with pytest.raises(TokiPersistenceError):
        repo.store(b"data", "audio/m4a")
    assert repo.media == ()
    assert repo.cache_size == 0


def test_index_survives_reload() -> None:
    backend = MemoryBackend()
    media = MediaRepository(backend).store(b"voice", "audio/webm")

    reopened = MediaRepository(backend)
    assert reopened.load_index() == 1
    assert reopened.get(media.id) == media
    assert reopened.load(media.id) == b"voice"


def test_delete_removes_blob_and_metadata() -> None:
    backend = MemoryBackend()
    repo = MediaRepository(backend)
    media = repo.store(b"voice", "audio/webm")

    assert repo.delete(media.id) is True
    assert repo.delete(media.id) is False
    assert not repo.contains(media.id)
    with pytest.raises(FileNotFoundError):
        backend.read_blob(media.filename)


def test_decode_image_handles_garbage() -> None:
    assert decode_image(b"definitely not a jpeg") is None
    assert decode_image(None) is None
    assert probe_dimensions(b"\xff\xd8garbage") is None

    image = decode_image(png_bytes((3, 2)))
    assert image is not None
    assert image.size == (3, 2)


def test_corrupt_image_loads_bytes_but_not_image() -> None:
    repo = MediaRepository(MemoryBackend())
    media = repo.store(b"broken", "image/jpeg")

    assert media.width is None
    assert repo.load(media.id) == b"broken"
    assert repo.load_image(media.id) is None


@pytest.mark.asyncio
async def test_async_load_reads_from_storage() -> None:
    backend = MemoryBackend()
    media = MediaRepository(backend).store(png_bytes(), "image/png")
    repo = MediaRepository(backend)
    repo.load_index()

    assert await repo.async_load(media.id) == png_bytes()
    assert repo.cache_size == 1
    assert await repo.async_load("unknown") is None

    image = await repo.async_load_image(media.id)
    assert image is not None
    assert image.size == (4, 3)


def _media_app() -> web.Application:
    async def photo(_request: web.Request) -> web.Response:
        return web.Response(body=png_bytes((6, 6)), content_type="image/png")

    async def missing(_request: web.Request) -> web.Response:
        return web.Response(status=404, text="not found")

    async def empty(_request: web.Request) -> web.Response:
        return web.Response(body=b"", content_type="image/png")

    app = web.Application()
    app.router.add_get("/photo.png", photo)
    app.router.add_get("/missing.png", missing)
    app.router.add_get("/empty.png", empty)
    return app


@pytest.mark.asyncio
async def test_fetch_remote_stores_download() -> None:
    repo = MediaRepository(MemoryBackend())
    async with test_utils.TestServer(_media_app()) as server:
        media = await repo.async_fetch_remote(str(server.make_url("/photo.png")))

    assert media.mime == "image/png"
    assert (media.width, media.height) == (6, 6)
    assert repo.load(media.id) == png_bytes((6, 6))


@pytest.mark.asyncio
async def test_fetch_remote_non_200_raises() -> None:
    repo = MediaRepository(MemoryBackend())
    async with test_utils.TestServer(_media_app()) as server:
        with pytest.raises(TokiMediaError) as exc_info:
            await repo.async_fetch_remote(str(server.make_url("/missing.png")))
        with pytest.raises(TokiMediaError):
            await repo.async_fetch_remote(str(server.make_url("/empty.png")))

    assert exc_info.value.status_code == 404
    assert repo.media == ()
