from __future__ import annotations

import io
from datetime import UTC, datetime

import pytest
from PIL import Image

from pytoki.config import TokiConfig
from pytoki.storage import MemoryBackend
from pytoki.store import TripDataStore


def fixed_now() -> datetime:
    return datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def png_bytes(size: tuple[int, int] = (4, 3)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, (200, 10, 10)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend: MemoryBackend) -> TripDataStore:
    return TripDataStore(TokiConfig(), backend=backend, clock=fixed_now)


@pytest.fixture
def strict_store(backend: MemoryBackend) -> TripDataStore:
    return TripDataStore(TokiConfig(strict_references=True), backend=backend, clock=fixed_now)
