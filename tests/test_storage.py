from __future__ import annotations

from pathlib import Path

import pytest

from pytoki.exceptions import TokiPersistenceError
from pytoki.storage import JsonFileBackend, MemoryBackend


def test_missing_table_loads_empty(tmp_path: Path) -> None:
    backend = JsonFileBackend(tmp_path / "store")
    assert backend.load("trips") == []
    assert backend.load_value("session") is None


def test_save_and_load_table(tmp_path: Path) -> None:
    backend = JsonFileBackend(tmp_path)
    backend.save({"trips": [{"id": "t1", "name": "Paris Trip"}], "cards": []})

    assert backend.load("trips") == [{"id": "t1", "name": "Paris Trip"}]
    assert backend.load("cards") == []
    assert not list(tmp_path.glob("*.tmp"))


def test_corrupt_table_loads_empty(tmp_path: Path) -> None:
    (tmp_path / "trips.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "cards.json").write_text('{"id": "c1"}', encoding="utf-8")

    backend = JsonFileBackend(tmp_path)
    assert backend.load("trips") == []
    assert backend.load("cards") == []


def test_save_value_none_removes_file(tmp_path: Path) -> None:
    backend = JsonFileBackend(tmp_path)
    backend.save_value("session", {"activeTripId": "t1"})
    assert backend.load_value("session") == {"activeTripId": "t1"}

    backend.save_value("session", None)
    assert not (tmp_path / "session.json").exists()


def test_unwritable_root_raises_persistence_error(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    backend = JsonFileBackend(blocker / "store")

    with pytest.raises(TokiPersistenceError) as exc_info:
        backend.save({"trips": []})
    assert exc_info.value.table == "trips"


def test_blobs_are_never_overwritten(tmp_path: Path) -> None:
    backend = JsonFileBackend(tmp_path)
    backend.write_blob("m1.jpg", b"first")

    with pytest.raises(TokiPersistenceError):
        backend.write_blob("m1.jpg", b"second")
    assert backend.read_blob("m1.jpg") == b"first"
    assert (backend.media_dir / "m1.jpg").exists()

    assert backend.delete_blob("m1.jpg") is True
    assert backend.delete_blob("m1.jpg") is False
    with pytest.raises(FileNotFoundError):
        backend.read_blob("m1.jpg")


@pytest.mark.parametrize("name", ["", "..", "../escape", "a\\b"])
def test_rejects_path_like_names(tmp_path: Path, name: str) -> None:
    backend = JsonFileBackend(tmp_path)
    with pytest.raises(ValueError):
        backend.write_blob(name, b"x")


def test_memory_backend_copies_records() -> None:
    backend = MemoryBackend()
    records = [{"id": "t1"}]
    backend.save({"trips": records})
    records[0]["id"] = "mutated"

    loaded = backend.load("trips")
    loaded[0]["id"] = "also mutated"
    assert backend.load("trips") == [{"id": "t1"}]

    backend.write_blob("m1.png", b"x")
    with pytest.raises(TokiPersistenceError):
        backend.write_blob("m1.png", b"y")
