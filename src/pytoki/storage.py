"""Durable persistence backends for the store.

The store loads every table once at startup and writes through on each
committed mutation. Tables are lists of JSON records; media payloads are
opaque blobs addressed by file name.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from pytoki._constants import MEDIA_DIR_NAME
from pytoki.exceptions import TokiPersistenceError

_logger = logging.getLogger(__name__)


class PersistenceBackend(Protocol):
    """Structural persistence interface used by the store and media repository.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`JsonFileBackend`) concrete.
    """

    def load(self, table: str) -> list[dict[str, Any]]:
        ...

    def save(self, tables: Mapping[str, list[dict[str, Any]]]) -> None:
        ...

    def load_value(self, key: str) -> Any:
        ...

    def save_value(self, key: str, value: Any) -> None:
        ...

    def read_blob(self, name: str) -> bytes:
        ...

    def write_blob(self, name: str, data: bytes) -> None:
        ...

    def delete_blob(self, name: str) -> bool:
        ...


def _check_name(name: str) -> str:
    if not name or name in {".", ".."} or "/" in name or "\\" in name:
        raise ValueError(f"invalid storage name: {name!r}")
    return name


class JsonFileBackend:
    """One JSON document per table plus a blob directory.

    Layout under *root*::

        trips.json  cards.json  reservations.json  places.json  media.json
        session.json
        media/<id>.<ext>

    Documents are written to a temporary file in the same directory and
    moved into place with :func:`os.replace`, so a crash never leaves a
    half-written table behind.
    """

    def __init__(self, root: Path | str, *, media_dir_name: str = MEDIA_DIR_NAME) -> None:
        self._root = Path(root)
        self._media_dir = self._root / _check_name(media_dir_name)

    @property
    def media_dir(self) -> Path:
        return self._media_dir

    def _path(self, name: str) -> Path:
        return self._root / f"{_check_name(name)}.json"

    def _read_json(self, path: Path) -> Any:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            _logger.warning("Could not read %s", path, exc_info=True)
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            _logger.warning("Corrupt JSON in %s; treating as empty", path)
            return None

    def _write_json(self, path: Path, value: Any, *, table: str) -> None:
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=self._root)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(value, fh, ensure_ascii=False, separators=(",", ":"))
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise TokiPersistenceError(f"Failed to write {path.name}: {exc}", table=table) from exc

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def load(self, table: str) -> list[dict[str, Any]]:
        value = self._read_json(self._path(table))
        if value is None:
            return []
        if not isinstance(value, list):
            _logger.warning("Expected a JSON list in %s.json, got %s", table, type(value).__name__)
            return []
        return [record for record in value if isinstance(record, dict)]

    def save(self, tables: Mapping[str, list[dict[str, Any]]]) -> None:
        for table, records in tables.items():
            self._write_json(self._path(table), records, table=table)
            _logger.debug("Wrote %d %s record(s)", len(records), table)

    def load_value(self, key: str) -> Any:
        return self._read_json(self._path(key))

    def save_value(self, key: str, value: Any) -> None:
        if value is None:
            try:
                self._path(key).unlink(missing_ok=True)
            except OSError as exc:
                raise TokiPersistenceError(f"Failed to remove {key}.json: {exc}", table=key) from exc
            return
        self._write_json(self._path(key), value, table=key)

    # ------------------------------------------------------------------
    # Blobs
    # ------------------------------------------------------------------

    def read_blob(self, name: str) -> bytes:
        return (self._media_dir / _check_name(name)).read_bytes()

    def write_blob(self, name: str, data: bytes) -> None:
        """Write a new blob. Never overwrites an existing one."""
        path = self._media_dir / _check_name(name)
        try:
            self._media_dir.mkdir(parents=True, exist_ok=True)
            with path.open("xb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
        except FileExistsError as exc:
            raise TokiPersistenceError(f"Blob {name} already exists", table=MEDIA_DIR_NAME) from exc
        except OSError as exc:
            raise TokiPersistenceError(f"Failed to write blob {name}: {exc}", table=MEDIA_DIR_NAME) from exc

    def delete_blob(self, name: str) -> bool:
        path = self._media_dir / _check_name(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise TokiPersistenceError(f"Failed to delete blob {name}: {exc}", table=MEDIA_DIR_NAME) from exc
        return True


class MemoryBackend:
    """Dict-backed backend for tests and throwaway stores.

    Two stores constructed over the same instance see each other's
    committed writes, which is how tests simulate a process restart.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tables: dict[str, list[dict[str, Any]]] = {}
        self._values: dict[str, Any] = {}
        self._blobs: dict[str, bytes] = {}

    def load(self, table: str) -> list[dict[str, Any]]:
        with self._lock:
            return copy.deepcopy(self._tables.get(table, []))

    def save(self, tables: Mapping[str, list[dict[str, Any]]]) -> None:
        with self._lock:
            for table, records in tables.items():
                self._tables[table] = copy.deepcopy(records)

    def load_value(self, key: str) -> Any:
        with self._lock:
            return copy.deepcopy(self._values.get(key))

    def save_value(self, key: str, value: Any) -> None:
        with self._lock:
            if value is None:
                self._values.pop(key, None)
            else:
                self._values[key] = copy.deepcopy(value)

    def read_blob(self, name: str) -> bytes:
        with self._lock:
            try:
                return self._blobs[name]
            except KeyError:
                raise FileNotFoundError(name) from None

    def write_blob(self, name: str, data: bytes) -> None:
        with self._lock:
            if name in self._blobs:
                raise TokiPersistenceError(f"Blob {name} already exists", table=MEDIA_DIR_NAME)
            self._blobs[_check_name(name)] = bytes(data)

    def delete_blob(self, name: str) -> bool:
        with self._lock:
            return self._blobs.pop(name, None) is not None
