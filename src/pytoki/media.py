"""Media repository: binary assets by opaque identifier.

Metadata lives in the ``media`` table, payloads in the backend's blob
store. Payloads are lazy-loaded into an in-memory cache on first use.
Missing or unreadable media is never an error for readers: every load
path returns ``None`` instead.
"""

from __future__ import annotations

import asyncio
import io
import logging
import threading
from collections import OrderedDict
from typing import Any

import aiohttp
from PIL import Image

from pytoki._constants import MEDIA_TABLE, USER_AGENT
from pytoki.exceptions import TokiMediaError, TokiPersistenceError
from pytoki.models.media import Media, MediaExif
from pytoki.state.tables import EntityTable
from pytoki.storage import PersistenceBackend

_logger = logging.getLogger(__name__)

_DEFAULT_REMOTE_MIME = "image/jpeg"


def decode_image(data: bytes | None) -> Image.Image | None:
    """Decode *data* with Pillow, returning ``None`` when it is not an image."""
    if not data:
        return None
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, ValueError, Image.DecompressionBombError):
        _logger.debug("Could not decode %d byte(s) as an image", len(data), exc_info=True)
        return None
    return image


def probe_dimensions(data: bytes) -> tuple[int, int] | None:
    """Return ``(width, height)`` without decoding the full image."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.size
    except (OSError, ValueError, Image.DecompressionBombError):
        return None


class MediaRepository:
    """Stores media payloads and serves them through a memory cache.

    Parameters
    ----------
    backend
        Persistence backend holding the ``media`` table and blobs.
    max_cache_entries
        Maximum number of payloads kept in memory, least recently used
        evicted first. ``0`` disables the cap.
    """

    def __init__(self, backend: PersistenceBackend, *, max_cache_entries: int = 0) -> None:
        self._backend = backend
        self._max_cache_entries = max_cache_entries
        self._lock = threading.RLock()
        self._table: EntityTable[Media] = EntityTable(MEDIA_TABLE, Media)
        self._cache: OrderedDict[str, bytes] = OrderedDict()
        self.last_persist_error: TokiPersistenceError | None = None

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def load_index(self) -> int:
        """(Re)load media metadata from the backend and drop the cache."""
        with self._lock:
            self._cache.clear()
            return self._table.load_records(self._backend.load(MEDIA_TABLE))

    @property
    def media(self) -> tuple[Media, ...]:
        with self._lock:
            return self._table.snapshot()

    def get(self, media_id: str | None) -> Media | None:
        with self._lock:
            return self._table.get(media_id)

    def contains(self, media_id: str | None) -> bool:
        with self._lock:
            return media_id is not None and media_id in self._table

    def register(self, media: Media) -> bool:
        """Add metadata for media whose bytes arrive separately (imports).

        Returns ``False`` when the id is already known.
        """
        with self._lock:
            if media.id in self._table:
                return False
            self._table.insert(media)
            self._persist_index()
            return True

    def _persist_index(self) -> None:
        try:
            self._backend.save({MEDIA_TABLE: self._table.to_records()})
        except TokiPersistenceError as exc:
            _logger.warning("Media index write failed: %s", exc)
            self.last_persist_error = exc
        else:
            self.last_persist_error = None

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    @property
    def cache_size(self) -> int:
        with self._lock:
            return len(self._cache)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def _cache_get(self, media_id: str) -> bytes | None:
        data = self._cache.get(media_id)
        if data is not None:
            self._cache.move_to_end(media_id)
        return data

    def _cache_put(self, media_id: str, data: bytes) -> None:
        self._cache[media_id] = data
        self._cache.move_to_end(media_id)
        if self._max_cache_entries > 0:
            while len(self._cache) > self._max_cache_entries:
                evicted, _ = self._cache.popitem(last=False)
                _logger.debug("Evicted media %s from cache", evicted)

    # ------------------------------------------------------------------
    # Store / load
    # ------------------------------------------------------------------

    def store(
        self,
        payload: bytes,
        mime: str,
        *,
        width: int | None = None,
        height: int | None = None,
        exif: MediaExif | None = None,
    ) -> Media:
        """Persist *payload* under a freshly generated id.

        Raises :class:`TokiPersistenceError` when the blob cannot be
        written; nothing is registered in that case.
        """
        if not payload:
            raise ValueError("media payload must be non-empty")
        media = Media(mime=mime, width=width, height=height, exif=exif)
        if media.is_image and (width is None or height is None):
            size = probe_dimensions(payload)
            if size is not None:
                media = media.model_copy(update={"width": size[0], "height": size[1]})

        with self._lock:
            self._backend.write_blob(media.filename, bytes(payload))
            self._table.insert(media)
            self._cache_put(media.id, bytes(payload))
            self._persist_index()
        _logger.debug("Stored media %s (%s, %d bytes)", media.id, media.mime, len(payload))
        return media

    def _read_blob(self, media: Media) -> bytes | None:
        try:
            return self._backend.read_blob(media.filename)
        except (OSError, TokiPersistenceError):
            _logger.debug("Media %s unreadable from storage", media.id, exc_info=True)
            return None

    def load(self, media_id: str | None) -> bytes | None:
        """Payload for *media_id*, or ``None`` when unknown or unreadable."""
        if media_id is None:
            return None
        with self._lock:
            cached = self._cache_get(media_id)
            if cached is not None:
                return cached
            media = self._table.get(media_id)
            if media is None:
                return None
            data = self._read_blob(media)
            if data is not None:
                self._cache_put(media_id, data)
            return data

    async def async_load(self, media_id: str | None) -> bytes | None:
        """Like :meth:`load`, with the disk read done in a worker thread.

        The cache is only touched under the repository lock once the read
        has completed; two concurrent loads of the same id may both read
        from disk, and the last one to finish wins.
        """
        if media_id is None:
            return None
        with self._lock:
            cached = self._cache_get(media_id)
            if cached is not None:
                return cached
            media = self._table.get(media_id)
        if media is None:
            return None

        data = await asyncio.to_thread(self._read_blob, media)
        if data is None:
            return None
        with self._lock:
            if media_id in self._table:
                self._cache_put(media_id, data)
        return data

    def load_image(self, media_id: str | None) -> Image.Image | None:
        return decode_image(self.load(media_id))

    async def async_load_image(self, media_id: str | None) -> Image.Image | None:
        data = await self.async_load(media_id)
        if data is None:
            return None
        return await asyncio.to_thread(decode_image, data)

    def delete(self, media_id: str) -> bool:
        """Remove metadata, cached payload and blob. Returns ``False`` if unknown."""
        with self._lock:
            media = self._table.remove(media_id)
            self._cache.pop(media_id, None)
            if media is None:
                return False
            try:
                self._backend.delete_blob(media.filename)
            except TokiPersistenceError as exc:
                _logger.warning("Could not delete blob for media %s: %s", media_id, exc)
            self._persist_index()
        return True

    # ------------------------------------------------------------------
    # Remote
    # ------------------------------------------------------------------

    async def async_fetch_remote(
        self,
        url: str,
        *,
        mime: str | None = None,
        session: aiohttp.ClientSession | None = None,
        timeout: float = 30.0,
    ) -> Media:
        """Download *url* and store it as new media.

        Parameters
        ----------
        url
            Absolute http(s) URL of the asset.
        mime
            Mime type to record. Defaults to the response ``Content-Type``.
        session
            Optional shared :class:`aiohttp.ClientSession`; a private one
            is created and closed otherwise.
        timeout
            Total request timeout in seconds.
        """
        owns_session = session is None
        http = session or aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout))
        headers = {"user-agent": USER_AGENT}

        _logger.debug("GET %s", url)
        try:
            async with http.get(url, headers=headers) as resp:
                if resp.status != 200:
                    raise TokiMediaError(
                        f"HTTP {resp.status} fetching media",
                        status_code=resp.status,
                        url=url,
                    )
                body = await resp.read()
                content_type: Any = resp.content_type
        except TokiMediaError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise TokiMediaError(f"Media download failed: {exc}", url=url) from exc
        finally:
            if owns_session:
                await http.close()

        if not body:
            raise TokiMediaError("Empty media body", url=url)

        resolved_mime = mime or (content_type if isinstance(content_type, str) and "/" in content_type else None)
        if resolved_mime is None or resolved_mime == "application/octet-stream":
            resolved_mime = _DEFAULT_REMOTE_MIME
        return await asyncio.to_thread(self.store, body, resolved_mime)
