"""Internal constants shared across the library."""

from pathlib import Path

DEFAULT_DATA_DIR = Path("~/.local/share/pytoki").expanduser()
MEDIA_DIR_NAME = "media"
USER_AGENT = "pytoki/1.0"

# ------------------------------------------------------------------
# Table names (one JSON document per table)
# ------------------------------------------------------------------

TRIPS_TABLE = "trips"
CARDS_TABLE = "cards"
RESERVATIONS_TABLE = "reservations"
PLACES_TABLE = "places"
MEDIA_TABLE = "media"

SESSION_KEY = "session"
ACTIVE_TRIP_FIELD = "activeTripId"

EXPORT_VERSION = 1

# Geohash length used to deduplicate places (cell is roughly 5 km x 5 km).
PLACE_GEOHASH_LENGTH = 5

AVAILABLE_TAGS: tuple[str, ...] = (
    "food",
    "beach",
    "walk",
    "view",
    "cafe",
    "market",
    "sunset",
    "hidden",
    "quiet",
    "lunch",
    "dinner",
    "breakfast",
)

# ------------------------------------------------------------------
# Media file extensions
# ------------------------------------------------------------------

_MIME_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/heic": "heic",
    "audio/m4a": "m4a",
    "audio/webm": "webm",
}


def mime_extension(mime: str) -> str:
    """Return the on-disk file extension for *mime* (``bin`` when unknown)."""
    return _MIME_EXTENSIONS.get(mime.strip().lower(), "bin")


def media_filename(media_id: str, mime: str) -> str:
    return f"{media_id}.{mime_extension(mime)}"
