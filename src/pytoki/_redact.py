"""Helpers for safe debug logging.

Trips carry personal data (companion contact details, booking
confirmation numbers, free-text notes) and cards can embed raw media
bytes or the exact spot a photo was taken. This module masks those
fields before entities reach DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

# Field names are compared with underscores removed and lowercased, so
# ``confirmation_number`` and ``confirmationNumber`` match the same entry.
_MASKED_FIELDS: frozenset[str] = frozenset({"email", "phone", "confirmationnumber", "notes", "exif"})

# Coordinates are coarsened to roughly 1 km instead of dropped.
_COORDINATE_FIELDS: frozenset[str] = frozenset({"lat", "lon"})
_COORDINATE_PRECISION = 2

_MAX_DEPTH = 20


def _field_key(key: Any) -> str:
    return str(key).replace("_", "").lower()


def _redact_field(key: str, value: Any, max_string: int, depth: int) -> Any:
    field = _field_key(key)
    if value is None:
        return None
    if field in _MASKED_FIELDS:
        return "<redacted>"
    if field in _COORDINATE_FIELDS and isinstance(value, (int, float)) and not isinstance(value, bool):
        return round(float(value), _COORDINATE_PRECISION)
    return redact_for_log(value, max_string=max_string, _depth=depth + 1)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs.

    Store entities are dumped to JSON-ready dicts first. Raw media bytes
    are summarized by size and long text (card bodies) is truncated.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"

    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True)

    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, Mapping):
        return {str(k): _redact_field(str(k), v, max_string, _depth) for k, v in value.items()}
    if isinstance(value, Sequence):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return repr(value)
