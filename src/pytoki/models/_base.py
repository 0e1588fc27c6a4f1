"""Base model and enum for persisted store entities.

Every entity inherits from :class:`TokiBaseModel` which provides:

* ``frozen=True`` so snapshots handed to views cannot be mutated;
  edits go through ``model_copy(update=...)`` and back into the store.
* ``alias_generator=to_camel`` so the persisted JSON keeps the
  camelCase keys the mobile app has always written.
* A ``model_validator(mode="before")`` that turns blank strings in
  optional text fields into ``None``.

String enums inherit from :class:`TokiEnum` which matches values
case-insensitively.
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def new_id() -> str:
    """Fresh opaque entity identifier."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_timestamp(value: Any) -> datetime | None:
    """Coerce a timestamp to a timezone-aware UTC datetime.

    Accepts datetimes (naive ones are assumed UTC), ISO-8601 strings and
    epoch numbers in seconds **or** milliseconds. Returns ``None`` for
    ``None`` and blank strings.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return parse_timestamp(datetime.fromisoformat(text))
    if isinstance(value, bool):
        raise ValueError("boolean is not a timestamp")
    if isinstance(value, (int, float)):
        ts = float(value)
        if ts >= _MS_THRESHOLD:
            ts /= 1000.0
        return datetime.fromtimestamp(ts, tz=UTC)
    raise ValueError(f"unsupported timestamp value: {value!r}")


TokiTimestamp = Annotated[datetime, BeforeValidator(parse_timestamp)]
"""Required timestamp, normalised to UTC."""

OptionalTimestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
"""Optional timestamp, normalised to UTC."""


class TokiEnum(enum.StrEnum):
    """Base for persisted string enums.

    Lookup is case-insensitive and ignores surrounding whitespace, so
    ``ReservationType(" Hotel ")`` resolves to ``ReservationType.HOTEL``.
    """

    @classmethod
    def _missing_(cls, value: object) -> TokiEnum | None:
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class TokiBaseModel(BaseModel):
    """Base for store entities."""

    _BLANK_TO_NONE: ClassVar[frozenset[str]] = frozenset()
    """Field names (snake_case) whose blank string values become ``None``."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _blank_optional_text(cls, values: Any) -> Any:
        blank_fields: frozenset[str] = getattr(cls, "_BLANK_TO_NONE", frozenset())
        if not isinstance(values, dict) or not blank_fields:
            return values
        cleaned = dict(values)
        for field_name in blank_fields:
            for key in (field_name, to_camel(field_name)):
                value = cleaned.get(key)
                if isinstance(value, str) and not value.strip():
                    cleaned[key] = None
        return cleaned

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys, as written to disk."""
        return self.model_dump(mode="json", by_alias=True)
