"""Card model: a single journaled entry attached to a trip."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, field_validator

from pytoki.models._base import TokiBaseModel, TokiEnum, TokiTimestamp, new_id, utcnow


class CardKind(TokiEnum):
    PHOTO = "photo"
    NOTE = "note"
    AUDIO = "audio"


class Coordinates(TokiBaseModel):
    lat: float
    lon: float


def normalize_tags(tags: Any) -> list[str]:
    """Strip, lowercase and de-duplicate tags, keeping first-seen order."""
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = [tags]
    seen: dict[str, None] = {}
    for tag in tags:
        text = str(tag).strip().lower()
        if text:
            seen.setdefault(text, None)
    return list(seen)


class Card(TokiBaseModel):
    """A photo, note or audio entry.

    ``trip_id`` is required and never changes after creation; the store
    rejects cards for unknown trips. ``place_label_at_save`` and
    ``coords_at_save`` are denormalized copies of the place at capture
    time so exports stay readable if the place is edited later.
    """

    _BLANK_TO_NONE: ClassVar[frozenset[str]] = frozenset({"text", "media_id", "place_id", "place_label_at_save"})

    id: str = Field(default_factory=new_id)
    trip_id: str
    place_id: str | None = None
    kind: CardKind
    taken_at: TokiTimestamp = Field(default_factory=utcnow)
    tags: list[str] = Field(default_factory=list)
    text: str | None = None
    media_id: str | None = None
    place_label_at_save: str | None = None
    coords_at_save: Coordinates | None = None
    created_at: TokiTimestamp = Field(default_factory=utcnow)
    updated_at: TokiTimestamp = Field(default_factory=utcnow)

    @field_validator("trip_id")
    @classmethod
    def _require_trip_id(cls, value: str) -> str:
        trip_id = value.strip()
        if not trip_id:
            raise ValueError("card trip_id must be non-empty")
        return trip_id

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> list[str]:
        return normalize_tags(value)

    def has_tag(self, tag: str) -> bool:
        return tag.strip().lower() in self.tags
