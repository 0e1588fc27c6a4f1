"""Media metadata model.

The binary payload itself lives in the blob store; this record holds
what is needed to locate and describe it.
"""

from __future__ import annotations

from pydantic import Field, field_validator

from pytoki._constants import media_filename
from pytoki.models._base import OptionalTimestamp, TokiBaseModel, TokiTimestamp, new_id, utcnow


class MediaExif(TokiBaseModel):
    lat: float | None = None
    lon: float | None = None
    timestamp: OptionalTimestamp = None
    camera: str | None = None
    iso: int | None = None
    aperture: str | None = None
    shutter_speed: str | None = None


class Media(TokiBaseModel):
    id: str = Field(default_factory=new_id)
    mime: str
    width: int | None = None
    height: int | None = None
    exif: MediaExif | None = None
    created_at: TokiTimestamp = Field(default_factory=utcnow)

    @field_validator("mime")
    @classmethod
    def _normalize_mime(cls, value: str) -> str:
        mime = value.strip().lower()
        if not mime:
            raise ValueError("mime must be non-empty")
        return mime

    @property
    def filename(self) -> str:
        """Blob file name, ``<id>.<ext>``."""
        return media_filename(self.id, self.mime)

    @property
    def is_image(self) -> bool:
        return self.mime.startswith("image/")
