"""Place model."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, model_validator

from pytoki import _geohash
from pytoki._constants import PLACE_GEOHASH_LENGTH
from pytoki.models._base import TokiBaseModel, TokiTimestamp, new_id, utcnow
from pytoki.models.card import Coordinates


class PlaceMeta(TokiBaseModel):
    address: str | None = None
    city: str | None = None
    hours: str | None = None
    phone: str | None = None
    website: str | None = None


class Place(TokiBaseModel):
    """A location shared by any number of cards.

    ``geohash5`` is derived from the coordinates when not supplied and is
    used to deduplicate places captured close to each other.
    """

    _BLANK_TO_NONE: ClassVar[frozenset[str]] = frozenset({"label", "provider_key"})

    id: str = Field(default_factory=new_id)
    label: str | None = None
    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)
    geohash5: str = ""
    provider_key: str | None = None
    categories: list[str] = Field(default_factory=list)
    meta: PlaceMeta | None = None
    created_at: TokiTimestamp = Field(default_factory=utcnow)
    updated_at: TokiTimestamp = Field(default_factory=utcnow)

    @model_validator(mode="before")
    @classmethod
    def _derive_geohash(cls, values: Any) -> Any:
        if not isinstance(values, dict) or values.get("geohash5"):
            return values
        lat = values.get("lat")
        lon = values.get("lon")
        if not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
            return values
        try:
            geohash = _geohash.encode(float(lat), float(lon), PLACE_GEOHASH_LENGTH)
        except ValueError:
            # Range errors are reported by the field constraints.
            return values
        return {**values, "geohash5": geohash}

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lon=self.lon)
