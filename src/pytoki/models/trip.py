"""Trip model and its embedded settings/companions."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field, field_validator

from pytoki.models._base import OptionalTimestamp, TokiBaseModel, TokiEnum, TokiTimestamp, new_id, utcnow


class DistanceUnit(TokiEnum):
    KM = "km"
    MI = "mi"


class TripSettings(TokiBaseModel):
    """Per-trip display and suggestion toggles."""

    distance_units: DistanceUnit = DistanceUnit.KM
    auto_reverse_geocode: bool = True
    enable_suggestions: bool = True
    hide_precise_location: bool = False


class TripCompanion(TokiBaseModel):
    """Someone travelling along on a trip."""

    _BLANK_TO_NONE: ClassVar[frozenset[str]] = frozenset({"email", "phone"})

    id: str = Field(default_factory=new_id)
    name: str
    email: str | None = None
    phone: str | None = None


class Trip(TokiBaseModel):
    """A user-defined travel itinerary.

    Parameters
    ----------
    id : str
        Unique, immutable identifier.
    name : str
        Display name; never blank.
    start_date, end_date : datetime or None
        Optional trip boundaries (UTC).
    cover_photo_id : str or None
        Media id of the cover image. A dangling id is treated as "no cover".
    settings : TripSettings
        Distance units and geocoding/suggestion toggles.
    companions : list of TripCompanion
        People travelling along.
    created_at, updated_at : datetime
        Bookkeeping timestamps maintained by the store.

    Cards and reservations are not stored inline; query them from the
    store with ``get_cards_for_trip`` / ``get_reservations_for_trip``.
    """

    _BLANK_TO_NONE: ClassVar[frozenset[str]] = frozenset({"cover_photo_id"})

    id: str = Field(default_factory=new_id)
    name: str
    start_date: OptionalTimestamp = None
    end_date: OptionalTimestamp = None
    cover_photo_id: str | None = None
    settings: TripSettings = Field(default_factory=TripSettings)
    companions: list[TripCompanion] = Field(default_factory=list)
    created_at: TokiTimestamp = Field(default_factory=utcnow)
    updated_at: TokiTimestamp = Field(default_factory=utcnow)

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("trip name must be non-empty")
        return name

    @property
    def is_open_ended(self) -> bool:
        """Whether the trip has no end date yet."""
        return self.end_date is None
