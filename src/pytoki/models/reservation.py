"""Reservation model."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field, field_validator

from pytoki.models._base import OptionalTimestamp, TokiBaseModel, TokiEnum, new_id


class ReservationType(TokiEnum):
    """Booking category. Values without a mapped member resolve to ``OTHER``."""

    FLIGHT = "flight"
    HOTEL = "hotel"
    RESTAURANT = "restaurant"
    ACTIVITY = "activity"
    CAR = "car"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value: object) -> ReservationType:
        member = super()._missing_(value)
        if member is not None:
            return member  # type: ignore[return-value]
        return cls.OTHER


class Reservation(TokiBaseModel):
    """A booking record owned by exactly one trip.

    Parameters
    ----------
    id : str
        Unique identifier.
    trip_id : str
        Owning trip; reservations are deleted with it.
    type : ReservationType
        Booking category.
    confirmation_number : str
        Provider confirmation code; required.
    provider : str or None
        e.g. ``"United Airlines"`` or ``"Marriott"``.
    date : datetime or None
        Check-in / departure date.
    notes : str or None
        Free text.
    """

    _BLANK_TO_NONE: ClassVar[frozenset[str]] = frozenset({"provider", "notes"})

    id: str = Field(default_factory=new_id)
    trip_id: str
    type: ReservationType = ReservationType.OTHER
    confirmation_number: str
    provider: str | None = None
    date: OptionalTimestamp = None
    notes: str | None = None

    @field_validator("confirmation_number")
    @classmethod
    def _require_confirmation(cls, value: str) -> str:
        number = value.strip()
        if not number:
            raise ValueError("confirmation_number must be non-empty")
        return number
