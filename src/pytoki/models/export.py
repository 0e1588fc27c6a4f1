"""Portable single-trip export bundle."""

from __future__ import annotations

from pydantic import Field

from pytoki._constants import EXPORT_VERSION
from pytoki.models._base import TokiBaseModel
from pytoki.models.card import Card
from pytoki.models.media import Media
from pytoki.models.place import Place
from pytoki.models.reservation import Reservation
from pytoki.models.trip import Trip


class MediaIndexEntry(TokiBaseModel):
    media_id: str
    filename: str


class TripExport(TokiBaseModel):
    """Everything needed to recreate one trip on another device.

    Media payloads are not embedded; ``media_index`` maps each media id
    to the file name its bytes travel under.
    """

    version: int = EXPORT_VERSION
    trip: Trip
    reservations: list[Reservation] = Field(default_factory=list)
    places: list[Place] = Field(default_factory=list)
    cards: list[Card] = Field(default_factory=list)
    media: list[Media] = Field(default_factory=list)
    media_index: list[MediaIndexEntry] = Field(default_factory=list)
