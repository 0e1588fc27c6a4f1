"""Change notifications published by the store.

Every committed mutation produces exactly one :class:`StoreChange`,
carrying a fully committed :class:`StoreSnapshot`. Views subscribe to
these instead of polling the store.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pytoki.models.card import Card
from pytoki.models.place import Place
from pytoki.models.reservation import Reservation
from pytoki.models.trip import Trip


class StoreSection(StrEnum):
    TRIPS = "trips"
    CARDS = "cards"
    RESERVATIONS = "reservations"
    PLACES = "places"
    MEDIA = "media"
    SESSION = "session"


class ChangeKind(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    IMPORTED = "imported"
    ACTIVATED = "activated"
    RELOADED = "reloaded"


class StoreSnapshot(BaseModel):
    """Immutable view of the committed store state."""

    model_config = ConfigDict(frozen=True)

    trips: tuple[Trip, ...] = ()
    cards: tuple[Card, ...] = ()
    reservations: tuple[Reservation, ...] = ()
    places: tuple[Place, ...] = ()
    active_trip_id: str | None = None


class StoreChange(BaseModel):
    """A committed mutation."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    sections: frozenset[StoreSection]
    entity_ids: tuple[str, ...] = ()
    snapshot: StoreSnapshot
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def touches(self, section: StoreSection) -> bool:
        return section in self.sections
