"""Active session state: which trip the UI is currently working in."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from pytoki._constants import ACTIVE_TRIP_FIELD
from pytoki.models._base import OptionalTimestamp, utcnow


class ActiveSession(BaseModel):
    """Immutable pointer to the active trip.

    The store replaces the whole object on every change. The pointer is
    persisted as a convenience, but on load it is validated against the
    trip table and dropped if the trip no longer exists.

    Parameters
    ----------
    trip_id : str or None
        Active trip id, ``None`` when nothing is selected.
    selected_at : datetime or None
        When the trip was selected.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    trip_id: str | None = None
    selected_at: OptionalTimestamp = None

    @classmethod
    def select(cls, trip_id: str, *, at: datetime | None = None) -> ActiveSession:
        return cls(trip_id=trip_id, selected_at=at or utcnow())

    @classmethod
    def from_record(cls, record: Any) -> ActiveSession:
        """Build from the persisted ``{"activeTripId": ...}`` value; tolerant of junk."""
        if not isinstance(record, dict):
            return cls()
        trip_id = record.get(ACTIVE_TRIP_FIELD)
        if not isinstance(trip_id, str) or not trip_id.strip():
            return cls()
        try:
            return cls(trip_id=trip_id, selected_at=record.get("selectedAt"))
        except ValidationError:
            return cls(trip_id=trip_id)

    def to_record(self) -> dict[str, Any] | None:
        if self.trip_id is None:
            return None
        return {
            ACTIVE_TRIP_FIELD: self.trip_id,
            "selectedAt": self.selected_at.isoformat() if self.selected_at else None,
        }

    @property
    def is_set(self) -> bool:
        return self.trip_id is not None

    def is_active(self, trip_id: str) -> bool:
        return self.trip_id == trip_id

    @property
    def age(self) -> float | None:
        """Seconds since the trip was selected."""
        if self.selected_at is None:
            return None
        return (utcnow() - self.selected_at).total_seconds()
