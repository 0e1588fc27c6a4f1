"""Data models for store entities."""

from pytoki.models._base import TokiBaseModel, TokiEnum, TokiTimestamp, new_id, parse_timestamp
from pytoki.models.card import Card, CardKind, Coordinates, normalize_tags
from pytoki.models.export import MediaIndexEntry, TripExport
from pytoki.models.media import Media, MediaExif
from pytoki.models.place import Place, PlaceMeta
from pytoki.models.reservation import Reservation, ReservationType
from pytoki.models.trip import DistanceUnit, Trip, TripCompanion, TripSettings

__all__ = [
    "Card",
    "CardKind",
    "Coordinates",
    "DistanceUnit",
    "Media",
    "MediaExif",
    "MediaIndexEntry",
    "Place",
    "PlaceMeta",
    "Reservation",
    "ReservationType",
    "TokiBaseModel",
    "TokiEnum",
    "TokiTimestamp",
    "Trip",
    "TripCompanion",
    "TripExport",
    "TripSettings",
    "new_id",
    "normalize_tags",
    "parse_timestamp",
]
