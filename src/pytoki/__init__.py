"""pytoki - On-device trip journal data store."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pytoki")
except PackageNotFoundError:
    __version__ = "0+local"
from pytoki.config import TokiConfig
from pytoki.exceptions import (
    ReferentialIntegrityError,
    TokiConfigError,
    TokiError,
    TokiMediaError,
    TokiNotFoundError,
    TokiPersistenceError,
)
from pytoki.media import MediaRepository
from pytoki.models import (
    Card,
    CardKind,
    Coordinates,
    DistanceUnit,
    Media,
    Place,
    Reservation,
    ReservationType,
    Trip,
    TripCompanion,
    TripExport,
    TripSettings,
)
from pytoki.seed import seed_if_needed
from pytoki.session import ActiveSession
from pytoki.state.events import ChangeKind, StoreChange, StoreSection, StoreSnapshot
from pytoki.storage import JsonFileBackend, MemoryBackend, PersistenceBackend
from pytoki.store import TripDataStore

__all__ = [
    "__version__",
    "ActiveSession",
    "Card",
    "CardKind",
    "ChangeKind",
    "Coordinates",
    "DistanceUnit",
    "JsonFileBackend",
    "Media",
    "MediaRepository",
    "MemoryBackend",
    "PersistenceBackend",
    "Place",
    "ReferentialIntegrityError",
    "Reservation",
    "ReservationType",
    "StoreChange",
    "StoreSection",
    "StoreSnapshot",
    "TokiConfig",
    "TokiConfigError",
    "TokiError",
    "TokiMediaError",
    "TokiNotFoundError",
    "TokiPersistenceError",
    "TripCompanion",
    "TripDataStore",
    "TripExport",
    "TripSettings",
    "seed_if_needed",
]
