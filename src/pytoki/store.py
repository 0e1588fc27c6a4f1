"""Trip data store: the single coordinator for trips, cards, reservations,
places and media.

Usage::

    store = TripDataStore.open(TokiConfig.from_env())
    unsubscribe = store.subscribe(on_change)
    trip = store.create_trip("Paris Trip", start_date=datetime.now(UTC))
    store.create_card(trip.id, CardKind.PHOTO, tags=["eiffel"])
"""

from __future__ import annotations

import contextlib
import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from datetime import UTC, datetime
from typing import Any, TypeVar

import aiohttp
from PIL import Image
from pydantic import BaseModel

from pytoki import _geohash
from pytoki._constants import (
    CARDS_TABLE,
    PLACE_GEOHASH_LENGTH,
    PLACES_TABLE,
    RESERVATIONS_TABLE,
    SESSION_KEY,
    TRIPS_TABLE,
    media_filename,
)
from pytoki._redact import redact_for_log
from pytoki.config import TokiConfig
from pytoki.exceptions import ReferentialIntegrityError, TokiNotFoundError, TokiPersistenceError
from pytoki.media import MediaRepository
from pytoki.models._base import new_id
from pytoki.models.card import Card, CardKind, Coordinates
from pytoki.models.export import MediaIndexEntry, TripExport
from pytoki.models.media import Media, MediaExif
from pytoki.models.place import Place
from pytoki.models.reservation import Reservation, ReservationType
from pytoki.models.trip import Trip, TripCompanion, TripSettings
from pytoki.session import ActiveSession
from pytoki.state.events import ChangeKind, StoreChange, StoreSection, StoreSnapshot
from pytoki.state.tables import EntityTable
from pytoki.storage import JsonFileBackend, PersistenceBackend

_logger = logging.getLogger(__name__)

StoreListener = Callable[[StoreChange], None]

# Write order: owners before the rows that reference them, so a crash
# between two table writes only ever leaves orphans, which load repairs.
_SECTION_TABLES: dict[StoreSection, str] = {
    StoreSection.TRIPS: TRIPS_TABLE,
    StoreSection.PLACES: PLACES_TABLE,
    StoreSection.CARDS: CARDS_TABLE,
    StoreSection.RESERVATIONS: RESERVATIONS_TABLE,
}

# Undated reservations sort after every dated one.
_FAR_FUTURE = datetime.max.replace(tzinfo=UTC)


def _utcnow() -> datetime:
    return datetime.now(UTC)


M = TypeVar("M", bound=BaseModel)


def _revalidated(model: M, **overrides: Any) -> M:
    """Run validation again on a caller-edited copy; ``model_copy`` skips it."""
    return type(model).model_validate({**model.model_dump(), **overrides})


class TripDataStore:
    """In-process cache-of-record for the trip journal.

    All mutations are serialized through one re-entrant lock. Each
    committed mutation writes the affected tables through to the backend
    and then publishes exactly one :class:`StoreChange` to subscribers.
    Reads return snapshots of committed state.

    One instance is meant to live for the whole process, owned by the
    application and handed to every view that needs it.
    """

    def __init__(
        self,
        config: TokiConfig | None = None,
        *,
        backend: PersistenceBackend | None = None,
        media: MediaRepository | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config or TokiConfig()
        self._backend: PersistenceBackend = backend or JsonFileBackend(
            self._config.data_dir,
            media_dir_name=self._config.media_dir_name,
        )
        self._media = media or MediaRepository(
            self._backend,
            max_cache_entries=self._config.max_media_cache_entries,
        )
        self._clock = clock
        self._lock = threading.RLock()
        self._trips: EntityTable[Trip] = EntityTable(TRIPS_TABLE, Trip)
        self._cards: EntityTable[Card] = EntityTable(CARDS_TABLE, Card)
        self._reservations: EntityTable[Reservation] = EntityTable(RESERVATIONS_TABLE, Reservation)
        self._places: EntityTable[Place] = EntityTable(PLACES_TABLE, Place)
        self._session = ActiveSession()
        self._listeners: list[StoreListener] = []
        self._last_persist_error: TokiPersistenceError | None = None
        self._load_all()

    @classmethod
    def open(cls, config: TokiConfig | None = None, **kwargs: Any) -> TripDataStore:
        """Construct the store and run the demo seeder when configured."""
        store = cls(config or TokiConfig.from_env(), **kwargs)
        if store.config.seed_on_open:
            from pytoki.seed import seed_if_needed

            seed_if_needed(store)
        return store

    @property
    def config(self) -> TokiConfig:
        return self._config

    @property
    def media_repository(self) -> MediaRepository:
        return self._media

    @contextlib.contextmanager
    def serialized(self) -> Iterator[TripDataStore]:
        """Hold the store lock across several operations.

        Each operation inside still commits and publishes on its own;
        this only guarantees no other writer interleaves.
        """
        with self._lock:
            yield self

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_all(self) -> None:
        with self._lock:
            self._trips.load_records(self._backend.load(TRIPS_TABLE))
            self._cards.load_records(self._backend.load(CARDS_TABLE))
            self._reservations.load_records(self._backend.load(RESERVATIONS_TABLE))
            self._places.load_records(self._backend.load(PLACES_TABLE))
            self._media.load_index()
            self._session = ActiveSession.from_record(self._backend.load_value(SESSION_KEY))

            repaired = self._repair_integrity()
            if repaired:
                self._flush(repaired)
            _logger.debug(
                "Loaded %d trip(s), %d card(s), %d reservation(s), %d place(s)",
                len(self._trips),
                len(self._cards),
                len(self._reservations),
                len(self._places),
            )

    def _repair_integrity(self) -> set[StoreSection]:
        """Drop rows whose owning trip is gone (e.g. after a torn multi-table write)."""
        repaired: set[StoreSection] = set()

        orphan_cards = [card.id for card in self._cards if card.trip_id not in self._trips]
        if orphan_cards:
            _logger.warning("Dropping %d card(s) whose trip no longer exists", len(orphan_cards))
            self._cards.remove_many(orphan_cards)
            repaired.add(StoreSection.CARDS)

        orphan_reservations = [res.id for res in self._reservations if res.trip_id not in self._trips]
        if orphan_reservations:
            _logger.warning(
                "Dropping %d reservation(s) whose trip no longer exists",
                len(orphan_reservations),
            )
            self._reservations.remove_many(orphan_reservations)
            repaired.add(StoreSection.RESERVATIONS)

        if self._session.trip_id is not None and self._session.trip_id not in self._trips:
            _logger.warning("Active trip %s no longer exists; clearing session", self._session.trip_id)
            self._session = ActiveSession()
            repaired.add(StoreSection.SESSION)

        return repaired

    def reload(self) -> None:
        """Discard in-memory state and reload everything from the backend."""
        with self._lock:
            self._load_all()
            self._publish(ChangeKind.RELOADED, set(StoreSection), ())

    # ------------------------------------------------------------------
    # Commit / publish
    # ------------------------------------------------------------------

    @property
    def last_persist_ok(self) -> bool:
        """``False`` when the most recent durable write failed (store or media index)."""
        return self._last_persist_error is None and self._media.last_persist_error is None

    @property
    def last_persist_error(self) -> TokiPersistenceError | None:
        return self._last_persist_error or self._media.last_persist_error

    def _flush(self, sections: Iterable[StoreSection]) -> None:
        sections = set(sections)
        tables = {
            table: self._table_for(section).to_records()
            for section, table in _SECTION_TABLES.items()
            if section in sections
        }
        try:
            if tables:
                self._backend.save(tables)
            if StoreSection.SESSION in sections:
                self._backend.save_value(SESSION_KEY, self._session.to_record())
        except TokiPersistenceError as exc:
            # In-memory state stays authoritative for this process.
            _logger.warning("Persisting %s failed: %s", sorted(s.value for s in sections), exc)
            self._last_persist_error = exc
        else:
            self._last_persist_error = None

    def _table_for(self, section: StoreSection) -> EntityTable[Any]:
        return {
            StoreSection.TRIPS: self._trips,
            StoreSection.CARDS: self._cards,
            StoreSection.RESERVATIONS: self._reservations,
            StoreSection.PLACES: self._places,
        }[section]

    def _commit(self, kind: ChangeKind, sections: set[StoreSection], entity_ids: Iterable[str]) -> None:
        self._flush(sections)
        self._publish(kind, sections, tuple(entity_ids))

    def _publish(self, kind: ChangeKind, sections: set[StoreSection], entity_ids: tuple[str, ...]) -> None:
        if not self._listeners:
            return
        change = StoreChange(
            kind=kind,
            sections=frozenset(sections),
            entity_ids=entity_ids,
            snapshot=self._snapshot_locked(),
            observed_at=self._clock(),
        )
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.warning("Store listener %r failed", listener, exc_info=True)

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register *listener* for change events. Returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock, contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    def _missing(self, entity: str, entity_id: str | None) -> None:
        if self._config.strict_references:
            raise TokiNotFoundError(f"Unknown {entity} id {entity_id!r}", entity=entity, entity_id=entity_id or "")
        _logger.debug("Ignoring operation on unknown %s %s", entity, entity_id)

    def _require_trip(self, trip_id: str, entity: str) -> Trip:
        trip = self._trips.get(trip_id)
        if trip is None:
            raise ReferentialIntegrityError(
                f"Cannot create {entity}: trip {trip_id!r} does not exist",
                entity=entity,
                owner_id=trip_id,
            )
        return trip

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def _snapshot_locked(self) -> StoreSnapshot:
        return StoreSnapshot(
            trips=self._trips.snapshot(),
            cards=self._cards.snapshot(),
            reservations=self._reservations.snapshot(),
            places=self._places.snapshot(),
            active_trip_id=self._session.trip_id,
        )

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return self._snapshot_locked()

    @property
    def trips(self) -> tuple[Trip, ...]:
        """All trips in creation order."""
        with self._lock:
            return self._trips.snapshot()

    @property
    def cards(self) -> tuple[Card, ...]:
        """All cards in insertion order."""
        with self._lock:
            return self._cards.snapshot()

    @property
    def reservations(self) -> tuple[Reservation, ...]:
        with self._lock:
            return self._reservations.snapshot()

    @property
    def places(self) -> tuple[Place, ...]:
        with self._lock:
            return self._places.snapshot()

    @property
    def media(self) -> tuple[Media, ...]:
        return self._media.media

    # ------------------------------------------------------------------
    # Active session
    # ------------------------------------------------------------------

    @property
    def session(self) -> ActiveSession:
        with self._lock:
            return self._session

    @property
    def active_trip_id(self) -> str | None:
        with self._lock:
            return self._session.trip_id

    @property
    def active_trip(self) -> Trip | None:
        with self._lock:
            return self._trips.get(self._session.trip_id)

    @property
    def active_trip_cards(self) -> list[Card]:
        with self._lock:
            if self._session.trip_id is None:
                return []
            return self.get_cards_for_trip(self._session.trip_id)

    def set_active_trip(self, trip_id: str) -> None:
        """Select *trip_id* as the active trip; no-op if it does not exist."""
        with self._lock:
            if trip_id not in self._trips:
                self._missing("trip", trip_id)
                return
            if self._session.is_active(trip_id):
                return
            self._session = ActiveSession.select(trip_id, at=self._clock())
            self._commit(ChangeKind.ACTIVATED, {StoreSection.SESSION}, (trip_id,))

    def clear_active_trip(self) -> None:
        with self._lock:
            if not self._session.is_set:
                return
            previous = self._session.trip_id or ""
            self._session = ActiveSession()
            self._commit(ChangeKind.UPDATED, {StoreSection.SESSION}, (previous,))

    # ------------------------------------------------------------------
    # Trips
    # ------------------------------------------------------------------

    def get_trip(self, trip_id: str) -> Trip | None:
        with self._lock:
            return self._trips.get(trip_id)

    def create_trip(
        self,
        name: str,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        *,
        settings: TripSettings | None = None,
        companions: Iterable[TripCompanion] = (),
    ) -> Trip:
        """Create and persist a new trip.

        Raises :class:`ValueError` (a ``pydantic.ValidationError``) when
        *name* is blank.
        """
        now = self._clock()
        trip = Trip(
            name=name,
            start_date=start_date,
            end_date=end_date,
            settings=settings or TripSettings(),
            companions=list(companions),
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._trips.insert(trip)
            sections = {StoreSection.TRIPS}
            if self._config.auto_activate_new_trip and not self._session.is_set:
                self._session = ActiveSession.select(trip.id, at=now)
                sections.add(StoreSection.SESSION)
            self._commit(ChangeKind.CREATED, sections, (trip.id,))
        _logger.debug("Created trip %s", redact_for_log(trip))
        return trip

    def update_trip(self, trip: Trip) -> None:
        """Replace the stored trip with the same id; no-op if unknown.

        Raises ``pydantic.ValidationError`` when the edited trip is
        invalid (e.g. a blank name); the stored trip is left untouched.
        """
        with self._lock:
            existing = self._trips.get(trip.id)
            if existing is None:
                self._missing("trip", trip.id)
                return
            updated = _revalidated(trip, created_at=existing.created_at, updated_at=self._clock())
            self._trips.replace(updated)
            self._commit(ChangeKind.UPDATED, {StoreSection.TRIPS}, (trip.id,))

    def delete_trip(self, trip_id: str) -> None:
        """Delete a trip together with every card and reservation it owns.

        The whole cascade is one commit: tables are written once and a
        single change event is published after everything is gone.
        """
        with self._lock:
            if trip_id not in self._trips:
                self._missing("trip", trip_id)
                return

            card_ids = [card.id for card in self._cards if card.trip_id == trip_id]
            reservation_ids = [res.id for res in self._reservations if res.trip_id == trip_id]
            clears_session = self._session.is_active(trip_id)

            self._cards.remove_many(card_ids)
            self._reservations.remove_many(reservation_ids)
            self._trips.remove(trip_id)
            sections = {StoreSection.TRIPS, StoreSection.CARDS, StoreSection.RESERVATIONS}
            if clears_session:
                self._session = ActiveSession()
                sections.add(StoreSection.SESSION)

            self._commit(ChangeKind.DELETED, sections, (trip_id, *card_ids, *reservation_ids))
        _logger.debug(
            "Deleted trip %s with %d card(s) and %d reservation(s)",
            trip_id,
            len(card_ids),
            len(reservation_ids),
        )

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def get_card(self, card_id: str) -> Card | None:
        with self._lock:
            return self._cards.get(card_id)

    def create_card(
        self,
        trip_id: str,
        kind: CardKind | str,
        taken_at: datetime | None = None,
        tags: Iterable[str] = (),
        text: str | None = None,
        media_id: str | None = None,
        *,
        place_id: str | None = None,
    ) -> Card:
        """Create a card under *trip_id*.

        Raises :class:`ReferentialIntegrityError` when the trip does not
        exist; nothing is inserted in that case.
        """
        with self._lock:
            self._require_trip(trip_id, "card")
            now = self._clock()
            place = self._places.get(place_id)
            card = Card(
                trip_id=trip_id,
                place_id=place_id,
                kind=kind,
                taken_at=taken_at or now,
                tags=list(tags),
                text=text,
                media_id=media_id,
                place_label_at_save=place.label if place is not None else None,
                coords_at_save=Coordinates(lat=place.lat, lon=place.lon) if place is not None else None,
                created_at=now,
                updated_at=now,
            )
            self._cards.insert(card)
            self._commit(ChangeKind.CREATED, {StoreSection.CARDS}, (card.id,))
        return card

    def update_card(self, card: Card) -> None:
        """Replace the stored card with the same id; no-op if unknown.

        The owning trip is kept from the stored card; cards are never
        moved between trips.
        Raises ``pydantic.ValidationError`` for an invalid edit.
        """
        with self._lock:
            existing = self._cards.get(card.id)
            if existing is None:
                self._missing("card", card.id)
                return
            if card.trip_id != existing.trip_id:
                _logger.debug("Ignoring trip change on card %s", card.id)
            updated = _revalidated(
                card,
                trip_id=existing.trip_id,
                created_at=existing.created_at,
                updated_at=self._clock(),
            )
            self._cards.replace(updated)
            self._commit(ChangeKind.UPDATED, {StoreSection.CARDS}, (card.id,))

    def delete_card(self, card_id: str) -> None:
        """Delete a card; its media goes too unless something else still references it."""
        with self._lock:
            card = self._cards.remove(card_id)
            if card is None:
                self._missing("card", card_id)
                return
            sections = {StoreSection.CARDS}
            if card.media_id is not None and not self._media_referenced(card.media_id):
                if self._media.delete(card.media_id):
                    sections.add(StoreSection.MEDIA)
            self._commit(ChangeKind.DELETED, sections, (card_id,))

    def get_cards_for_trip(self, trip_id: str) -> list[Card]:
        """Cards of *trip_id* ordered by ``taken_at`` (ties in insertion order)."""
        with self._lock:
            cards = self._cards.where(lambda card: card.trip_id == trip_id)
        return sorted(cards, key=lambda card: card.taken_at)

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    def get_reservation(self, reservation_id: str) -> Reservation | None:
        with self._lock:
            return self._reservations.get(reservation_id)

    def add_reservation(
        self,
        trip_id: str,
        reservation_type: ReservationType | str,
        confirmation_number: str,
        *,
        provider: str | None = None,
        date: datetime | None = None,
        notes: str | None = None,
    ) -> Reservation:
        """Attach a reservation to *trip_id*.

        Raises :class:`ReferentialIntegrityError` for an unknown trip and
        :class:`ValueError` for a blank confirmation number.
        """
        with self._lock:
            self._require_trip(trip_id, "reservation")
            reservation = Reservation(
                trip_id=trip_id,
                type=reservation_type,
                confirmation_number=confirmation_number,
                provider=provider,
                date=date,
                notes=notes,
            )
            self._reservations.insert(reservation)
            self._commit(ChangeKind.CREATED, {StoreSection.RESERVATIONS}, (reservation.id,))
        _logger.debug("Added reservation %s", redact_for_log(reservation))
        return reservation

    def update_reservation(self, reservation: Reservation) -> None:
        with self._lock:
            existing = self._reservations.get(reservation.id)
            if existing is None:
                self._missing("reservation", reservation.id)
                return
            self._reservations.replace(_revalidated(reservation, trip_id=existing.trip_id))
            self._commit(ChangeKind.UPDATED, {StoreSection.RESERVATIONS}, (reservation.id,))

    def delete_reservation(self, reservation_id: str) -> None:
        with self._lock:
            if self._reservations.remove(reservation_id) is None:
                self._missing("reservation", reservation_id)
                return
            self._commit(ChangeKind.DELETED, {StoreSection.RESERVATIONS}, (reservation_id,))

    def get_reservations_for_trip(self, trip_id: str) -> list[Reservation]:
        """Reservations of *trip_id* by date; undated ones last."""
        with self._lock:
            reservations = self._reservations.where(lambda res: res.trip_id == trip_id)
        return sorted(reservations, key=lambda res: res.date or _FAR_FUTURE)

    # ------------------------------------------------------------------
    # Places
    # ------------------------------------------------------------------

    def get_place(self, place_id: str | None) -> Place | None:
        with self._lock:
            return self._places.get(place_id)

    def find_or_create_place(
        self,
        lat: float,
        lon: float,
        label: str | None = None,
        categories: Iterable[str] = (),
    ) -> Place:
        """Return the place sharing this location's geohash cell, creating one if needed."""
        geohash = _geohash.encode(lat, lon, PLACE_GEOHASH_LENGTH)
        with self._lock:
            existing = self._places.where(lambda place: place.geohash5 == geohash)
            if existing:
                return existing[0]
            now = self._clock()
            place = Place(
                label=label,
                lat=lat,
                lon=lon,
                geohash5=geohash,
                categories=list(categories),
                created_at=now,
                updated_at=now,
            )
            self._places.insert(place)
            self._commit(ChangeKind.CREATED, {StoreSection.PLACES}, (place.id,))
        return place

    def update_place(self, place: Place) -> None:
        with self._lock:
            existing = self._places.get(place.id)
            if existing is None:
                self._missing("place", place.id)
                return
            # Blank geohash makes validation derive it from the edited coordinates.
            updated = _revalidated(
                place,
                geohash5="",
                created_at=existing.created_at,
                updated_at=self._clock(),
            )
            self._places.replace(updated)
            self._commit(ChangeKind.UPDATED, {StoreSection.PLACES}, (place.id,))

    def get_cards_for_place(self, place_id: str) -> list[Card]:
        with self._lock:
            cards = self._cards.where(lambda card: card.place_id == place_id)
        return sorted(cards, key=lambda card: card.taken_at)

    # ------------------------------------------------------------------
    # Media
    # ------------------------------------------------------------------

    def _media_referenced(self, media_id: str) -> bool:
        if any(card.media_id == media_id for card in self._cards):
            return True
        return any(trip.cover_photo_id == media_id for trip in self._trips)

    def save_media(
        self,
        data: bytes,
        mime: str,
        *,
        exif: MediaExif | None = None,
    ) -> Media:
        """Store a new media payload and return its metadata."""
        with self._lock:
            media = self._media.store(data, mime, exif=exif)
            self._publish(ChangeKind.CREATED, {StoreSection.MEDIA}, (media.id,))
        return media

    def load_media(self, media_id: str | None) -> bytes | None:
        return self._media.load(media_id)

    def load_media_image(self, media_id: str | None) -> Image.Image | None:
        """Decoded image for *media_id*; ``None`` when missing or not an image."""
        return self._media.load_image(media_id)

    async def async_load_media_image(self, media_id: str | None) -> Image.Image | None:
        return await self._media.async_load_image(media_id)

    def delete_media(self, media_id: str) -> None:
        """Remove media regardless of references; readers then see it as absent."""
        with self._lock:
            if not self._media.delete(media_id):
                self._missing("media", media_id)
                return
            self._publish(ChangeKind.DELETED, {StoreSection.MEDIA}, (media_id,))

    async def async_import_remote_media(
        self,
        url: str,
        *,
        mime: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> Media:
        """Download *url* into the media repository."""
        media = await self._media.async_fetch_remote(
            url,
            mime=mime,
            session=session,
            timeout=self._config.remote_fetch_timeout,
        )
        with self._lock:
            self._publish(ChangeKind.CREATED, {StoreSection.MEDIA}, (media.id,))
        return media

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def export_trip(self, trip_id: str) -> TripExport | None:
        """Bundle one trip with its cards, reservations, places and media metadata."""
        with self._lock:
            trip = self._trips.get(trip_id)
            if trip is None:
                return None
            cards = self.get_cards_for_trip(trip_id)
            reservations = self.get_reservations_for_trip(trip_id)
            place_ids = {card.place_id for card in cards if card.place_id}
            places = self._places.where(lambda place: place.id in place_ids)
            media_ids = {card.media_id for card in cards if card.media_id}
            if trip.cover_photo_id:
                media_ids.add(trip.cover_photo_id)
            media = [m for m in self._media.media if m.id in media_ids]

        return TripExport(
            trip=trip,
            reservations=reservations,
            places=places,
            cards=cards,
            media=media,
            media_index=[MediaIndexEntry(media_id=m.id, filename=media_filename(m.id, m.mime)) for m in media],
        )

    def _unique_trip_name(self, name: str) -> str:
        taken = {trip.name for trip in self._trips}
        candidate = name
        suffix = 2
        while candidate in taken:
            candidate = f"{name} {suffix}"
            suffix += 1
        return candidate

    def import_trip(self, export: TripExport) -> Trip:
        """Recreate an exported trip under fresh ids.

        Places and media metadata are merged by id; cards and
        reservations are re-keyed onto the new trip. A duplicate trip
        name gets a numeric suffix (``"Okinawa 2"``).
        """
        with self._lock:
            now = self._clock()
            trip = Trip(
                name=self._unique_trip_name(export.trip.name),
                start_date=export.trip.start_date,
                end_date=export.trip.end_date,
                cover_photo_id=export.trip.cover_photo_id,
                settings=export.trip.settings,
                companions=export.trip.companions,
                created_at=now,
                updated_at=now,
            )
            new_places = [place for place in export.places if place.id not in self._places]
            cards = [
                Card(
                    trip_id=trip.id,
                    place_id=card.place_id,
                    kind=card.kind,
                    taken_at=card.taken_at,
                    tags=card.tags,
                    text=card.text,
                    media_id=card.media_id,
                    place_label_at_save=card.place_label_at_save,
                    coords_at_save=card.coords_at_save,
                    created_at=now,
                    updated_at=now,
                )
                for card in export.cards
            ]
            reservations = [
                res.model_copy(update={"id": new_id(), "trip_id": trip.id})
                for res in export.reservations
            ]

            self._trips.insert(trip)
            for place in new_places:
                self._places.insert(place)
            for card in cards:
                self._cards.insert(card)
            for reservation in reservations:
                self._reservations.insert(reservation)
            sections = {StoreSection.TRIPS, StoreSection.CARDS, StoreSection.RESERVATIONS, StoreSection.PLACES}
            registered = [media.id for media in export.media if self._media.register(media)]
            if registered:
                sections.add(StoreSection.MEDIA)

            self._commit(ChangeKind.IMPORTED, sections, (trip.id, *(card.id for card in cards)))
        _logger.info("Imported trip %r with %d card(s)", trip.name, len(cards))
        return trip
