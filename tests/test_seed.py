from __future__ import annotations

from conftest import fixed_now

from pytoki.config import TokiConfig
from pytoki.models import CardKind, ReservationType
from pytoki.seed import SAMPLE_TRIP_NAME, seed_if_needed
from pytoki.storage import MemoryBackend
from pytoki.store import TripDataStore


def test_seed_creates_sample_trip(store: TripDataStore) -> None:
    trip = seed_if_needed(store, now=fixed_now())

    assert trip is not None
    assert trip.name == SAMPLE_TRIP_NAME
    assert store.active_trip_id == trip.id

    cards = store.get_cards_for_trip(trip.id)
    photos = [card for card in cards if card.kind is CardKind.PHOTO]
    notes = [card for card in cards if card.kind is CardKind.NOTE]
    assert len(photos) == 8
    assert len(notes) == 3
    assert all(store.load_media(card.media_id) for card in photos)
    assert trip.cover_photo_id == photos[0].media_id

    reservations = store.get_reservations_for_trip(trip.id)
    assert sorted(r.type for r in reservations) == sorted(
        [ReservationType.HOTEL, ReservationType.HOTEL, ReservationType.FLIGHT]
    )
    assert all(r.confirmation_number for r in reservations)


def test_seed_is_idempotent(store: TripDataStore) -> None:
    assert seed_if_needed(store, now=fixed_now()) is not None
    assert seed_if_needed(store, now=fixed_now()) is None
    assert len(store.trips) == 1


def test_seed_skipped_when_user_data_exists(store: TripDataStore) -> None:
    store.create_trip("My own trip")
    assert seed_if_needed(store) is None
    assert [t.name for t in store.trips] == ["My own trip"]


def test_open_seeds_when_configured() -> None:
    backend = MemoryBackend()
    store = TripDataStore.open(TokiConfig(seed_on_open=True), backend=backend)
    assert [t.name for t in store.trips] == [SAMPLE_TRIP_NAME]

    reopened = TripDataStore.open(TokiConfig(seed_on_open=True), backend=backend)
    assert len(reopened.trips) == 1


def test_seed_places_keep_their_own_labels(store: TripDataStore) -> None:
    trip = seed_if_needed(store, now=fixed_now())
    assert trip is not None

    labels = {place.label for place in store.places}
    assert {"Naha Grand Hotel", "Asato Dojo", "Okinawa Resort & Spa", "Okinawa Churaumi Aquarium"} <= labels
    assert len(store.places) == 8
    dojo_cards = [card for card in store.cards if card.text and "karate" in card.text]
    assert [card.place_label_at_save for card in dojo_cards] == ["Asato Dojo"]
