from __future__ import annotations

from conftest import fixed_now, png_bytes

from pytoki.models import CardKind, TripExport
from pytoki.state.events import ChangeKind, StoreChange
from pytoki.storage import MemoryBackend
from pytoki.store import TripDataStore


def _populated(store: TripDataStore) -> str:
    trip = store.create_trip("Okinawa")
    place = store.find_or_create_place(26.2125, 127.68, label="Naha")
    media = store.save_media(png_bytes(), "image/png")
    store.create_card(trip.id, CardKind.PHOTO, media_id=media.id, place_id=place.id, tags=["view"])
    store.create_card(trip.id, CardKind.NOTE, text="Soba for lunch")
    store.add_reservation(trip.id, "hotel", "OKN-1234", provider="Booking.com")
    store.update_trip(store.get_trip(trip.id).model_copy(update={"cover_photo_id": media.id}))
    return trip.id


def test_export_bundles_trip_contents(store: TripDataStore) -> None:
    trip_id = _populated(store)
    export = store.export_trip(trip_id)

    assert export is not None
    assert export.trip.id == trip_id
    assert len(export.cards) == 2
    assert len(export.reservations) == 1
    assert [p.label for p in export.places] == ["Naha"]
    assert len(export.media) == 1
    assert export.media_index[0].filename.endswith(".png")


def test_export_unknown_trip_returns_none(store: TripDataStore) -> None:
    assert store.export_trip("nope") is None


def test_export_record_uses_camel_case(store: TripDataStore) -> None:
    export = store.export_trip(_populated(store))
    assert export is not None

    record = export.to_record()
    assert "mediaIndex" in record
    assert "tripId" in record["cards"][0]
    assert TripExport.model_validate(record) == export


def test_import_into_other_store_assigns_new_ids(store: TripDataStore) -> None:
    trip_id = _populated(store)
    export = store.export_trip(trip_id)
    assert export is not None

    target = TripDataStore(backend=MemoryBackend(), clock=fixed_now)
    events: list[StoreChange] = []
    target.subscribe(events.append)
    imported = target.import_trip(export)

    assert imported.id != trip_id
    assert imported.name == "Okinawa"
    cards = target.get_cards_for_trip(imported.id)
    assert len(cards) == 2
    assert {card.id for card in cards}.isdisjoint({card.id for card in export.cards})
    assert len(target.get_reservations_for_trip(imported.id)) == 1
    assert len(target.places) == 1
    assert target.media_repository.contains(export.media[0].id)
    assert [e.kind for e in events] == [ChangeKind.IMPORTED]


def test_import_same_store_renames_duplicate(store: TripDataStore) -> None:
    trip_id = _populated(store)
    export = store.export_trip(trip_id)
    assert export is not None

    second = store.import_trip(export)
    third = store.import_trip(export)

    assert second.name == "Okinawa 2"
    assert third.name == "Okinawa 3"
    assert len(store.places) == 1
    assert len(store.media) == 1
    assert len(store.get_cards_for_trip(trip_id)) == 2
