from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pytoki.models import (
    Card,
    CardKind,
    Media,
    Place,
    Reservation,
    ReservationType,
    Trip,
    TripCompanion,
    parse_timestamp,
)


def test_trip_from_camel_case_record() -> None:
    trip = Trip.model_validate(
        {
            "id": "t1",
            "name": "  Paris Trip ",
            "startDate": "2026-05-01T00:00:00Z",
            "coverPhotoId": "",
            "settings": {"distanceUnits": "MI", "hidePreciseLocation": True},
            "companions": [{"name": "Alex", "email": " "}],
            "unknownField": 1,
        }
    )

    assert trip.name == "Paris Trip"
    assert trip.start_date == datetime(2026, 5, 1, tzinfo=UTC)
    assert trip.cover_photo_id is None
    assert trip.settings.distance_units == "mi"
    assert trip.settings.hide_precise_location is True
    assert trip.companions[0].email is None
    assert trip.is_open_ended


def test_trip_record_round_trips_with_camel_case_keys() -> None:
    trip = Trip(name="Berlin", companions=[TripCompanion(name="Sam")])
    record = trip.to_record()

    assert record["createdAt"].endswith("Z")
    assert "coverPhotoId" in record
    assert Trip.model_validate(record) == trip


def test_trip_is_frozen() -> None:
    trip = Trip(name="Berlin")
    with pytest.raises(ValidationError):
        trip.name = "Munich"  # type: ignore[misc]


def test_card_tags_are_normalized() -> None:
    card = Card(trip_id="t1", kind="Photo", tags=[" Food", "food", "", "VIEW"])
    assert card.kind is CardKind.PHOTO
    assert card.tags == ["food", "view"]
    assert card.has_tag("View")


def test_card_requires_trip_id() -> None:
    with pytest.raises(ValidationError):
        Card(trip_id="  ", kind=CardKind.NOTE)


def test_unknown_reservation_type_falls_back_to_other() -> None:
    reservation = Reservation(trip_id="t1", type="Cruise", confirmation_number=" X9 ")
    assert reservation.type is ReservationType.OTHER
    assert reservation.confirmation_number == "X9"
    assert ReservationType(" Hotel ") is ReservationType.HOTEL


def test_place_derives_geohash() -> None:
    place = Place(lat=57.64911, lon=10.40744)
    assert place.geohash5 == "u4pru"
    assert place.coordinates.lat == pytest.approx(57.64911)


def test_place_rejects_out_of_range_coordinates() -> None:
    with pytest.raises(ValidationError):
        Place(lat=91.0, lon=0.0)


def test_media_filename_uses_extension() -> None:
    assert Media(id="m1", mime="image/jpeg").filename == "m1.jpg"
    assert Media(id="m2", mime="application/pdf").filename == "m2.bin"
    assert not Media(id="m3", mime="audio/m4a").is_image


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1_767_225_600, datetime(2026, 1, 1, tzinfo=UTC)),
        (1_767_225_600_000, datetime(2026, 1, 1, tzinfo=UTC)),
        ("2026-01-01T00:00:00Z", datetime(2026, 1, 1, tzinfo=UTC)),
        (datetime(2026, 1, 1), datetime(2026, 1, 1, tzinfo=UTC)),
        ("  ", None),
        (None, None),
    ],
)
def test_parse_timestamp(value: object, expected: datetime | None) -> None:
    assert parse_timestamp(value) == expected


def test_parse_timestamp_rejects_bool() -> None:
    with pytest.raises(ValueError):
        parse_timestamp(True)
