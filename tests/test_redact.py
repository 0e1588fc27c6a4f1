from __future__ import annotations

from pytoki._redact import redact_for_log
from pytoki.models import Card, CardKind, Coordinates, Reservation, Trip, TripCompanion


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "name": "Paris Trip",
        "confirmationNumber": "ABC123",
        "confirmation_number": "ABC123",
        "notes": "door code 4711",
        "companions": [{"name": "Alex", "email": "alex@example.com", "phone": None}],
    }

    redacted = redact_for_log(payload)
    assert redacted["name"] == "Paris Trip"
    assert redacted["confirmationNumber"] == "<redacted>"
    assert redacted["confirmation_number"] == "<redacted>"
    assert redacted["notes"] == "<redacted>"
    assert redacted["companions"][0]["email"] == "<redacted>"
    assert redacted["companions"][0]["phone"] is None


def test_redact_for_log_coarsens_coordinates() -> None:
    card = Card(
        trip_id="t1",
        kind=CardKind.PHOTO,
        coords_at_save=Coordinates(lat=48.858370, lon=2.294481),
    )

    redacted = redact_for_log(card)
    assert redacted["coordsAtSave"] == {"lat": 48.86, "lon": 2.29}
    assert redacted["tripId"] == "t1"


def test_redact_for_log_dumps_models() -> None:
    reservation = Reservation(trip_id="t1", confirmation_number="XYZ", provider="ANA")
    redacted = redact_for_log(reservation)
    assert redacted["confirmationNumber"] == "<redacted>"
    assert redacted["provider"] == "ANA"

    trip = Trip(name="Berlin", companions=[TripCompanion(name="Sam", email="sam@example.com")])
    assert redact_for_log(trip)["companions"][0]["email"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_summarizes_bytes() -> None:
    assert redact_for_log({"payload": b"\x00" * 32}) == {"payload": "<bytes:32b>"}
