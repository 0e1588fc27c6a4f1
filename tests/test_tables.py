from __future__ import annotations

import logging

import pytest

from pytoki.models import Reservation
from pytoki.state.tables import EntityTable


def _reservation(rid: str, number: str = "C1") -> Reservation:
    return Reservation(id=rid, trip_id="t1", confirmation_number=number)


def test_insert_rejects_duplicate_id() -> None:
    table: EntityTable[Reservation] = EntityTable("reservations", Reservation)
    table.insert(_reservation("r1"))
    with pytest.raises(KeyError):
        table.insert(_reservation("r1"))


def test_replace_keeps_insertion_order() -> None:
    table: EntityTable[Reservation] = EntityTable("reservations", Reservation)
    for rid in ("r1", "r2", "r3"):
        table.insert(_reservation(rid))

    assert table.replace(_reservation("r2", "NEW")) is True
    assert table.replace(_reservation("r9")) is False
    assert [r.id for r in table] == ["r1", "r2", "r3"]
    assert table.get("r2").confirmation_number == "NEW"  # type: ignore[union-attr]


def test_remove_many_ignores_unknown_ids() -> None:
    table: EntityTable[Reservation] = EntityTable("reservations", Reservation)
    table.insert(_reservation("r1"))
    table.insert(_reservation("r2"))

    removed = table.remove_many(["r1", "nope"])
    assert [r.id for r in removed] == ["r1"]
    assert len(table) == 1


def test_load_records_skips_invalid_and_duplicates(caplog: pytest.LogCaptureFixture) -> None:
    table: EntityTable[Reservation] = EntityTable("reservations", Reservation)
    records = [
        {"id": "r1", "tripId": "t1", "confirmationNumber": "A", "notes": "door code 1234"},
        {"id": "r2", "tripId": "t1"},
        {"id": "r1", "tripId": "t1", "confirmationNumber": "B"},
    ]

    with caplog.at_level(logging.WARNING, logger="pytoki.state.tables"):
        loaded = table.load_records(records)

    assert loaded == 1
    assert table.get("r1").confirmation_number == "A"  # type: ignore[union-attr]
    assert "Skipping invalid reservations record #1" in caplog.text
    assert "Skipping duplicate reservations id r1" in caplog.text


def test_to_records_uses_camel_case() -> None:
    table: EntityTable[Reservation] = EntityTable("reservations", Reservation)
    table.insert(_reservation("r1"))
    record = table.to_records()[0]
    assert record["tripId"] == "t1"
    assert record["confirmationNumber"] == "C1"
    assert record["type"] == "other"
