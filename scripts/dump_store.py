#!/usr/bin/env python3
"""Dump everything a pytoki data directory holds.

Opens the store read-mostly, lists trips with their cards, reservations
and places, and reports media whose blobs are missing. Handy for
inspecting a data directory copied off a device.

Usage
-----
::

    export TOKI_DATA_DIR=~/toki-backup
    python scripts/dump_store.py

Options::

    --data-dir DIR       Data directory (default: $TOKI_DATA_DIR)
    --trip ID            Only dump this trip
    --json               Output machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
    --export ID          Write the export bundle for trip ID (JSON)
    --seed               Seed the demo trip first if the store is empty
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pytoki import TokiConfig, TripDataStore, seed_if_needed
from pytoki.models import Trip


def _section(title: str) -> str:
    return f"\n{'=' * 60}\n  {title}\n{'=' * 60}"


def _dump_trip(store: TripDataStore, trip: Trip, out: list[str]) -> dict[str, Any]:
    cards = store.get_cards_for_trip(trip.id)
    reservations = store.get_reservations_for_trip(trip.id)
    active = " (active)" if store.active_trip_id == trip.id else ""

    out.append(_section(f"Trip {trip.name!r}{active}"))
    out.append(f"  id        : {trip.id}")
    out.append(f"  dates     : {trip.start_date or '-'} .. {trip.end_date or 'open'}")
    out.append(f"  cover     : {trip.cover_photo_id or '-'}")

    out.append(f"\n  Reservations ({len(reservations)})")
    for res in reservations:
        out.append(f"    {res.type.value:<10} {res.confirmation_number:<12} {res.provider or '-'}  {res.date or 'undated'}")

    out.append(f"\n  Cards ({len(cards)})")
    for card in cards:
        media = ""
        if card.media_id:
            media = " media=ok" if store.load_media(card.media_id) is not None else " media=MISSING"
        out.append(f"    {card.taken_at:%Y-%m-%d %H:%M} {card.kind.value:<5} {card.place_label_at_save or '-'}{media}")
        if card.tags:
            out.append(f"      tags: {', '.join(card.tags)}")

    return {
        "trip": trip.to_record(),
        "cards": [card.to_record() for card in cards],
        "reservations": [res.to_record() for res in reservations],
    }


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Dump the contents of a pytoki data directory.",
    )
    parser.add_argument("--data-dir", help="Data directory (default: $TOKI_DATA_DIR)")
    parser.add_argument("--trip", help="Only dump this trip id")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--export", metavar="TRIP_ID", help="Write the export bundle for TRIP_ID")
    parser.add_argument("--seed", action="store_true", help="Seed the demo trip if the store is empty")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.data_dir:
        overrides["data_dir"] = Path(args.data_dir).expanduser()
    config = TokiConfig.from_env(**overrides)
    store = TripDataStore(config)

    if args.seed:
        seed_if_needed(store)

    if args.export:
        export = store.export_trip(args.export)
        if export is None:
            print(f"Unknown trip {args.export}", file=sys.stderr)
            sys.exit(1)
        payload = json.dumps(export.to_record(), indent=2, ensure_ascii=False)
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            print(f"Export written to {args.output}", file=sys.stderr)
        else:
            print(payload)
        return

    result: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "data_dir": str(config.data_dir),
        "active_trip_id": store.active_trip_id,
        "trips": [],
        "places": [place.to_record() for place in store.places],
        "missing_media": [],
    }

    out: list[str] = [_section("pytoki dump_store")]
    out.append(f"  time      : {result['timestamp']}")
    out.append(f"  data_dir  : {config.data_dir}")
    out.append(f"  trips     : {len(store.trips)}")
    out.append(f"  places    : {len(store.places)}")
    out.append(f"  media     : {len(store.media)}")

    trips = [trip for trip in store.trips if not args.trip or trip.id == args.trip]
    for trip in trips:
        result["trips"].append(_dump_trip(store, trip, out))

    result["missing_media"] = [media.id for media in store.media if store.load_media(media.id) is None]
    if result["missing_media"]:
        out.append(_section("MISSING MEDIA"))
        out.extend(f"  {media_id}" for media_id in result["missing_media"])

    if args.json_mode or args.output:
        payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            print(f"JSON written to {args.output}", file=sys.stderr)
        else:
            print(payload)
    else:
        print("\n".join(out))


if __name__ == "__main__":
    main()
