"""Demo data for first launch.

:func:`seed_if_needed` builds one sample trip through the public store
API (no backdoor writes), so seeded data obeys the same invariants and
produces the same change events as user-created data.
"""

from __future__ import annotations

import io
import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from pytoki._constants import AVAILABLE_TAGS
from pytoki.models.card import Card, CardKind
from pytoki.models.reservation import ReservationType
from pytoki.models.trip import Trip

if TYPE_CHECKING:
    from pytoki.store import TripDataStore

_logger = logging.getLogger(__name__)

SAMPLE_TRIP_NAME = "Okinawa 2025"

_PLACEHOLDER_SIZE = (800, 600)
_PLACE_COLORS: tuple[tuple[int, int, int], ...] = (
    (0, 122, 255),
    (52, 199, 89),
    (255, 149, 0),
    (175, 82, 222),
)
_HOTEL_COLOR = (175, 82, 222)


@dataclass(frozen=True)
class _SamplePlace:
    name: str
    lat: float
    lon: float
    categories: tuple[str, ...]
    description: str


@dataclass(frozen=True)
class _SampleHotel:
    name: str
    lat: float
    lon: float
    check_in_day: int
    check_out_day: int


# Arranged in travel order.
_SAMPLE_PLACES: tuple[_SamplePlace, ...] = (
    _SamplePlace("Naha Airport", 26.1958, 127.6456, ("transport", "arrival"), "Starting point of your Okinawa adventure"),
    _SamplePlace(
        "Naha Castle Ruins",
        26.2167,
        127.7167,
        ("culture", "historical", "view"),
        "Historic castle ruins with panoramic views of Naha",
    ),
    _SamplePlace("Asato Dojo", 26.2400, 127.6800, ("culture", "hidden", "walk"), "Traditional karate dojo in the heart of Naha"),
    _SamplePlace(
        "Ogimi Village Farm to Table Experience",
        26.6833,
        128.1167,
        ("food", "culture", "hidden"),
        "Authentic farm-to-table experience in the longevity village",
    ),
    _SamplePlace("Cape Hedo", 26.8700, 128.2633, ("view", "sunset", "scenic drive"), "Northernmost point of Okinawa with stunning ocean views"),
    _SamplePlace("Okinawa Churaumi Aquarium", 26.6944, 127.8772, ("attraction", "family", "view"), "One of the world's largest aquariums"),
)

_SAMPLE_HOTELS: tuple[_SampleHotel, ...] = (
    _SampleHotel("Naha Grand Hotel", 26.2125, 127.6800, check_in_day=-2, check_out_day=0),
    _SampleHotel("Okinawa Resort & Spa", 26.6500, 127.8500, check_in_day=0, check_out_day=2),
)


def _placeholder_jpeg(text: str, color: tuple[int, int, int]) -> bytes:
    """Flat-colour JPEG with *text* centred, standing in for a real photo."""
    image = Image.new("RGB", _PLACEHOLDER_SIZE, color)
    draw = ImageDraw.Draw(image)
    left, top, right, bottom = draw.textbbox((0, 0), text)
    x = (_PLACEHOLDER_SIZE[0] - (right - left)) / 2
    y = (_PLACEHOLDER_SIZE[1] - (bottom - top)) / 2
    draw.text((x, y), text, fill=(255, 255, 255))
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=80)
    return buffer.getvalue()


def _at_hour(day: datetime, hour: int) -> datetime:
    return day.replace(hour=hour, minute=0, second=0, microsecond=0)


def _attach_media(store: TripDataStore, card: Card, text: str, color: tuple[int, int, int]) -> Card:
    media = store.save_media(_placeholder_jpeg(text, color), "image/jpeg")
    updated = card.model_copy(update={"media_id": media.id})
    store.update_card(updated)
    return updated


def create_sample_trip(store: TripDataStore, *, now: datetime | None = None) -> Trip:
    """Build the Okinawa demo trip with places, hotel reservations and cards."""
    now = now or datetime.now(UTC)
    trip = store.create_trip(
        SAMPLE_TRIP_NAME,
        start_date=now - timedelta(days=5),
        end_date=now + timedelta(days=3),
    )

    for hotel in _SAMPLE_HOTELS:
        place = store.find_or_create_place(hotel.lat, hotel.lon, label=hotel.name, categories=["hotel", "accommodation"])
        check_in = _at_hour(now + timedelta(days=hotel.check_in_day), 15)
        check_out = _at_hour(now + timedelta(days=hotel.check_out_day), 11)
        reservation = store.add_reservation(
            trip.id,
            ReservationType.HOTEL,
            f"OKN-{1000 + secrets.randbelow(9000)}",
            provider="Booking.com",
            date=check_in,
            notes=f"Check-in: {check_in:%Y-%m-%d}\nCheck-out: {check_out:%Y-%m-%d}",
        )
        card = store.create_card(
            trip.id,
            CardKind.PHOTO,
            taken_at=check_in,
            tags=["hotel", "accommodation", "check-in"],
            text=(
                f"**{hotel.name}**\n\n"
                f"Check-in: {check_in:%b %d, %H:%M}\n"
                f"Check-out: {check_out:%b %d, %H:%M}\n\n"
                f"Confirmation: {reservation.confirmation_number}\n\n"
                "Your home base for exploring Okinawa!"
            ),
            place_id=place.id,
        )
        _attach_media(store, card, hotel.name, _HOTEL_COLOR)

    for index, sample in enumerate(_SAMPLE_PLACES):
        place = store.find_or_create_place(sample.lat, sample.lon, label=sample.name, categories=sample.categories)
        # One stop per day starting two days ago, spread through the day.
        taken_at = _at_hour(now + timedelta(days=index - 2), 0) + timedelta(hours=10 + index * 2)
        card = store.create_card(
            trip.id,
            CardKind.PHOTO,
            taken_at=taken_at,
            tags=[tag for tag in sample.categories if tag in AVAILABLE_TAGS],
            text=sample.description,
            place_id=place.id,
        )
        _attach_media(store, card, sample.name, _PLACE_COLORS[index % len(_PLACE_COLORS)])

        if index % 2 == 0:
            store.create_card(
                trip.id,
                CardKind.NOTE,
                taken_at=taken_at + timedelta(hours=2),
                tags=["food", "walk"],
                text="Must try the local specialties here!",
                place_id=place.id,
            )

    store.add_reservation(
        trip.id,
        ReservationType.FLIGHT,
        f"NH{100 + secrets.randbelow(900)}",
        provider="ANA",
        date=now - timedelta(days=5),
    )

    first_photo = next((card for card in store.get_cards_for_trip(trip.id) if card.media_id), None)
    if first_photo is not None:
        trip = store.get_trip(trip.id) or trip
        trip = trip.model_copy(update={"cover_photo_id": first_photo.media_id})
        store.update_trip(trip)

    return store.get_trip(trip.id) or trip


def has_seeded_data(store: TripDataStore) -> bool:
    return bool(store.trips)


def seed_if_needed(store: TripDataStore, *, now: datetime | None = None) -> Trip | None:
    """Seed the demo trip when the store holds no trips.

    Safe to call on every launch: once any trip exists (seeded or not)
    this is a no-op returning ``None``.
    """
    with store.serialized():
        if has_seeded_data(store):
            _logger.debug("Seed data already present; skipping")
            return None
        trip = create_sample_trip(store, now=now)
    _logger.info("Created seed trip %r with %d card(s)", trip.name, len(store.get_cards_for_trip(trip.id)))
    return trip
