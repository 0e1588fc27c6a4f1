"""Geohash encoding used to deduplicate places."""

from __future__ import annotations

_BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
_DECODE_MAP: dict[str, int] = {ch: idx for idx, ch in enumerate(_BASE32)}


def encode(latitude: float, longitude: float, length: int = 5) -> str:
    """Encode a coordinate as a base32 geohash of *length* characters.

    Raises :class:`ValueError` for out-of-range coordinates.
    """
    if not -90.0 <= latitude <= 90.0:
        raise ValueError(f"latitude must be between -90 and 90, got {latitude}")
    if not -180.0 <= longitude <= 180.0:
        raise ValueError(f"longitude must be between -180 and 180, got {longitude}")
    if length <= 0:
        raise ValueError(f"length must be positive, got {length}")

    lat_lo, lat_hi = -90.0, 90.0
    lon_lo, lon_hi = -180.0, 180.0
    chars: list[str] = []
    even = True
    bit = 0
    ch = 0

    while len(chars) < length:
        if even:
            mid = (lon_lo + lon_hi) / 2
            if longitude >= mid:
                ch |= 1 << (4 - bit)
                lon_lo = mid
            else:
                lon_hi = mid
        else:
            mid = (lat_lo + lat_hi) / 2
            if latitude >= mid:
                ch |= 1 << (4 - bit)
                lat_lo = mid
            else:
                lat_hi = mid
        even = not even

        bit += 1
        if bit == 5:
            chars.append(_BASE32[ch])
            bit = 0
            ch = 0

    return "".join(chars)


def decode(geohash: str) -> tuple[float, float] | None:
    """Return the cell centre ``(lat, lon)`` or ``None`` for invalid input."""
    if not geohash:
        return None

    lat_lo, lat_hi = -90.0, 90.0
    lon_lo, lon_hi = -180.0, 180.0
    even = True

    for char in geohash.lower():
        bits = _DECODE_MAP.get(char)
        if bits is None:
            return None
        for _ in range(5):
            if even:
                mid = (lon_lo + lon_hi) / 2
                if bits & 0x10:
                    lon_lo = mid
                else:
                    lon_hi = mid
            else:
                mid = (lat_lo + lat_hi) / 2
                if bits & 0x10:
                    lat_lo = mid
                else:
                    lat_hi = mid
            bits <<= 1
            even = not even

    return (lat_lo + lat_hi) / 2, (lon_lo + lon_hi) / 2
