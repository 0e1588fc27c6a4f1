from __future__ import annotations

import pytest

from pytoki import _geohash


def test_encode_known_value() -> None:
    assert _geohash.encode(57.64911, 10.40744, 11) == "u4pruydqqvj"
    assert _geohash.encode(57.64911, 10.40744) == "u4pru"


def test_decode_returns_cell_centre() -> None:
    decoded = _geohash.decode("u4pruydqqvj")
    assert decoded is not None
    lat, lon = decoded
    assert lat == pytest.approx(57.64911, abs=1e-4)
    assert lon == pytest.approx(10.40744, abs=1e-4)


def test_decode_invalid_input() -> None:
    assert _geohash.decode("") is None
    assert _geohash.decode("abc!") is None


@pytest.mark.parametrize(("lat", "lon"), [(90.5, 0.0), (0.0, -181.0)])
def test_encode_rejects_out_of_range(lat: float, lon: float) -> None:
    with pytest.raises(ValueError):
        _geohash.encode(lat, lon)
