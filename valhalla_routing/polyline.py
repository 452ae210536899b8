#Purpose: Encoded polyline codec (the compact ASCII shape format used by Valhalla).
#Valhalla returns leg/trace shapes with 6 decimal places of precision,
#Google-style polylines use 5. Both are handled through the precision argument.
#Format per value:
#scale by 10^precision -> delta from previous point -> zig-zag fold ->
#5-bit groups, least significant first, 0x20 = "more groups follow", +63 -> ASCII

from __future__ import annotations

import math
from typing import Iterable, List, Tuple

from .errors import InvalidArgumentError, PolylineFormatError

#internal coordinate type :(lat,lon)
LatLon = Tuple[float, float]

DEFAULT_PRECISION = 6
MIN_PRECISION = 0
MAX_PRECISION = 10


def _check_precision(precision: int) -> None:
    if not isinstance(precision, int) or isinstance(precision, bool):
        raise InvalidArgumentError(f"Precision must be an integer, got {precision!r}.")
    if precision < MIN_PRECISION or precision > MAX_PRECISION:
        raise InvalidArgumentError(
            f"Precision must be between {MIN_PRECISION} and {MAX_PRECISION}, got {precision}."
        )


def _round_half_away(value: float) -> int:
    #compare the fraction; abs(value) + 0.5 can itself round up
    magnitude = abs(value)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return int(math.copysign(whole, value))


def _encode_value(value: int, out: List[str]) -> None:
    folded = ~(value << 1) if value < 0 else value << 1
    while folded >= 0x20:
        out.append(chr((0x20 | (folded & 0x1F)) + 63))
        folded >>= 5
    out.append(chr(folded + 63))


def _decode_value(encoded: str, index: int) -> Tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if index >= len(encoded):
            raise PolylineFormatError("Malformed or truncated polyline string: unexpected end of input.")
        byte = ord(encoded[index]) - 63
        if byte < 0 or byte > 0x3F:
            raise PolylineFormatError(
                f"Malformed polyline string: invalid character {encoded[index]!r} at position {index}."
            )
        index += 1
        result |= (byte & 0x1F) << shift
        shift += 5
        if byte < 0x20:
            break
    value = ~(result >> 1) if result & 1 else result >> 1
    return value, index


def encode(coordinates: Iterable[LatLon], precision: int = DEFAULT_PRECISION) -> str:
    """
    Encode (lat, lon) pairs into a polyline string.

    Returns "" for an empty sequence.
    Raises InvalidArgumentError when precision is outside [0, 10].
    """
    _check_precision(precision)

    factor = 10 ** precision
    out: List[str] = []
    prev_lat = 0
    prev_lon = 0
    for lat, lon in coordinates:
        lat_scaled = _round_half_away(lat * factor)
        lon_scaled = _round_half_away(lon * factor)

        #latitude delta always goes first
        _encode_value(lat_scaled - prev_lat, out)
        _encode_value(lon_scaled - prev_lon, out)

        prev_lat = lat_scaled
        prev_lon = lon_scaled
    return "".join(out)


def decode(encoded: str, precision: int = DEFAULT_PRECISION) -> List[LatLon]:
    """
    Decode a polyline string into a list of (lat, lon) pairs.

    Raises:
        InvalidArgumentError: precision outside [0, 10]
        PolylineFormatError: text ends in the middle of a value (or has a latitude without longitude)
    """
    _check_precision(precision)
    if encoded is None:
        raise InvalidArgumentError("Encoded polyline must not be None.")
    if not encoded:
        return []

    factor = 10 ** precision
    coordinates: List[LatLon] = []
    index = 0
    lat = 0
    lon = 0
    while index < len(encoded):
        delta_lat, index = _decode_value(encoded, index)
        delta_lon, index = _decode_value(encoded, index)
        lat += delta_lat
        lon += delta_lon
        coordinates.append((lat / factor, lon / factor))
    return coordinates
