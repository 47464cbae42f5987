"""Coordinate string parsing and formatting."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any

from density_map.common.constants import FINGERPRINT_PRECISION
from density_map.common.models import Coordinate


def _safe_float(token: str) -> float | None:
    try:
        value = float(token)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_coordinate(value: Any) -> Coordinate | None:
    """Parse ``"(lat,lon)"`` into a Coordinate.

    Parentheses anywhere in the string are dropped. Anything other than
    exactly two finite comma-separated numbers is rejected with ``None``.
    """
    if not isinstance(value, str):
        return None
    cleaned = value.replace("(", "").replace(")", "").strip()
    if not cleaned:
        return None

    parts = cleaned.split(",")
    if len(parts) != 2:
        return None

    lat = _safe_float(parts[0].strip())
    lon = _safe_float(parts[1].strip())
    if lat is None or lon is None:
        return None
    return Coordinate(lat, lon)


# Wide enough for any finite float written out to the requested decimals.
_FIXED_POINT = Context(prec=400)


def _to_fixed(value: float, precision: int) -> str:
    """Fixed-point text with exact halves rounded away from zero."""
    quantum = Decimal(1).scaleb(-precision)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_FIXED_POINT)
    if rounded.is_zero():
        rounded = abs(rounded)
    return format(rounded, "f")


def format_coordinate(coord: Coordinate, precision: int = FINGERPRINT_PRECISION) -> str:
    return f"{_to_fixed(coord.lat, precision)},{_to_fixed(coord.lon, precision)}"


def normalise_coordinate(value: Any, precision: int = FINGERPRINT_PRECISION) -> str | None:
    coord = parse_coordinate(value)
    if coord is None:
        return None
    return format_coordinate(coord, precision)


def round_coordinate(coord: Coordinate, precision: int) -> Coordinate:
    return Coordinate(round(coord.lat, precision), round(coord.lon, precision))


def is_plausible(coord: Coordinate) -> bool:
    return -90 <= coord.lat <= 90 and -180 <= coord.lon <= 180
