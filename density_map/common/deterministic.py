"""Helpers for deterministic ordering of map output."""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from density_map.common.models import Coordinate

T = TypeVar("T")


def stable_sorted(items: Iterable[T], key: Callable[[T], object]) -> list[T]:
    return sorted(items, key=key)


def location_key(pincode: str, coords: Coordinate) -> tuple[str, float, float]:
    return pincode, coords.lat, coords.lon


def sorted_by_location(items: Iterable[T]) -> list[T]:
    """Order buckets or features by pincode, then latitude, then longitude."""
    return stable_sorted(items, key=lambda item: location_key(item.pincode, item.coords))
