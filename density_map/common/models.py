"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, NamedTuple


class Coordinate(NamedTuple):
    lat: float
    lon: float


def _coerce_field(name: str, value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    # bool is an int subclass; a true/false cell is never a valid field value.
    if isinstance(value, bool):
        raise ValueError(f"Field {name} holds a boolean")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    raise ValueError(f"Field {name} holds a {type(value).__name__}")


@dataclass(frozen=True)
class RawRecord:
    action: str | None = None
    created_time: str | None = None
    bap_id: str | None = None
    transaction_id: str | None = None
    message_id: str | None = None
    category: str | None = None
    category_id: str | None = None
    start_gps: str | None = None
    end_gps: str | None = None
    start_area_code: str | None = None
    end_area_code: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "RawRecord":
        """Build a record from one upstream row.

        Scalar values are stringified, unknown keys are kept in ``extra``.
        Raises ValueError when a named field holds a list, mapping or bool.
        """
        names = [f.name for f in fields(cls) if f.name != "extra"]
        values = {name: _coerce_field(name, row.get(name)) for name in names}
        extra = {key: value for key, value in row.items() if key not in values}
        return cls(**values, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}


@dataclass
class AggregateBucket:
    pincode: str
    coords: Coordinate
    count: int = 0
    samples: list[RawRecord] = field(default_factory=list)

    def add(self, record: RawRecord) -> None:
        self.count += 1
        self.samples.append(record)

    @property
    def key(self) -> tuple[str, Coordinate]:
        return self.pincode, self.coords


@dataclass(frozen=True)
class Bounds:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def __post_init__(self) -> None:
        if self.min_lat > self.max_lat or self.min_lon > self.max_lon:
            raise ValueError(f"Inverted bounds: {self}")

    def contains(self, coord: Coordinate) -> bool:
        return self.min_lat <= coord.lat <= self.max_lat and self.min_lon <= coord.lon <= self.max_lon


@dataclass(frozen=True)
class MapFeature:
    pincode: str
    coords: Coordinate
    count: int
    tier: int
    color: str
    radius: float
    samples: tuple[RawRecord, ...]
    hidden_samples: int

    def to_geojson(self) -> dict[str, Any]:
        return {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [self.coords.lon, self.coords.lat]},
            "properties": {
                "pincode": self.pincode,
                "count": self.count,
                "tier": self.tier,
                "color": self.color,
                "radius": round(self.radius, 3),
                "samples": [sample.to_dict() for sample in self.samples],
                "hidden_samples": self.hidden_samples,
            },
        }
