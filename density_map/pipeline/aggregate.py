"""Group endpoint observations into (pincode, coordinate) buckets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from density_map.common.constants import UNKNOWN_PINCODE
from density_map.common.deterministic import sorted_by_location
from density_map.common.errors import ContractError
from density_map.common.geometry import parse_coordinate, round_coordinate
from density_map.common.models import AggregateBucket, Coordinate, RawRecord
from density_map.common.pincode import normalise_pincode

ENDPOINT_MODE = "endpoint"
RECORD_MODE = "record"


@dataclass
class AggregationResult:
    buckets: list[AggregateBucket] = field(default_factory=list)
    pincodes: list[str] = field(default_factory=list)
    observations: int = 0
    dropped_endpoints: int = 0


def _first_present(*values: str | None, default: str) -> str:
    for value in values:
        normalised = normalise_pincode(value)
        if normalised:
            return normalised
    return default


def endpoint_observations(
    record: RawRecord,
    *,
    mode: str = ENDPOINT_MODE,
    unknown_pincode: str = UNKNOWN_PINCODE,
    precision: int | None = None,
) -> Iterator[tuple[str, Coordinate | None]]:
    """Yield ``(pincode, coords)`` for the start then the end endpoint.

    ``coords`` is None for an endpoint whose raw string does not parse.
    """
    start_pin = record.start_area_code
    end_pin = record.end_area_code
    if mode == RECORD_MODE:
        record_pin = _first_present(start_pin, end_pin, default=unknown_pincode)
        pins = (record_pin, record_pin)
    elif mode == ENDPOINT_MODE:
        pins = (
            _first_present(start_pin, end_pin, default=unknown_pincode),
            _first_present(end_pin, start_pin, default=unknown_pincode),
        )
    else:
        raise ValueError(f"Unknown pincode attribution mode: {mode}")

    for pin, raw_gps in zip(pins, (record.start_gps, record.end_gps)):
        coords = parse_coordinate(raw_gps)
        if coords is not None and precision is not None:
            coords = round_coordinate(coords, precision)
        yield pin, coords


def aggregate_records(
    records: Iterable[RawRecord],
    *,
    mode: str = ENDPOINT_MODE,
    unknown_pincode: str = UNKNOWN_PINCODE,
    precision: int | None = None,
) -> AggregationResult:
    grouped: dict[tuple[str, Coordinate], AggregateBucket] = {}
    pincodes: set[str] = set()
    result = AggregationResult()

    for record in records:
        observations = endpoint_observations(
            record,
            mode=mode,
            unknown_pincode=unknown_pincode,
            precision=precision,
        )
        for pin, coords in observations:
            if coords is None:
                result.dropped_endpoints += 1
                continue
            key = (pin, coords)
            bucket = grouped.get(key)
            if bucket is None:
                bucket = AggregateBucket(pincode=pin, coords=coords)
                grouped[key] = bucket
            bucket.add(record)
            pincodes.add(pin)
            result.observations += 1

    result.buckets = list(grouped.values())
    result.pincodes = sorted(pincodes)
    return result


def sort_buckets(buckets: Iterable[AggregateBucket]) -> list[AggregateBucket]:
    return sorted_by_location(buckets)


def verify_buckets(result: AggregationResult) -> None:
    """Raise ContractError when bucket bookkeeping drifted."""
    keys = [bucket.key for bucket in result.buckets]
    if len(keys) != len(set(keys)):
        raise ContractError("Duplicate aggregate bucket keys")
    for bucket in result.buckets:
        if bucket.count != len(bucket.samples):
            raise ContractError(f"Bucket {bucket.pincode}@{bucket.coords} count does not match samples")
    total = sum(bucket.count for bucket in result.buckets)
    if total != result.observations:
        raise ContractError(f"Bucket counts sum to {total}, expected {result.observations}")
