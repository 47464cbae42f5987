"""Direction-insensitive deduplication of validated records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from density_map.common.constants import FINGERPRINT_PRECISION
from density_map.common.geometry import normalise_coordinate
from density_map.common.models import RawRecord
from density_map.common.pincode import normalise_pincode


@dataclass
class DedupeResult:
    records: list[RawRecord] = field(default_factory=list)
    duplicates: int = 0
    unfingerprinted: int = 0


def build_fingerprints(record: RawRecord, precision: int = FINGERPRINT_PRECISION) -> tuple[str, str] | None:
    """Return ``(forward, reverse)`` keys for a record.

    A trip recorded end-to-start yields a forward key equal to the original
    trip's reverse key.
    """
    start = normalise_coordinate(record.start_gps, precision)
    end = normalise_coordinate(record.end_gps, precision)
    if start is None or end is None:
        return None

    start_pin = normalise_pincode(record.start_area_code) or ""
    end_pin = normalise_pincode(record.end_area_code) or ""
    forward = "|".join((start, end, start_pin, end_pin))
    reverse = "|".join((end, start, end_pin, start_pin))
    return forward, reverse


def _seen_before(fingerprints: tuple[str, str], seen: set[str]) -> bool:
    forward, reverse = fingerprints
    if forward in seen or reverse in seen:
        return True
    seen.add(forward)
    return False


def is_duplicate(record: RawRecord, seen: set[str], precision: int = FINGERPRINT_PRECISION) -> bool:
    """Check a record against ``seen``, remembering it when new.

    Records that cannot be fingerprinted count as duplicates so they never
    reach aggregation.
    """
    fingerprints = build_fingerprints(record, precision)
    if fingerprints is None:
        return True
    return _seen_before(fingerprints, seen)


def deduplicate(records: Iterable[RawRecord], precision: int = FINGERPRINT_PRECISION) -> DedupeResult:
    result = DedupeResult()
    seen: set[str] = set()
    for record in records:
        fingerprints = build_fingerprints(record, precision)
        if fingerprints is None:
            result.unfingerprinted += 1
            continue
        if _seen_before(fingerprints, seen):
            result.duplicates += 1
            continue
        result.records.append(record)
    return result
