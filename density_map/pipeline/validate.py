"""Record validation ahead of deduplication."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from density_map.common.constants import FINGERPRINT_PRECISION, REQUIRED_FIELDS
from density_map.common.geometry import normalise_coordinate
from density_map.common.models import RawRecord
from density_map.common.pincode import is_missing

NOT_A_MAPPING = "NOT_A_MAPPING"
MALFORMED_FIELD = "MALFORMED_FIELD"
MISSING_FIELD = "MISSING_FIELD"
MALFORMED_COORDINATE = "MALFORMED_COORDINATE"


@dataclass(frozen=True)
class ValidationResult:
    record: RawRecord | None
    reason: str | None = None

    @property
    def accepted(self) -> bool:
        return self.record is not None


def validate_row(row: Any, *, precision: int = FINGERPRINT_PRECISION) -> ValidationResult:
    if not isinstance(row, Mapping):
        return ValidationResult(None, NOT_A_MAPPING)

    try:
        record = RawRecord.from_mapping(row)
    except ValueError:
        return ValidationResult(None, MALFORMED_FIELD)

    if any(is_missing(getattr(record, name)) for name in REQUIRED_FIELDS):
        return ValidationResult(None, MISSING_FIELD)

    if (
        normalise_coordinate(record.start_gps, precision) is None
        or normalise_coordinate(record.end_gps, precision) is None
    ):
        return ValidationResult(None, MALFORMED_COORDINATE)

    return ValidationResult(record)


def is_valid_record(row: Any) -> bool:
    return validate_row(row).accepted
