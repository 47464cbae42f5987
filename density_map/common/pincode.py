"""Postal (PIN) code normalisation and validation."""

from __future__ import annotations

import re
from typing import Any

from density_map.common.constants import NULL_SENTINELS

STANDARD_PINCODE_RE = re.compile(r"^[1-9][0-9]{5}$")


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        cleaned = value.strip()
        # Upstream spreadsheet exports write absent cells as these literals.
        return not cleaned or cleaned in NULL_SENTINELS
    return False


def normalise_pincode(value: Any) -> str | None:
    if is_missing(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def is_standard_pincode(value: str) -> bool:
    return bool(STANDARD_PINCODE_RE.match(value))
