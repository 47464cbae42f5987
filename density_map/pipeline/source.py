"""Upstream batch payload handling."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from density_map.common.errors import StageError
from density_map.common.fs import read_json


def extract_rows(payload: Any) -> list:
    """Return the record rows held by an upstream payload.

    The endpoint answers either with a bare array or with ``{"data": [...]}``.
    Any other shape carries no records.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]
    return []


def load_batch(path: Path) -> list:
    if not path.exists():
        raise StageError(f"Missing batch input: {path}")
    try:
        payload = read_json(path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise StageError(f"Batch input is not valid JSON: {path}") from exc
    except OSError as exc:
        raise StageError(f"Batch input is not readable: {path}") from exc
    return extract_rows(payload)
