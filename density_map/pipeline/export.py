"""Feature collection export."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from density_map.common.deterministic import sorted_by_location
from density_map.common.fs import write_json
from density_map.common.models import MapFeature


def build_feature_collection(features: Iterable[MapFeature]) -> dict:
    ordered = sorted_by_location(features)
    return {
        "type": "FeatureCollection",
        "features": [feature.to_geojson() for feature in ordered],
    }


def write_feature_collection(path: Path, features: Iterable[MapFeature]) -> Path:
    write_json(path, build_feature_collection(features))
    return path


def write_pincodes(path: Path, pincodes: list[str]) -> Path:
    write_json(path, {"pincodes": sorted(pincodes)})
    return path
