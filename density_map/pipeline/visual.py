"""Colour tier and radius derived from a bucket's count."""

from __future__ import annotations

import math
from typing import Sequence

from density_map.common.constants import (
    BASE_RADIUS_MULTIPLIER,
    BASE_TIER,
    DEFAULT_TIERS,
    MAX_RADIUS,
    MIN_RADIUS,
    REFERENCE_ZOOM,
    SAMPLE_DISPLAY_LIMIT,
)
from density_map.common.models import AggregateBucket, MapFeature
from density_map.common.scaling import clamp

Tier = tuple[int, float, str]


def _match_tier(count: int, tiers: Sequence[Tier], base_tier: tuple[int, str]) -> tuple[int, str]:
    for tier, above, color in tiers:
        if count > above:
            return tier, color
    return base_tier


def color_tier(count: int, tiers: Sequence[Tier] = DEFAULT_TIERS, base_tier: tuple[int, str] = BASE_TIER) -> int:
    return _match_tier(count, tiers, base_tier)[0]


def tier_color(tier: int, tiers: Sequence[Tier] = DEFAULT_TIERS, base_tier: tuple[int, str] = BASE_TIER) -> str:
    for candidate, _above, color in tiers:
        if candidate == tier:
            return color
    if tier == base_tier[0]:
        return base_tier[1]
    raise ValueError(f"Unknown tier: {tier}")


def radius_for(
    count: int,
    zoom: float | None = None,
    *,
    reference_zoom: float = REFERENCE_ZOOM,
    base_multiplier: float = BASE_RADIUS_MULTIPLIER,
    min_radius: float = MIN_RADIUS,
    max_radius: float = MAX_RADIUS,
) -> float:
    """Circle radius in metres for a bucket of ``count`` observations.

    Grows with ln(count + 1) and shrinks as the map zooms in past
    ``reference_zoom``. Without a zoom the radius depends on count alone.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if zoom is None:
        scale = 1.0
    elif zoom <= 0:
        raise ValueError(f"zoom must be positive, got {zoom}")
    else:
        scale = reference_zoom / zoom
    return clamp(math.log(count + 1) * base_multiplier * scale, minimum=min_radius, maximum=max_radius)


def tiers_from_config(visual_cfg: dict) -> tuple[list[Tier], tuple[int, str]]:
    tiers = [(int(t["tier"]), t["above"], str(t["color"])) for t in visual_cfg["tiers"]]
    base = visual_cfg["base_tier"]
    return tiers, (int(base["tier"]), str(base["color"]))


def build_feature(
    bucket: AggregateBucket,
    zoom: float | None = None,
    visual_cfg: dict | None = None,
    sample_limit: int = SAMPLE_DISPLAY_LIMIT,
) -> MapFeature:
    if visual_cfg is None:
        tiers, base_tier = list(DEFAULT_TIERS), BASE_TIER
        radius = radius_for(bucket.count, zoom)
    else:
        tiers, base_tier = tiers_from_config(visual_cfg)
        radius = radius_for(
            bucket.count,
            zoom,
            reference_zoom=visual_cfg["reference_zoom"],
            base_multiplier=visual_cfg["base_multiplier"],
            min_radius=visual_cfg["min_radius"],
            max_radius=visual_cfg["max_radius"],
        )
    tier, color = _match_tier(bucket.count, tiers, base_tier)
    shown = tuple(bucket.samples[:sample_limit])
    return MapFeature(
        pincode=bucket.pincode,
        coords=bucket.coords,
        count=bucket.count,
        tier=tier,
        color=color,
        radius=radius,
        samples=shown,
        hidden_samples=len(bucket.samples) - len(shown),
    )
