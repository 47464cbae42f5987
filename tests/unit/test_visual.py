import math

import pytest

from density_map.common.models import AggregateBucket, Coordinate, RawRecord
from density_map.pipeline.visual import build_feature, color_tier, radius_for, tier_color


@pytest.mark.parametrize(
    "count, tier",
    [(0, 1), (20, 1), (21, 2), (100, 2), (101, 3), (500, 3), (501, 4), (1000, 4), (1001, 5), (50000, 5)],
)
def test_color_tier_thresholds_are_strict(count, tier):
    assert color_tier(count) == tier


def test_tier_colors_follow_palette():
    assert tier_color(5) == "#006400"
    assert tier_color(1) == "#FF0000"
    with pytest.raises(ValueError):
        tier_color(9)


def test_radius_formula_at_reference_zoom():
    assert radius_for(10, 12) == pytest.approx(math.log(11) * 120)


def test_radius_clamps_to_bounds():
    assert radius_for(0, 12) == 50
    assert radius_for(1500, 5) == 1500
    assert radius_for(10**9, 18) == 1500


def test_radius_is_monotonic_in_count_and_zoom():
    counts = [0, 1, 5, 20, 100, 1000, 5000]
    for zoom in (5, 11, 12, 18):
        radii = [radius_for(c, zoom) for c in counts]
        assert radii == sorted(radii)
    for count in counts:
        radii = [radius_for(count, z) for z in (3, 8, 12, 16, 20)]
        assert radii == sorted(radii, reverse=True)


def test_tier_is_monotonic_in_count():
    tiers = [color_tier(c) for c in range(0, 1200, 7)]
    assert tiers == sorted(tiers)


def test_radius_without_zoom_ignores_compensation():
    assert radius_for(10) == radius_for(10, 12)


def test_radius_rejects_non_positive_zoom_and_negative_count():
    with pytest.raises(ValueError):
        radius_for(10, 0)
    with pytest.raises(ValueError):
        radius_for(-1, 12)


def test_build_feature_caps_samples_and_reports_hidden():
    bucket = AggregateBucket(pincode="560001", coords=Coordinate(12.97, 77.59))
    for i in range(5):
        bucket.add(RawRecord(transaction_id=f"t-{i}"))

    feature = build_feature(bucket, 12)

    assert [s.transaction_id for s in feature.samples] == ["t-0", "t-1", "t-2"]
    assert feature.hidden_samples == 2
    assert feature.tier == 1
    assert feature.color == "#FF0000"
    assert feature.radius == pytest.approx(math.log(6) * 120)


def test_build_feature_uses_visual_config():
    visual_cfg = {
        "reference_zoom": 10,
        "base_multiplier": 100,
        "min_radius": 0,
        "max_radius": 10000,
        "default_zoom": 10,
        "tiers": [{"tier": 2, "above": 1, "color": "blue"}],
        "base_tier": {"tier": 1, "color": "grey"},
    }
    bucket = AggregateBucket(pincode="560001", coords=Coordinate(12.97, 77.59))
    bucket.add(RawRecord())
    bucket.add(RawRecord())

    feature = build_feature(bucket, 5, visual_cfg, sample_limit=1)

    assert (feature.tier, feature.color) == (2, "blue")
    assert feature.radius == pytest.approx(math.log(3) * 100 * 2)
    assert feature.hidden_samples == 1
