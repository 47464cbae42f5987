"""Pincode and map-bound filtering of aggregate buckets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from density_map.common.constants import DISPLAY_CAP
from density_map.common.models import AggregateBucket, Bounds


@dataclass
class ViewResult:
    visible: list[AggregateBucket] = field(default_factory=list)
    matched: int = 0


def filter_buckets(
    buckets: Iterable[AggregateBucket],
    *,
    pincode: str | None = None,
    bounds: Bounds | None = None,
    display_cap: int | None = DISPLAY_CAP,
) -> ViewResult:
    """Select the buckets to render.

    ``matched`` counts the pincode matches before the bound or cap is applied.
    The cap only applies while no bound is known.
    """
    wanted = (pincode or "").strip()
    matched = [bucket for bucket in buckets if not wanted or bucket.pincode.strip() == wanted]

    if bounds is not None:
        visible = [bucket for bucket in matched if bounds.contains(bucket.coords)]
    elif display_cap is not None:
        visible = matched[:display_cap]
    else:
        visible = list(matched)

    return ViewResult(visible=visible, matched=len(matched))
