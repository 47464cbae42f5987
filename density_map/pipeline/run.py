"""Validate, deduplicate, aggregate, filter and render one batch."""

from __future__ import annotations

import logging
import time
from collections import defaultdict
from collections.abc import Mapping
from typing import Any

from density_map.common.logging import log_event
from density_map.common.models import Bounds
from density_map.common.time_utils import elapsed_ms
from density_map.pipeline.aggregate import aggregate_records, verify_buckets
from density_map.pipeline.dedupe import deduplicate
from density_map.pipeline.source import extract_rows
from density_map.pipeline.validate import validate_row
from density_map.pipeline.view_filter import filter_buckets
from density_map.pipeline.visual import build_feature

STATUS_OK = "ok"
STATUS_NO_DATA = "no_data"


def _stage_done(
    logger: logging.Logger | None,
    stage: str,
    run_id: str | None,
    started_at: float,
    rows_in: int,
    rows_out: int,
) -> None:
    log_event(
        logger,
        f"{stage} complete",
        run_id=run_id,
        stage=stage,
        event="STAGE_END",
        status=STATUS_OK,
        duration_ms=elapsed_ms(started_at),
        rows_in=rows_in,
        rows_out=rows_out,
    )


def _empty_payload(run_id: str | None) -> dict[str, Any]:
    return {
        "run_id": run_id,
        "status": STATUS_NO_DATA,
        "counts": {
            "raw_rows": 0,
            "valid_records": 0,
            "duplicates": 0,
            "retained_records": 0,
            "observations": 0,
            "dropped_endpoints": 0,
            "buckets": 0,
            "matched_buckets": 0,
            "visible_buckets": 0,
        },
        "rejected": {},
        "pincodes": [],
        "buckets": [],
        "features": [],
        "zoom": None,
    }


def run_pipeline(
    rows: Any,
    config: dict,
    *,
    zoom: float | None = None,
    pincode: str | None = None,
    bounds: Bounds | None = None,
    run_id: str | None = None,
    logger: logging.Logger | None = None,
) -> dict[str, Any]:
    """Turn raw upstream rows into map features.

    Bad rows are counted and skipped. Only a batch that cannot be iterated
    ends the run early, with status ``no_data`` and no features.
    """
    pipeline_cfg = config["pipeline"]
    visual_cfg = config["visual"]
    view_cfg = config["view"]
    precision = pipeline_cfg["fingerprint_precision"]

    # Payload objects are unwrapped; other iterables already are the rows.
    if isinstance(rows, (Mapping, str)):
        rows = extract_rows(rows)

    try:
        raw_rows = list(rows)
    except TypeError:
        log_event(
            logger,
            "batch is not iterable",
            level=logging.WARNING,
            run_id=run_id,
            stage="validate",
            event="NO_DATA",
            status=STATUS_NO_DATA,
            error_code="BATCH_NOT_ITERABLE",
        )
        return _empty_payload(run_id)

    started_at = time.monotonic()
    rejected: dict[str, int] = defaultdict(int)
    valid = []
    for row in raw_rows:
        result = validate_row(row, precision=precision)
        if result.accepted:
            valid.append(result.record)
        else:
            rejected[result.reason] += 1
    _stage_done(logger, "validate", run_id, started_at, len(raw_rows), len(valid))

    started_at = time.monotonic()
    deduped = deduplicate(valid, precision=precision)
    _stage_done(logger, "dedupe", run_id, started_at, len(valid), len(deduped.records))

    started_at = time.monotonic()
    aggregated = aggregate_records(
        deduped.records,
        mode=pipeline_cfg["endpoint_pincode"],
        unknown_pincode=pipeline_cfg["unknown_pincode"],
        precision=pipeline_cfg["bucket_precision"],
    )
    verify_buckets(aggregated)
    _stage_done(logger, "aggregate", run_id, started_at, len(deduped.records), len(aggregated.buckets))

    started_at = time.monotonic()
    view = filter_buckets(
        aggregated.buckets,
        pincode=pincode,
        bounds=bounds,
        display_cap=view_cfg["display_cap"],
    )
    _stage_done(logger, "filter", run_id, started_at, len(aggregated.buckets), len(view.visible))

    started_at = time.monotonic()
    render_zoom = zoom if zoom is not None else visual_cfg["default_zoom"]
    features = [
        build_feature(bucket, render_zoom, visual_cfg, view_cfg["sample_display_limit"])
        for bucket in view.visible
    ]
    _stage_done(logger, "render", run_id, started_at, len(view.visible), len(features))

    return {
        "run_id": run_id,
        "status": STATUS_OK if raw_rows else STATUS_NO_DATA,
        "counts": {
            "raw_rows": len(raw_rows),
            "valid_records": len(valid),
            "duplicates": deduped.duplicates,
            "retained_records": len(deduped.records),
            "observations": aggregated.observations,
            "dropped_endpoints": aggregated.dropped_endpoints,
            "buckets": len(aggregated.buckets),
            "matched_buckets": view.matched,
            "visible_buckets": len(view.visible),
        },
        "rejected": dict(sorted(rejected.items())),
        "pincodes": aggregated.pincodes,
        "buckets": aggregated.buckets,
        "features": features,
        "zoom": render_zoom,
    }
