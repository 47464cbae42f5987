"""Run report aggregation."""

from __future__ import annotations

from pathlib import Path

from density_map.common.fs import write_json
from density_map.common.geometry import is_plausible
from density_map.common.pincode import is_standard_pincode


def _quality(payload: dict) -> dict:
    buckets = payload.get("buckets", [])
    implausible = sum(1 for bucket in buckets if not is_plausible(bucket.coords))
    non_standard = sorted(pin for pin in payload.get("pincodes", []) if not is_standard_pincode(pin))
    counts = payload.get("counts", {})
    raw_rows = int(counts.get("raw_rows", 0))
    retained = int(counts.get("retained_records", 0))
    return {
        "implausible_coordinate_buckets": implausible,
        "non_standard_pincodes": non_standard,
        "retention_percent": 0.0 if raw_rows == 0 else round((retained / raw_rows) * 100, 2),
    }


def summarise_run(payload: dict) -> dict:
    quality = _quality(payload)
    warnings: list[str] = []

    if payload.get("rejected"):
        warnings.append("RECORDS_REJECTED")
    if payload.get("counts", {}).get("duplicates", 0):
        warnings.append("DUPLICATE_RECORDS_DISCARDED")
    if quality["implausible_coordinate_buckets"]:
        warnings.append("COORDINATES_OUT_OF_RANGE")
    if quality["non_standard_pincodes"]:
        warnings.append("NON_STANDARD_PINCODES_PRESENT")

    status = "success"
    if payload.get("status") == "no_data":
        status = "no_data"
    elif payload.get("rejected"):
        status = "partial"

    return {
        "run_id": payload.get("run_id"),
        "status": status,
        "zoom": payload.get("zoom"),
        "counts": payload.get("counts", {}),
        "rejected": payload.get("rejected", {}),
        "pincode_count": len(payload.get("pincodes", [])),
        "quality": quality,
        "warnings": warnings,
    }


def write_run_report(data_dir: Path, payload: dict) -> Path:
    report_path = data_dir / "out" / "reports" / "run_summary.json"
    write_json(report_path, summarise_run(payload))
    return report_path
