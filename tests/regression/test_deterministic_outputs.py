from pathlib import Path

import pytest

from density_map.cli import parse_args, run_command
from density_map.common.fs import read_json, write_json


def _rows():
    rows = []
    for i in range(12):
        rows.append(
            {
                "transaction_id": f"t-{i}",
                "category": "Auto" if i % 2 else "Cab",
                "start_gps": f"({12.9 + (i % 3) / 100:.5f},77.59000)",
                "end_gps": f"({13.0 + i / 1000:.5f},77.70000)",
                "start_area_code": f"56000{i % 3}",
                "end_area_code": "560099",
            }
        )
    # Same trip as t-0 recorded in the opposite direction.
    first = rows[0]
    rows.append(
        {
            **first,
            "transaction_id": "t-rev",
            "start_gps": first["end_gps"],
            "end_gps": first["start_gps"],
            "start_area_code": first["end_area_code"],
            "end_area_code": first["start_area_code"],
        }
    )
    return rows


def _run_once(batch: Path, data_dir: Path, run_id: str) -> None:
    args = parse_args(
        [
            "aggregate",
            "--input",
            str(batch),
            "--config-dir",
            "config",
            "--data-dir",
            str(data_dir),
            "--zoom",
            "11",
            "--run-id",
            run_id,
        ]
    )
    assert run_command(args) == 0


@pytest.mark.regression
def test_feature_output_is_byte_stable_for_same_inputs(tmp_path: Path):
    batch = tmp_path / "batch.json"
    write_json(batch, _rows())

    _run_once(batch, tmp_path / "first", "run-a")
    _run_once(batch, tmp_path / "second", "run-b")

    first_bytes = (tmp_path / "first" / "out" / "features.geojson").read_bytes()
    second_bytes = (tmp_path / "second" / "out" / "features.geojson").read_bytes()
    assert first_bytes == second_bytes


@pytest.mark.regression
def test_fixture_snapshot_counts(tmp_path: Path):
    batch = tmp_path / "batch.json"
    write_json(batch, _rows())
    _run_once(batch, tmp_path / "data", "run-fixture")

    collection = read_json(tmp_path / "data" / "out" / "features.geojson")
    counts = {
        (f["properties"]["pincode"], tuple(f["geometry"]["coordinates"])): f["properties"]["count"]
        for f in collection["features"]
    }

    assert counts[("560000", (77.59, 12.9))] == 4
    assert counts[("560001", (77.59, 12.91))] == 4
    assert counts[("560002", (77.59, 12.92))] == 4
    assert sum(counts.values()) == 24
    assert {pin for pin, _ in counts} == {"560000", "560001", "560002", "560099"}

    summary = read_json(tmp_path / "data" / "out" / "reports" / "run_summary.json")
    assert summary["counts"]["duplicates"] == 1
    assert summary["quality"]["non_standard_pincodes"] == []
    assert summary["status"] == "success"
