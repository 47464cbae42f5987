from pathlib import Path

import pytest

from density_map.cli import main, parse_args, run_command
from density_map.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from density_map.common.fs import read_json, write_json


def _rows():
    return [
        {
            "action": "search",
            "bap_id": "bap.example",
            "transaction_id": "t-1",
            "category": "Auto",
            "start_gps": "(12.97000,77.59000)",
            "end_gps": "(12.98000,77.60000)",
            "start_area_code": "560001",
            "end_area_code": "560002",
        },
        {
            "action": "search",
            "bap_id": "bap.example",
            "transaction_id": "t-2",
            "category": "Auto",
            "start_gps": "(12.98000,77.60000)",
            "end_gps": "(12.97000,77.59000)",
            "start_area_code": "560002",
            "end_area_code": "560001",
        },
    ]


def _args(batch: Path, data_dir: Path, *extra: str):
    return parse_args(
        [
            "aggregate",
            "--input",
            str(batch),
            "--config-dir",
            "config",
            "--data-dir",
            str(data_dir),
            "--run-id",
            "run-test",
            *extra,
        ]
    )


@pytest.mark.integration
def test_cli_aggregate_generates_expected_artifacts(tmp_path: Path):
    batch = tmp_path / "batch.json"
    write_json(batch, {"data": _rows()})
    data_dir = tmp_path / "data"

    exit_code = run_command(_args(batch, data_dir, "--zoom", "12"))

    assert exit_code == EXIT_SUCCESS
    collection = read_json(data_dir / "out" / "features.geojson")
    assert collection["type"] == "FeatureCollection"
    assert [f["properties"]["pincode"] for f in collection["features"]] == ["560001", "560002"]
    assert collection["features"][0]["geometry"]["coordinates"] == [77.59, 12.97]
    assert collection["features"][0]["properties"]["count"] == 1
    assert read_json(data_dir / "out" / "pincodes.json") == {"pincodes": ["560001", "560002"]}

    summary = read_json(data_dir / "out" / "reports" / "run_summary.json")
    assert summary["counts"]["duplicates"] == 1
    assert summary["status"] == "success"
    assert (data_dir / "run_meta" / "run-test.log.jsonl").exists()


@pytest.mark.integration
def test_cli_pincodes_command_skips_features(tmp_path: Path):
    batch = tmp_path / "batch.json"
    write_json(batch, _rows())
    data_dir = tmp_path / "data"

    args = _args(batch, data_dir)
    args.command = "pincodes"

    assert run_command(args) == EXIT_SUCCESS
    assert (data_dir / "out" / "pincodes.json").exists()
    assert not (data_dir / "out" / "features.geojson").exists()


@pytest.mark.integration
def test_cli_rejected_rows_are_partial_or_fail_in_strict_mode(tmp_path: Path):
    batch = tmp_path / "batch.json"
    write_json(batch, [*_rows(), {"transaction_id": "t-3", "start_gps": "null"}])

    assert run_command(_args(batch, tmp_path / "lenient")) == EXIT_PARTIAL
    assert run_command(_args(batch, tmp_path / "strict", "--strict")) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_missing_input_and_bad_bounds_hard_fail(tmp_path: Path):
    assert run_command(_args(tmp_path / "missing.json", tmp_path / "data")) == EXIT_HARD_FAIL

    batch = tmp_path / "batch.json"
    write_json(batch, _rows())
    assert run_command(_args(batch, tmp_path / "data", "--bounds", "13", "12", "77", "78")) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_unrecognised_payload_shape_is_no_data(tmp_path: Path):
    batch = tmp_path / "batch.json"
    write_json(batch, {"error": "Response from upstream is not valid JSON"})

    assert main(["aggregate", "--input", str(batch), "--data-dir", str(tmp_path / "data")]) == EXIT_PARTIAL
    summary = read_json(tmp_path / "data" / "out" / "reports" / "run_summary.json")
    assert summary["status"] == "no_data"
