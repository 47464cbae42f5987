"""CLI entrypoint for the transaction density map pipeline."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from density_map.common.config_loader import load_dashboard_config
from density_map.common.constants import COMMANDS, EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS
from density_map.common.errors import PipelineError
from density_map.common.ids import generate_run_id
from density_map.common.logging import build_logger, close_logger, log_event
from density_map.common.models import Bounds
from density_map.pipeline.export import write_feature_collection, write_pincodes
from density_map.pipeline.reports import write_run_report
from density_map.pipeline.run import run_pipeline
from density_map.pipeline.source import load_batch


def _positive_float(value: str) -> float:
    parsed = float(value)
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return parsed


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--input", required=True, help="Saved upstream batch (JSON array or {data: [...]})")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--zoom", type=_positive_float, default=None)
    parser.add_argument("--pincode", default=None)
    parser.add_argument(
        "--bounds",
        nargs=4,
        type=float,
        default=None,
        metavar=("MIN_LAT", "MAX_LAT", "MIN_LON", "MAX_LON"),
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--strict", action="store_true")
    return parser.parse_args(argv)


def _bounds_from_args(args: argparse.Namespace) -> Bounds | None:
    if args.bounds is None:
        return None
    min_lat, max_lat, min_lon, max_lon = args.bounds
    return Bounds(min_lat=min_lat, max_lat=max_lat, min_lon=min_lon, max_lon=max_lon)


def execute_command(args: argparse.Namespace, config: dict, data_dir: Path, run_id: str, logger) -> dict:
    rows = load_batch(Path(args.input))
    payload = run_pipeline(
        rows,
        config,
        zoom=args.zoom,
        pincode=args.pincode,
        bounds=_bounds_from_args(args),
        run_id=run_id,
        logger=logger,
    )

    out_dir = data_dir / "out"
    write_pincodes(out_dir / "pincodes.json", payload["pincodes"])
    if args.command == "aggregate":
        write_feature_collection(out_dir / "features.geojson", payload["features"])
        write_run_report(data_dir, payload)
    return payload


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    data_dir = Path(args.data_dir)
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None

    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)
    try:
        log_event(logger, "run start", run_id=run_id, event="RUN_START", status="ok")
        try:
            config = load_dashboard_config(config_dir, overlay_config_dir=overlay_config_dir)
            payload = execute_command(args, config, data_dir, run_id, logger)
        except (PipelineError, ValueError) as exc:
            log_event(
                logger,
                f"{args.command} failed: {exc}",
                run_id=run_id,
                event="STAGE_FAIL",
                status="error",
                error_code=getattr(exc, "error_code", "INVALID_ARGUMENT"),
            )
            return EXIT_HARD_FAIL

        log_event(
            logger,
            "run end",
            run_id=run_id,
            event="RUN_END",
            status=payload["status"],
            rows_in=payload["counts"]["raw_rows"],
            rows_out=len(payload["features"]),
        )
        if payload["rejected"]:
            return EXIT_HARD_FAIL if args.strict else EXIT_PARTIAL
        if payload["status"] == "no_data":
            return EXIT_PARTIAL
        return EXIT_SUCCESS
    finally:
        close_logger(logger)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except PipelineError:
        return EXIT_HARD_FAIL
    except Exception:
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
