"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

from density_map.common.errors import ConfigError

ENDPOINT_PINCODE_MODES = ("endpoint", "record")


def _assert_mapping(obj, ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_number(value, ctx: str, *, positive: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{ctx} must be a number")
    if positive and value <= 0:
        raise ConfigError(f"{ctx} must be positive")


def _assert_precision(value, ctx: str, *, nullable: bool) -> None:
    if value is None and nullable:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{ctx} must be a non-negative integer")


def validate_pipeline_section(cfg: dict, *, allow_unknown: bool = False) -> dict:
    known = {"fingerprint_precision", "bucket_precision", "endpoint_pincode", "unknown_pincode"}
    _assert_mapping(cfg, "pipeline")
    _assert_required_keys(cfg, known, "pipeline")
    _assert_no_unknown_keys(cfg, known, "pipeline", allow_unknown)

    _assert_precision(cfg["fingerprint_precision"], "pipeline.fingerprint_precision", nullable=False)
    _assert_precision(cfg["bucket_precision"], "pipeline.bucket_precision", nullable=True)
    if cfg["endpoint_pincode"] not in ENDPOINT_PINCODE_MODES:
        raise ConfigError(
            f"pipeline.endpoint_pincode must be one of {', '.join(ENDPOINT_PINCODE_MODES)}"
        )
    if not isinstance(cfg["unknown_pincode"], str) or not cfg["unknown_pincode"].strip():
        raise ConfigError("pipeline.unknown_pincode must be a non-empty string")
    return cfg


def validate_visual_section(cfg: dict, *, allow_unknown: bool = False) -> dict:
    known = {
        "reference_zoom",
        "base_multiplier",
        "min_radius",
        "max_radius",
        "default_zoom",
        "tiers",
        "base_tier",
    }
    _assert_mapping(cfg, "visual")
    _assert_required_keys(cfg, known, "visual")
    _assert_no_unknown_keys(cfg, known, "visual", allow_unknown)

    for key in ("reference_zoom", "base_multiplier", "default_zoom"):
        _assert_number(cfg[key], f"visual.{key}", positive=True)
    _assert_number(cfg["min_radius"], "visual.min_radius")
    _assert_number(cfg["max_radius"], "visual.max_radius")
    if cfg["min_radius"] > cfg["max_radius"]:
        raise ConfigError("visual.min_radius must not exceed visual.max_radius")

    if not isinstance(cfg["tiers"], list) or not cfg["tiers"]:
        raise ConfigError("visual.tiers must be a non-empty list")
    previous_tier = None
    previous_above = None
    for idx, tier in enumerate(cfg["tiers"]):
        ctx = f"visual.tiers[{idx}]"
        _assert_mapping(tier, ctx)
        _assert_required_keys(tier, {"tier", "above", "color"}, ctx)
        _assert_number(tier["tier"], f"{ctx}.tier")
        _assert_number(tier["above"], f"{ctx}.above")
        if previous_above is not None and tier["above"] >= previous_above:
            raise ConfigError("visual.tiers thresholds must be strictly descending")
        if previous_tier is not None and tier["tier"] >= previous_tier:
            raise ConfigError("visual.tiers must be listed deepest first")
        previous_above = tier["above"]
        previous_tier = tier["tier"]

    _assert_mapping(cfg["base_tier"], "visual.base_tier")
    _assert_required_keys(cfg["base_tier"], {"tier", "color"}, "visual.base_tier")
    _assert_number(cfg["base_tier"]["tier"], "visual.base_tier.tier")
    if cfg["base_tier"]["tier"] >= previous_tier:
        raise ConfigError("visual.base_tier must be below every listed tier")
    return cfg


def validate_view_section(cfg: dict, *, allow_unknown: bool = False) -> dict:
    known = {"display_cap", "sample_display_limit"}
    _assert_mapping(cfg, "view")
    _assert_required_keys(cfg, known, "view")
    _assert_no_unknown_keys(cfg, known, "view", allow_unknown)

    _assert_precision(cfg["display_cap"], "view.display_cap", nullable=True)
    _assert_precision(cfg["sample_display_limit"], "view.sample_display_limit", nullable=False)
    return cfg


def validate_dashboard_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"pipeline", "visual", "view"}
    _assert_mapping(cfg, "dashboard config")
    _assert_required_keys(cfg, top_required, "dashboard config")
    _assert_no_unknown_keys(cfg, top_required, "dashboard config", allow_unknown)

    validate_pipeline_section(cfg["pipeline"], allow_unknown=allow_unknown)
    validate_visual_section(cfg["visual"], allow_unknown=allow_unknown)
    validate_view_section(cfg["view"], allow_unknown=allow_unknown)
    return cfg
