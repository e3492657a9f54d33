"""
Configuration loading and validation.

Options come from YAML or JSON files (validated against the bundled
``options.schema.json``), from presets, and from CLI overrides. Every path
ends in ``validate_options`` so invalid values fail before processing.

Deutsch:
    Laden und Prüfen der Konfiguration (YAML/JSON, Presets, CLI).
"""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError
from .models import DEFAULT_HEADER, QualityTier, ReductionOptions
from .policy import compile_patterns
from .schemas import schema_validator

log = logging.getLogger(__name__)

PRESETS: Dict[str, Dict[str, Any]] = {
    "single-best": {"keep_count": 1},
    "top-3": {"keep_count": 3},
}

MIN_OUTPUT_BYTES = len(f"{DEFAULT_HEADER}\n".encode("utf-8"))

OPTIONS_SCHEMA = "options.schema.json"

_LIST_FIELDS = (
    "category_exclusions",
    "category_patterns",
    "category_whitelist",
    "name_exclusion_patterns",
    "address_exclusion_markers",
)
_FLAG_FIELDS = ("keep_unclassified", "filter_categories", "filter_names", "filter_addresses")


def load_config(path: Path, base: Optional[ReductionOptions] = None) -> ReductionOptions:
    """
    Load options from a YAML/JSON file on top of ``base`` (or the defaults).

    Deutsch:
        Lädt Optionen aus einer YAML- oder JSON-Datei.
    """

    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"config file {path} not found")
    with path.open("r", encoding="utf-8") as fh:
        text = fh.read()
    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"failed to parse config {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"config {path} must contain a mapping")
    log.debug("loaded config %s", path)
    return options_from_mapping(data, base=base)


def options_from_mapping(data: Mapping[str, Any], base: Optional[ReductionOptions] = None) -> ReductionOptions:
    errors = sorted(schema_validator(OPTIONS_SCHEMA).iter_errors(dict(data)), key=lambda err: list(err.path))
    if errors:
        details = "; ".join(_format_schema_error(err) for err in errors)
        raise ConfigurationError(f"invalid configuration: {details}")

    values: Dict[str, Any] = {}
    preset = data.get("preset")
    if preset:
        values.update(PRESETS[preset])
    for key in ("keep_count", "max_output_bytes", *_FLAG_FIELDS):
        if key in data:
            values[key] = data[key]
    for key in _LIST_FIELDS:
        if key in data:
            values[key] = tuple(data[key])
    if data.get("max_output_mb") is not None:
        values["max_output_bytes"] = megabytes_to_bytes(data["max_output_mb"])
    if "minimum_tier" in data:
        values["minimum_tier"] = parse_tier(data["minimum_tier"])

    options = dataclasses.replace(base or ReductionOptions(), **values)
    validate_options(options)
    return options


def apply_overrides(options: ReductionOptions, **overrides: Any) -> ReductionOptions:
    """Replace fields whose override is not ``None``; used by the CLI."""

    values = {key: value for key, value in overrides.items() if value is not None}
    if "minimum_tier" in values and not isinstance(values["minimum_tier"], QualityTier):
        values["minimum_tier"] = parse_tier(values["minimum_tier"])
    for key in _LIST_FIELDS:
        if key in values:
            values[key] = tuple(values[key])
    updated = dataclasses.replace(options, **values)
    validate_options(updated)
    return updated


def preset_options(name: str) -> ReductionOptions:
    if name not in PRESETS:
        raise ConfigurationError(f"unknown preset {name!r}; choose from {', '.join(sorted(PRESETS))}")
    return options_from_mapping({"preset": name})


def validate_options(options: ReductionOptions) -> None:
    """
    Fail fast on values the pipeline cannot honour. Nothing is clamped.

    Deutsch:
        Bricht bei ungültigen Werten sofort ab; nichts wird angepasst.
    """

    errors = []
    if not _is_int(options.keep_count) or options.keep_count < 1:
        errors.append(f"keep_count must be a positive integer, got {options.keep_count!r}")
    if not _is_int(options.max_output_bytes) or options.max_output_bytes < MIN_OUTPUT_BYTES:
        errors.append(
            f"max_output_bytes must be an integer of at least {MIN_OUTPUT_BYTES} (the playlist header), "
            f"got {options.max_output_bytes!r}"
        )
    if options.minimum_tier is not None and not isinstance(options.minimum_tier, QualityTier):
        errors.append(f"minimum_tier must be a quality tier, got {options.minimum_tier!r}")
    for key in _LIST_FIELDS:
        value = getattr(options, key)
        if isinstance(value, str) or not all(isinstance(item, str) for item in value):
            errors.append(f"{key} must be a list of strings")
    if errors:
        raise ConfigurationError("; ".join(errors))
    compile_patterns(options.category_patterns, "category_patterns")
    compile_patterns(options.name_exclusion_patterns, "name_exclusion_patterns")


def parse_tier(value: Optional[str]) -> Optional[QualityTier]:
    if value is None or value == "":
        return None
    try:
        return QualityTier.parse(str(value))
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def megabytes_to_bytes(value: float) -> int:
    if value <= 0:
        raise ConfigurationError(f"size limit must be positive, got {value!r} MB")
    return int(value * 1024 * 1024)


def options_to_dict(options: ReductionOptions) -> Dict[str, Any]:
    data = dataclasses.asdict(options)
    data["minimum_tier"] = options.minimum_tier.name if options.minimum_tier is not None else None
    for key in _LIST_FIELDS:
        data[key] = list(data[key])
    return data


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _format_schema_error(error: Any) -> str:
    location = "/".join(str(part) for part in error.path) or "<root>"
    return f"{location}: {error.message}"
