from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from m3uslim.config import apply_overrides, load_config, options_from_mapping, preset_options, validate_options
from m3uslim.errors import ConfigurationError
from m3uslim.models import DEFAULT_ADDRESS_MARKERS, QualityTier, ReductionOptions


def test_load_yaml_config(tmp_path: Path) -> None:
    config = {
        "preset": "top-3",
        "keep_unclassified": True,
        "minimum_tier": "hd",
        "category_exclusions": ["SERIES", "FILMES"],
        "category_whitelist": ["GLOBO"],
        "max_output_mb": 1.5,
        "filter_names": False,
    }
    path = tmp_path / "options.yml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")

    options = load_config(path)

    assert options.keep_count == 3
    assert options.keep_unclassified is True
    assert options.minimum_tier is QualityTier.HD
    assert options.category_exclusions == ("SERIES", "FILMES")
    assert options.category_whitelist == ("GLOBO",)
    assert options.max_output_bytes == int(1.5 * 1024 * 1024)
    assert options.filter_names is False
    assert options.address_exclusion_markers == DEFAULT_ADDRESS_MARKERS


def test_load_json_config(tmp_path: Path) -> None:
    path = tmp_path / "options.json"
    path.write_text(json.dumps({"keep_count": 2, "max_output_bytes": 4096}), encoding="utf-8")

    options = load_config(path)

    assert options.keep_count == 2
    assert options.max_output_bytes == 4096


def test_empty_config_file_yields_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")

    assert load_config(path) == ReductionOptions()


@pytest.mark.parametrize(
    "data",
    [
        {"keep_count": 0},
        {"max_output_bytes": -1},
        {"max_output_bytes": 10, "max_output_mb": 1},
        {"category_exclusions": "SERIES"},
        {"unknown_option": True},
        {"preset": "top-10"},
        {"minimum_tier": "8K"},
        {"name_exclusion_patterns": ["(broken"]},
    ],
)
def test_invalid_mappings(data: dict) -> None:
    with pytest.raises(ConfigurationError):
        options_from_mapping(data)


def test_non_mapping_config(tmp_path: Path) -> None:
    path = tmp_path / "list.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_missing_config(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "absent.yml")


def test_validate_options_never_clamps() -> None:
    with pytest.raises(ConfigurationError):
        validate_options(ReductionOptions(max_output_bytes=-5))
    with pytest.raises(ConfigurationError):
        validate_options(ReductionOptions(keep_count=True))


def test_overrides_skip_none() -> None:
    base = preset_options("top-3")

    options = apply_overrides(base, keep_count=None, minimum_tier="FHD", category_whitelist=["GLOBO"])

    assert options.keep_count == 3
    assert options.minimum_tier is QualityTier.FHD
    assert options.category_whitelist == ("GLOBO",)


def test_unknown_preset() -> None:
    with pytest.raises(ConfigurationError):
        preset_options("everything")


def test_budget_must_hold_the_header() -> None:
    with pytest.raises(ConfigurationError):
        validate_options(ReductionOptions(max_output_bytes=3))
    with pytest.raises(ConfigurationError):
        options_from_mapping({"max_output_bytes": 7})

    validate_options(ReductionOptions(max_output_bytes=len("#EXTM3U\n")))
