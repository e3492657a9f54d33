"""
Click-based command line entry point for m3uslim.

Deutsch:
    Kommandozeile zum Ausdünnen von M3U-Wiedergabelisten.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

import click

from . import __version__
from .classify import classify_name
from .config import PRESETS, apply_overrides, load_config, megabytes_to_bytes, preset_options
from .errors import ConfigurationError, PlaylistInputError, ReductionError
from .io_playlist import list_playlists, write_report
from .logging_conf import configure_logging
from .models import QualityTier, ReductionOptions
from .pipeline import ReductionResult, reduce_file

TIER_CHOICES = [tier.name for tier in QualityTier if tier is not QualityTier.UNKNOWN]


@click.group(help="Reduce M3U playlists to the best entry per channel")
@click.version_option(__version__)
@click.option("--verbose", is_flag=True, help="Enable verbose logging output.")
@click.option("--quiet", is_flag=True, help="Only log warnings and errors.")
def cli(verbose: bool, quiet: bool) -> None:
    """
    Root CLI group configuring logging before subcommands execute.

    Deutsch:
        Richtet das Logging ein, bevor ein Unterbefehl läuft.
    """

    try:
        configure_logging(verbose=verbose, quiet=quiet)
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc


@cli.command("reduce")
@click.option("--input", "inp", required=True, type=click.Path(path_type=Path, dir_okay=False))
@click.option(
    "--output",
    "out",
    default=None,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Output playlist, defaults to <input>_processed.m3u.",
)
@click.option("--config", "config_path", default=None, type=click.Path(path_type=Path, exists=True, dir_okay=False))
@click.option("--preset", default=None, type=click.Choice(sorted(PRESETS)), help="Retention preset.")
@click.option("--keep", "keep_count", default=None, type=int, help="Entries kept per channel.")
@click.option(
    "--keep-unclassified/--drop-unclassified",
    default=None,
    help="Keep names without a recognisable quality token (ranked lowest).",
)
@click.option("--minimum-tier", default=None, type=click.Choice(TIER_CHOICES, case_sensitive=False))
@click.option("--max-size-mb", default=None, type=float, help="Output size limit in MiB.")
@click.option("--max-bytes", default=None, type=int, help="Output size limit in bytes.")
@click.option("--exclude-category", multiple=True, help="Category excluded by exact match (repeatable).")
@click.option("--whitelist", multiple=True, help="Category substring that is always admitted (repeatable).")
@click.option("--exclude-address", multiple=True, help="Address substring excluded (repeatable).")
@click.option("--no-category-filter", is_flag=True, default=False, help="Disable the category pass.")
@click.option("--no-name-filter", is_flag=True, default=False, help="Disable the name pass.")
@click.option("--no-address-filter", is_flag=True, default=False, help="Disable the address pass.")
@click.option("--report", "report_path", default=None, type=click.Path(path_type=Path, dir_okay=False))
def cli_reduce(**kwargs: Any) -> None:
    """Deduplicate, filter and size-limit a playlist."""

    logger = logging.getLogger(__name__)
    inp: Path = kwargs["inp"]
    try:
        options = build_options(**kwargs)
        result: ReductionResult = reduce_file(inp, kwargs["out"], options)
    except PlaylistInputError as exc:
        candidates = list_playlists(inp.parent)
        if candidates:
            logger.info("playlists in %s: %s", inp.parent, ", ".join(path.name for path in candidates))
        raise click.ClickException(str(exc)) from exc
    except ReductionError as exc:
        raise click.ClickException(str(exc)) from exc

    summary = result.summary
    logger.info(
        "%d -> %d entries (%d duplicates, %d over budget) -> %s",
        summary.input_entries,
        summary.output_entries,
        summary.duplicates_dropped,
        summary.budget_dropped,
        result.output_path,
    )
    for label, count in summary.tiers.items():
        logger.info("  %s: %d", label, count)
    if kwargs.get("report_path"):
        write_report(kwargs["report_path"], summary.to_dict())
        logger.info("report written to %s", kwargs["report_path"])


@cli.command("classify")
@click.argument("names", nargs=-1, required=True)
def cli_classify(names: Tuple[str, ...]) -> None:
    """Show identity and quality for channel names."""

    for name in names:
        result = classify_name(name)
        click.echo(
            f"{name!r}: identity={result.canonical_identity!r} tier={result.tier.label} "
            f"rank={int(result.tier)} pixels={result.pixels} rule={result.matched_rule or '-'}"
        )


def build_options(**kwargs: Any) -> ReductionOptions:
    options = ReductionOptions()
    if kwargs.get("preset"):
        options = preset_options(kwargs["preset"])
    if kwargs.get("config_path"):
        options = load_config(kwargs["config_path"], base=options)
    if kwargs.get("max_size_mb") is not None and kwargs.get("max_bytes") is not None:
        raise ConfigurationError("--max-size-mb and --max-bytes are mutually exclusive")
    max_bytes = kwargs.get("max_bytes")
    if kwargs.get("max_size_mb") is not None:
        max_bytes = megabytes_to_bytes(kwargs["max_size_mb"])
    return apply_overrides(
        options,
        keep_count=kwargs.get("keep_count"),
        keep_unclassified=kwargs.get("keep_unclassified"),
        minimum_tier=kwargs.get("minimum_tier"),
        max_output_bytes=max_bytes,
        category_exclusions=_extend(options.category_exclusions, kwargs.get("exclude_category")),
        category_whitelist=_extend(options.category_whitelist, kwargs.get("whitelist")),
        address_exclusion_markers=_extend(options.address_exclusion_markers, kwargs.get("exclude_address")),
        filter_categories=False if kwargs.get("no_category_filter") else None,
        filter_names=False if kwargs.get("no_name_filter") else None,
        filter_addresses=False if kwargs.get("no_address_filter") else None,
    )


def _extend(current: Iterable[str], extra: Optional[Iterable[str]]) -> Optional[Tuple[str, ...]]:
    items = [item.strip() for item in extra or () if item and item.strip()]
    if not items:
        return None
    return tuple(current) + tuple(items)


def main(argv: Optional[Iterable[str]] = None) -> int:
    """
    Entry point returning an exit code for console scripts.
    """

    argv_list = list(argv or sys.argv[1:])
    try:
        cli.main(args=argv_list, prog_name="m3uslim", standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return 1
    except SystemExit as exc:
        return int(exc.code or 0)
    return 0


if __name__ == "__main__":
    sys.exit(main())
