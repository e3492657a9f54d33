"""
Logging configuration for the m3uslim command line.

Deutsch:
    Logging-Konfiguration für die Kommandozeile.
"""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError

LOGLEVEL_ENV = "M3USLIM_LOGLEVEL"

_VERBOSE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
_QUIET_FORMAT = "%(levelname)s: %(message)s"


def resolve_level(verbose: bool = False, quiet: bool = False) -> int:
    """
    Pick the log level for a run. ``M3USLIM_LOGLEVEL`` wins over the flags.

    Deutsch:
        Bestimmt den Log-Level; die Umgebungsvariable hat Vorrang.
    """

    if verbose and quiet:
        raise ConfigurationError("--verbose and --quiet are mutually exclusive")
    default_name = "DEBUG" if verbose else "WARNING" if quiet else "INFO"
    level_name = os.getenv(LOGLEVEL_ENV, default_name).strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ConfigurationError(f"unknown log level {level_name!r} in {LOGLEVEL_ENV}")
    return level


def configure_logging(verbose: bool = False, quiet: bool = False) -> int:
    """
    Configure the root logger once and return the effective level.

    Quiet runs only report warnings (an all-excluded playlist, for example)
    and drop the timestamp column.

    Deutsch:
        Richtet das Root-Logging ein; im Quiet-Modus nur Warnungen.
    """

    level = resolve_level(verbose=verbose, quiet=quiet)
    root = logging.getLogger()

    if len(root.handlers) > 0:
        root.setLevel(level)
        return level

    logging.basicConfig(level=level, format=_QUIET_FORMAT if quiet else _VERBOSE_FORMAT)
    return level
