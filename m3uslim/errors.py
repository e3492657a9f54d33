"""
Exception hierarchy shared by the pipeline, config loader and I/O adapter.

Deutsch:
    Gemeinsame Ausnahmeklassen.
"""

from __future__ import annotations


class ReductionError(Exception):
    """Base class for every failure surfaced to callers."""


class ConfigurationError(ReductionError):
    """Raised when options are invalid; nothing is processed."""


class PlaylistInputError(ReductionError):
    """Raised when the input playlist is missing or unreadable."""
