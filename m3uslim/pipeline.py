"""
High-level reduction pipeline.

text -> parse -> policy -> classify -> deduplicate -> budget -> serialize.
Options are validated before the first stage; output is produced only once
every stage has completed.

Deutsch:
    Orchestrierung der Reduktion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .budget import ensure_header_fits, select_within_budget
from .classify import ClassificationStats, classify_entries
from .config import options_to_dict, validate_options
from .dedup import count_dropped, deduplicate_channels
from .errors import PlaylistInputError
from .io_playlist import default_output_path, read_playlist, write_playlist
from .models import ClassifiedChannel, PlaylistDocument, QualityTier, ReductionOptions
from .parser import ParseStats, parse_playlist
from .policy import PolicyFilter, PolicyStats
from .serializer import serialize_playlist

log = logging.getLogger(__name__)

OUTCOME_OK = "ok"
OUTCOME_NO_INPUT = "no_input"
OUTCOME_ALL_EXCLUDED = "all_excluded"


@dataclass
class ReductionSummary:
    """
    Structured counters for one pipeline run. Reporting only; nothing in the
    pipeline reads these values back.
    """

    parse: ParseStats
    policy: PolicyStats
    classification: ClassificationStats
    duplicates_dropped: int = 0
    budget_dropped: int = 0
    output_entries: int = 0
    output_bytes: int = 0
    max_output_bytes: int = 0
    tiers: Dict[str, int] = field(default_factory=dict)

    @property
    def input_entries(self) -> int:
        return self.parse.entries

    @property
    def removed_entries(self) -> int:
        return self.input_entries - self.output_entries

    @property
    def outcome(self) -> str:
        if self.input_entries == 0:
            return OUTCOME_NO_INPUT
        if self.output_entries == 0:
            return OUTCOME_ALL_EXCLUDED
        return OUTCOME_OK

    def reduction_percent(self) -> float:
        if not self.input_entries:
            return 0.0
        return round(self.removed_entries / self.input_entries * 100, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome,
            "input_entries": self.input_entries,
            "output_entries": self.output_entries,
            "removed_entries": self.removed_entries,
            "reduction_percent": self.reduction_percent(),
            "output_bytes": self.output_bytes,
            "max_output_bytes": self.max_output_bytes,
            "parse": self.parse.to_dict(),
            "policy": self.policy.to_dict(),
            "classification": self.classification.to_dict(),
            "duplicates_dropped": self.duplicates_dropped,
            "budget_dropped": self.budget_dropped,
            "tiers": dict(self.tiers),
        }


@dataclass
class ReductionResult:
    document: PlaylistDocument
    text: str
    summary: ReductionSummary
    channels: List[ClassifiedChannel]
    output_path: Optional[Path] = None


def reduce_document(
    document: PlaylistDocument, parse_stats: ParseStats, options: ReductionOptions
) -> ReductionResult:
    validate_options(options)
    ensure_header_fits(document.header_size(), options.max_output_bytes)
    policy = PolicyFilter.from_options(options)

    admitted, policy_stats = policy.apply(document.entries)
    classified, classification_stats = classify_entries(
        admitted,
        keep_unclassified=options.keep_unclassified,
        minimum_tier=options.minimum_tier,
    )
    deduplicated, decisions = deduplicate_channels(classified, options.keep_count)
    selection = select_within_budget(deduplicated, document.header_size(), options.max_output_bytes)

    output = document.with_entries(channel.entry for channel in selection.admitted)
    text = serialize_playlist(output)
    summary = ReductionSummary(
        parse=parse_stats,
        policy=policy_stats,
        classification=classification_stats,
        duplicates_dropped=count_dropped(decisions),
        budget_dropped=len(selection.rejected),
        output_entries=len(output),
        output_bytes=selection.total_bytes,
        max_output_bytes=options.max_output_bytes,
        tiers=_tier_counts(selection.admitted),
    )
    if summary.outcome == OUTCOME_ALL_EXCLUDED:
        log.warning("all %d input entries were excluded", summary.input_entries)
    log.info(
        "reduced %d -> %d entries (%.1f%%), %d bytes",
        summary.input_entries,
        summary.output_entries,
        summary.reduction_percent(),
        summary.output_bytes,
    )
    return ReductionResult(document=output, text=text, summary=summary, channels=selection.admitted)


def reduce_playlist(text: Optional[str], options: Optional[ReductionOptions] = None) -> ReductionResult:
    """
    Run the full pipeline over playlist text and return the reduced playlist.

    Deutsch:
        Führt die gesamte Pipeline über den Playlist-Text aus.
    """

    options = options or ReductionOptions()
    validate_options(options)
    if text is None:
        raise PlaylistInputError("no playlist text supplied")
    if isinstance(text, bytes):
        raise PlaylistInputError("playlist text must be decoded before reduction")
    log.debug("options: %s", options_to_dict(options))
    document, parse_stats = parse_playlist(text)
    log.info("parsed %d entries", parse_stats.entries)
    return reduce_document(document, parse_stats, options)


def reduce_file(
    input_path: Path,
    output_path: Optional[Path] = None,
    options: Optional[ReductionOptions] = None,
) -> ReductionResult:
    options = options or ReductionOptions()
    validate_options(options)
    text = read_playlist(input_path)
    result = reduce_playlist(text, options)
    result.output_path = write_playlist(default_output_path(input_path, output_path), result.text)
    return result


def _tier_counts(channels: List[ClassifiedChannel]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for tier in sorted(QualityTier, reverse=True):
        count = sum(1 for channel in channels if channel.tier is tier)
        if count:
            counts[tier.label] = count
    return counts
