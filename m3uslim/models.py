"""
Shared data models for the m3uslim pipeline.

Every stage consumes and produces these values; none of them is mutated
after construction.

Deutsch:
    Gemeinsame Datenmodelle.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Optional, Tuple

DEFAULT_HEADER = "#EXTM3U"
EXTINF_MARKER = "#EXTINF:"
DEFAULT_MAX_OUTPUT_BYTES = 20 * 1024 * 1024

SEASON_CODE_PATTERN = r"\bS\d{1,2}(?:\s*E\d{1,3})?\b"
SEASON_EPISODE_PATTERN = r"\bS\d{1,2}\s*E\d{1,3}\b"
BRACKETED_YEAR_PATTERN = r"[\[(]\s*(?:19|20)\d{2}\s*[\])]"
PARENTHESIZED_YEAR_PATTERN = r"\(\s*(?:19|20)\d{2}\s*\)"

DEFAULT_CATEGORY_PATTERNS: Tuple[str, ...] = (SEASON_CODE_PATTERN, BRACKETED_YEAR_PATTERN)
DEFAULT_NAME_PATTERNS: Tuple[str, ...] = (PARENTHESIZED_YEAR_PATTERN, SEASON_EPISODE_PATTERN)
DEFAULT_ADDRESS_MARKERS: Tuple[str, ...] = ("/movie/", "/series/")


class QualityTier(enum.IntEnum):
    """Ordinal quality tiers, higher is better."""

    UNKNOWN = 0
    SD = 1
    HD = 2
    FHD = 3
    UHD = 4

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> "QualityTier":
        key = value.strip().upper().replace("-", "").replace(" ", "")
        key = _TIER_ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown quality tier {value!r}") from None


_TIER_LABELS = {
    QualityTier.UNKNOWN: "Unknown",
    QualityTier.SD: "SD/480p",
    QualityTier.HD: "HD/720p",
    QualityTier.FHD: "FHD/1080p",
    QualityTier.UHD: "4K/UHD",
}

_TIER_ALIASES = {
    "4K": "UHD",
    "2160P": "UHD",
    "FULLHD": "FHD",
    "1080P": "FHD",
    "720P": "HD",
    "480P": "SD",
}


@dataclass(frozen=True)
class ChannelEntry:
    """
    One playlist item: a metadata line and the address line that follows it.

    ``metadata_line`` is kept verbatim so the serializer can re-emit it
    unchanged. ``position`` is the entry's index in the source document.
    """

    display_name: str
    metadata_line: str
    address: str
    category: Optional[str] = None
    position: int = 0
    attributes: Dict[str, str] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if not self.address:
            raise ValueError("channel entry requires a non-empty address")

    def serialized(self) -> str:
        return f"{self.metadata_line}\n{self.address}\n"

    def byte_size(self) -> int:
        return len(self.serialized().encode("utf-8"))


@dataclass(frozen=True)
class ClassifiedChannel:
    """
    A ``ChannelEntry`` annotated with its canonical identity and quality.
    """

    entry: ChannelEntry
    canonical_identity: str
    tier: QualityTier
    pixels: int = 0
    matched_rule: Optional[str] = None

    @property
    def quality_rank(self) -> int:
        return int(self.tier)

    @property
    def is_classified(self) -> bool:
        return self.tier is not QualityTier.UNKNOWN

    @property
    def position(self) -> int:
        return self.entry.position


@dataclass(frozen=True)
class PlaylistDocument:
    """Header line plus the ordered channel entries."""

    entries: Tuple[ChannelEntry, ...] = ()
    header: str = DEFAULT_HEADER

    def __iter__(self) -> Iterator[ChannelEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def header_size(self) -> int:
        return len(f"{self.header}\n".encode("utf-8"))

    def with_entries(self, entries: Iterable[ChannelEntry]) -> "PlaylistDocument":
        return PlaylistDocument(entries=tuple(entries), header=self.header)


@dataclass
class ReductionOptions:
    """
    Complete configuration surface of the reduction pipeline.

    The CLI and config files both end up here; ``config.validate_options``
    checks the values before any stage runs.
    """

    keep_count: int = 1
    keep_unclassified: bool = False
    minimum_tier: Optional[QualityTier] = None
    category_exclusions: Tuple[str, ...] = ()
    category_patterns: Tuple[str, ...] = DEFAULT_CATEGORY_PATTERNS
    category_whitelist: Tuple[str, ...] = ()
    name_exclusion_patterns: Tuple[str, ...] = DEFAULT_NAME_PATTERNS
    address_exclusion_markers: Tuple[str, ...] = DEFAULT_ADDRESS_MARKERS
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES
    filter_categories: bool = True
    filter_names: bool = True
    filter_addresses: bool = True
