"""
Name classifier: canonical identity and quality rank from a display name.

Quality detection runs an ordered list of named rules; the first rule whose
pattern matches decides the tier and the estimated pixel count. Identity
stripping removes the tokens of every rule, not only the winning one.

Deutsch:
    Erkennt Senderidentität und Bildqualität aus dem Anzeigenamen.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from re import Match, Pattern
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .models import ChannelEntry, ClassifiedChannel, QualityTier

log = logging.getLogger(__name__)

TIER_PIXELS: Dict[QualityTier, int] = {
    QualityTier.UHD: 3840 * 2160,
    QualityTier.FHD: 1920 * 1080,
    QualityTier.HD: 1280 * 720,
    QualityTier.SD: 640 * 480,
    QualityTier.UNKNOWN: 0,
}

_BRACKETED_RE = re.compile(r"\[[^\]]*\]|\([^)]*\)")
_WHITESPACE_RE = re.compile(r"\s+")
_EDGE_SEPARATORS = " -|:_/"


@dataclass(frozen=True)
class QualityRule:
    """A named predicate (``pattern``) paired with its transform (``resolve``)."""

    name: str
    pattern: Pattern[str]
    resolve: Callable[[Match[str]], Tuple[QualityTier, int]]

    def apply(self, name: str) -> Optional[Tuple[QualityTier, int]]:
        match = self.pattern.search(name)
        if match is None:
            return None
        return self.resolve(match)


@dataclass(frozen=True)
class NameClassification:
    canonical_identity: str
    tier: QualityTier
    pixels: int
    matched_rule: Optional[str]


def tier_for_lines(lines: int) -> QualityTier:
    if lines >= 2160:
        return QualityTier.UHD
    if lines >= 1080:
        return QualityTier.FHD
    if lines >= 720:
        return QualityTier.HD
    if lines > 0:
        return QualityTier.SD
    return QualityTier.UNKNOWN


def _resolve_dimensions(match: Match[str]) -> Tuple[QualityTier, int]:
    width, height = int(match.group(1)), int(match.group(2))
    return tier_for_lines(min(width, height)), width * height


def _resolve_line_count(match: Match[str]) -> Tuple[QualityTier, int]:
    height = int(match.group(1))
    width = round(height * 16 / 9)
    return tier_for_lines(height), width * height


def _symbolic(tier: QualityTier) -> Callable[[Match[str]], Tuple[QualityTier, int]]:
    def resolve(_match: Match[str]) -> Tuple[QualityTier, int]:
        return tier, TIER_PIXELS[tier]

    return resolve


QUALITY_RULES: Tuple[QualityRule, ...] = (
    QualityRule(
        "dimensions",
        re.compile(r"(?<!\d)(\d{3,4})\s*[x×]\s*(\d{3,4})(?!\d)", re.IGNORECASE),
        _resolve_dimensions,
    ),
    QualityRule(
        "line_count",
        re.compile(r"(?<![\d.])(\d{3,4})[pi]\b", re.IGNORECASE),
        _resolve_line_count,
    ),
    QualityRule("uhd", re.compile(r"\b(?:4K|UHD)\b", re.IGNORECASE), _symbolic(QualityTier.UHD)),
    QualityRule(
        "fhd",
        re.compile(r"\b(?:FHD|FULL[\s\-]?HD|1080)\b", re.IGNORECASE),
        _symbolic(QualityTier.FHD),
    ),
    QualityRule("hd", re.compile(r"\b(?:HD|720)\b", re.IGNORECASE), _symbolic(QualityTier.HD)),
    QualityRule("sd", re.compile(r"\b(?:SD|480)\b", re.IGNORECASE), _symbolic(QualityTier.SD)),
)


def detect_quality(name: str) -> Tuple[QualityTier, int, Optional[str]]:
    for rule in QUALITY_RULES:
        result = rule.apply(name)
        if result is not None:
            tier, pixels = result
            return tier, pixels, rule.name
    return QualityTier.UNKNOWN, 0, None


def canonical_identity(name: str) -> str:
    """
    Normalise a display name into its deduplication key.

    >>> canonical_identity("Globo News [BR] 1080p")
    'globo news'
    """

    text = _BRACKETED_RE.sub(" ", name)
    for rule in QUALITY_RULES:
        text = rule.pattern.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text).strip(_EDGE_SEPARATORS)
    if not text:
        # names made only of quality tokens keep their own text as identity
        text = _WHITESPACE_RE.sub(" ", name).strip()
    return text.casefold()


def classify_name(name: str) -> NameClassification:
    tier, pixels, rule = detect_quality(name)
    return NameClassification(
        canonical_identity=canonical_identity(name),
        tier=tier,
        pixels=pixels,
        matched_rule=rule,
    )


def classify_entry(entry: ChannelEntry) -> ClassifiedChannel:
    result = classify_name(entry.display_name)
    return ClassifiedChannel(
        entry=entry,
        canonical_identity=result.canonical_identity,
        tier=result.tier,
        pixels=result.pixels,
        matched_rule=result.matched_rule,
    )


@dataclass
class ClassificationStats:
    kept: int = 0
    dropped_unclassified: int = 0
    dropped_below_tier: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "kept": self.kept,
            "dropped_unclassified": self.dropped_unclassified,
            "dropped_below_tier": self.dropped_below_tier,
        }


def classify_entries(
    entries: Iterable[ChannelEntry],
    *,
    keep_unclassified: bool = False,
    minimum_tier: Optional[QualityTier] = None,
) -> Tuple[List[ClassifiedChannel], ClassificationStats]:
    """
    Classify entries and drop the ones that may not take part in grouping.

    Unclassified names are governed by ``keep_unclassified`` alone;
    ``minimum_tier`` applies to classified names only.
    """

    stats = ClassificationStats()
    kept: List[ClassifiedChannel] = []
    for entry in entries:
        channel = classify_entry(entry)
        if not channel.is_classified:
            if not keep_unclassified:
                stats.dropped_unclassified += 1
                continue
        elif minimum_tier is not None and channel.tier < minimum_tier:
            stats.dropped_below_tier += 1
            continue
        kept.append(channel)
    stats.kept = len(kept)
    log.debug(
        "kept %d classified entries (%d unclassified dropped, %d below tier dropped)",
        stats.kept,
        stats.dropped_unclassified,
        stats.dropped_below_tier,
    )
    return kept, stats
