"""
Deduplicator: keep the best ``keep_count`` channels per canonical identity.

Deutsch:
    Behält die besten Einträge pro Sender.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from .models import ClassifiedChannel

log = logging.getLogger(__name__)


@dataclass
class ChannelGroup:
    """Channels sharing one canonical identity."""

    identity: str
    members: List[ClassifiedChannel] = field(default_factory=list)

    def ranked(self) -> List[ClassifiedChannel]:
        return sorted(self.members, key=group_sort_key)


@dataclass
class DedupDecision:
    """Records how one group was resolved, for reporting."""

    identity: str
    kept: List[ClassifiedChannel]
    dropped: List[ClassifiedChannel]


def group_sort_key(channel: ClassifiedChannel) -> Tuple[int, int, int]:
    return (-channel.quality_rank, -channel.pixels, channel.position)


def group_channels(channels: Iterable[ClassifiedChannel]) -> List[ChannelGroup]:
    groups: Dict[str, ChannelGroup] = {}
    for channel in channels:
        group = groups.get(channel.canonical_identity)
        if group is None:
            group = groups[channel.canonical_identity] = ChannelGroup(identity=channel.canonical_identity)
        group.members.append(channel)
    return list(groups.values())


def deduplicate_channels(
    channels: Iterable[ClassifiedChannel], keep_count: int = 1
) -> Tuple[List[ClassifiedChannel], List[DedupDecision]]:
    """
    Group by identity and keep the top ``keep_count`` members of each group.

    Members are ranked by quality rank, then pixel count (both descending),
    then input position. Groups are emitted in order of first appearance.
    """

    if keep_count < 1:
        raise ValueError("keep_count must be at least 1")

    kept: List[ClassifiedChannel] = []
    decisions: List[DedupDecision] = []
    for group in group_channels(channels):
        ranked = group.ranked()
        head, tail = ranked[:keep_count], ranked[keep_count:]
        kept.extend(head)
        if tail:
            decisions.append(DedupDecision(identity=group.identity, kept=head, dropped=tail))
            log.debug(
                "%s: %d -> %d (best %s)",
                group.identity,
                len(ranked),
                len(head),
                head[0].tier.label,
            )
    log.info("deduplicated to %d entries (%d groups collapsed)", len(kept), len(decisions))
    return kept, decisions


def count_dropped(decisions: Iterable[DedupDecision]) -> int:
    return sum(len(decision.dropped) for decision in decisions)
