"""
Budgeted selector: greedy prefix admission under a byte budget.

The cutoff is a single contiguous prefix of the quality-ordered sequence.
Once an entry does not fit, nothing after it is considered.

Deutsch:
    Auswahl unter einem Byte-Budget als zusammenhängendes Präfix.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .errors import ConfigurationError
from .models import ClassifiedChannel

log = logging.getLogger(__name__)


@dataclass
class SelectionResult:
    admitted: List[ClassifiedChannel]
    rejected: List[ClassifiedChannel]
    total_bytes: int
    max_bytes: int

    @property
    def truncated(self) -> bool:
        return bool(self.rejected)


def order_by_quality(channels: Iterable[ClassifiedChannel]) -> List[ClassifiedChannel]:
    return sorted(channels, key=lambda channel: (-channel.quality_rank, channel.position))


def ensure_header_fits(header_size: int, max_bytes: int) -> None:
    if header_size > max_bytes:
        raise ConfigurationError(
            f"max_output_bytes {max_bytes} is smaller than the playlist header ({header_size} bytes)"
        )


def select_within_budget(
    channels: Sequence[ClassifiedChannel], header_size: int, max_bytes: int
) -> SelectionResult:
    """
    Order ``channels`` by descending quality and admit them while the
    running serialized size stays at or under ``max_bytes``.
    """

    ensure_header_fits(header_size, max_bytes)

    ordered = order_by_quality(channels)
    admitted: List[ClassifiedChannel] = []
    total = header_size
    for index, channel in enumerate(ordered):
        size = channel.entry.byte_size()
        if total + size > max_bytes:
            log.warning(
                "size limit of %d bytes reached; %d entries not admitted",
                max_bytes,
                len(ordered) - index,
            )
            return SelectionResult(
                admitted=admitted, rejected=ordered[index:], total_bytes=total, max_bytes=max_bytes
            )
        admitted.append(channel)
        total += size
    return SelectionResult(admitted=admitted, rejected=[], total_bytes=total, max_bytes=max_bytes)
