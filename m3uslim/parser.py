"""
Entry parser: playlist text to ``PlaylistDocument``.

The parser is a single pass over the lines with one pending-metadata slot.
Malformed input never aborts the parse; anomalies are counted in
``ParseStats`` and the offending entry is dropped.

Deutsch:
    Zerlegt den Playlist-Text in Einträge.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .models import DEFAULT_HEADER, EXTINF_MARKER, ChannelEntry, PlaylistDocument

log = logging.getLogger(__name__)

CATEGORY_ATTRIBUTES = ("group-title", "category")

_DURATION_RE = re.compile(r"\s*(-?\d+(?:\.\d+)?)?")
_ATTR_RE = re.compile(r'([A-Za-z0-9_\-]+)="([^"]*)"')
# only LF and CRLF end a line; other Unicode breaks belong to the label
_LINE_BREAK_RE = re.compile(r"\r?\n")


@dataclass
class ParseStats:
    entries: int = 0
    orphan_metadata: int = 0
    orphan_addresses: int = 0
    malformed_metadata: int = 0
    header_present: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "entries": self.entries,
            "orphan_metadata": self.orphan_metadata,
            "orphan_addresses": self.orphan_addresses,
            "malformed_metadata": self.malformed_metadata,
            "header_present": self.header_present,
        }


def parse_playlist(text: str) -> Tuple[PlaylistDocument, ParseStats]:
    """
    Parse playlist text into a document plus parse statistics.

    Deutsch:
        Zerlegt den Text in ein Dokument samt Statistik.
    """

    stats = ParseStats()
    header = DEFAULT_HEADER
    entries: List[ChannelEntry] = []
    pending: Optional[str] = None
    seen_content = False

    for raw_line in _LINE_BREAK_RE.split(text.lstrip("\ufeff")):
        line = raw_line.strip()
        if not line:
            continue
        if not seen_content:
            seen_content = True
            if line.startswith("#EXTM3U"):
                header = line
                stats.header_present = True
                continue
        if line.startswith(EXTINF_MARKER):
            if pending is not None:
                log.debug("metadata line without address dropped: %s", pending)
                stats.orphan_metadata += 1
            pending = line
            continue
        if line.startswith("#"):
            continue
        if pending is None:
            log.debug("address without metadata skipped: %s", line)
            stats.orphan_addresses += 1
            continue
        entry, well_formed = _build_entry(pending, line, len(entries))
        if not well_formed:
            stats.malformed_metadata += 1
        entries.append(entry)
        pending = None

    if pending is not None:
        log.debug("trailing metadata line without address dropped: %s", pending)
        stats.orphan_metadata += 1

    stats.entries = len(entries)
    log.debug(
        "parsed %d entries (%d orphan metadata, %d orphan addresses)",
        stats.entries,
        stats.orphan_metadata,
        stats.orphan_addresses,
    )
    return PlaylistDocument(entries=tuple(entries), header=header), stats


def parse_metadata_line(line: str) -> Tuple[Optional[str], Dict[str, str]]:
    """
    Split an ``#EXTINF`` line into its display name and attributes.

    Returns ``None`` as name when the line carries no usable label.
    """

    rest = line[len(EXTINF_MARKER):] if line.startswith(EXTINF_MARKER) else line
    duration = _DURATION_RE.match(rest)
    if duration:
        rest = rest[duration.end():]
    attrs_part, label = _split_label(rest)
    attributes = {key.lower(): value.strip() for key, value in _ATTR_RE.findall(attrs_part)}
    if label is None or not label.strip():
        return None, attributes
    return label.strip(), attributes


def _build_entry(metadata_line: str, address: str, position: int) -> Tuple[ChannelEntry, bool]:
    name, attributes = parse_metadata_line(metadata_line)
    category = None
    for key in CATEGORY_ATTRIBUTES:
        if attributes.get(key):
            category = attributes[key]
            break
    entry = ChannelEntry(
        display_name=name if name is not None else metadata_line,
        metadata_line=metadata_line,
        address=address,
        category=category,
        position=position,
        attributes=attributes,
    )
    return entry, name is not None


def _split_label(rest: str) -> Tuple[str, Optional[str]]:
    # first comma outside a quoted attribute value separates the label
    in_quotes = False
    for idx, char in enumerate(rest):
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            return rest[:idx], rest[idx + 1:]
    return rest, None
