"""
Policy filter: category, name and address exclusion passes.

The passes run in a fixed order and the first rejecting pass is the one
counted. The category whitelist only overrides the category pass.

Deutsch:
    Filter für Kategorie, Name und Adresse.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import ConfigurationError
from .models import ChannelEntry, ReductionOptions

log = logging.getLogger(__name__)

CATEGORY_PASS = "category"
NAME_PASS = "name"
ADDRESS_PASS = "address"
PASSES = (CATEGORY_PASS, NAME_PASS, ADDRESS_PASS)


@dataclass
class PolicyStats:
    examined: int = 0
    admitted: int = 0
    whitelist_overrides: int = 0
    rejected: Dict[str, int] = field(default_factory=lambda: {name: 0 for name in PASSES})

    @property
    def total_rejected(self) -> int:
        return sum(self.rejected.values())

    def to_dict(self) -> Dict[str, object]:
        return {
            "examined": self.examined,
            "admitted": self.admitted,
            "whitelist_overrides": self.whitelist_overrides,
            "rejected": dict(self.rejected),
        }


@dataclass(frozen=True)
class PolicyFilter:
    """
    Compiled rule set. Build it with ``PolicyFilter.from_options``.
    """

    category_exclusions: frozenset = frozenset()
    category_patterns: Tuple[re.Pattern, ...] = ()
    category_whitelist: Tuple[str, ...] = ()
    name_patterns: Tuple[re.Pattern, ...] = ()
    address_markers: Tuple[str, ...] = ()
    filter_categories: bool = True
    filter_names: bool = True
    filter_addresses: bool = True

    @classmethod
    def from_options(cls, options: ReductionOptions) -> "PolicyFilter":
        return cls(
            category_exclusions=frozenset(item.strip().casefold() for item in options.category_exclusions),
            category_patterns=compile_patterns(options.category_patterns, "category_patterns"),
            category_whitelist=tuple(item.casefold() for item in options.category_whitelist if item),
            name_patterns=compile_patterns(options.name_exclusion_patterns, "name_exclusion_patterns"),
            address_markers=tuple(item.casefold() for item in options.address_exclusion_markers if item),
            filter_categories=options.filter_categories,
            filter_names=options.filter_names,
            filter_addresses=options.filter_addresses,
        )

    def is_whitelisted(self, category: Optional[str]) -> bool:
        if not category:
            return False
        folded = category.casefold()
        return any(marker in folded for marker in self.category_whitelist)

    def category_excluded(self, category: Optional[str]) -> bool:
        if not category:
            return False
        if category.strip().casefold() in self.category_exclusions:
            return True
        return any(pattern.search(category) for pattern in self.category_patterns)

    def name_excluded(self, name: str) -> bool:
        return any(pattern.search(name) for pattern in self.name_patterns)

    def address_excluded(self, address: str) -> bool:
        folded = address.casefold()
        return any(marker in folded for marker in self.address_markers)

    def check(self, entry: ChannelEntry) -> Optional[str]:
        """Return the name of the rejecting pass, or ``None`` when admitted."""

        if self.filter_categories and not self.is_whitelisted(entry.category):
            if self.category_excluded(entry.category):
                return CATEGORY_PASS
        if self.filter_names and self.name_excluded(entry.display_name):
            return NAME_PASS
        if self.filter_addresses and self.address_excluded(entry.address):
            return ADDRESS_PASS
        return None

    def apply(self, entries: Iterable[ChannelEntry]) -> Tuple[List[ChannelEntry], PolicyStats]:
        stats = PolicyStats()
        admitted: List[ChannelEntry] = []
        for entry in entries:
            stats.examined += 1
            verdict = self.check(entry)
            if verdict is not None:
                stats.rejected[verdict] += 1
                log.debug("%s pass rejected %r", verdict, entry.display_name)
                continue
            if (
                self.filter_categories
                and self.is_whitelisted(entry.category)
                and self.category_excluded(entry.category)
            ):
                stats.whitelist_overrides += 1
            admitted.append(entry)
        stats.admitted = len(admitted)
        log.info(
            "policy admitted %d of %d entries (category=%d name=%d address=%d rejected)",
            stats.admitted,
            stats.examined,
            stats.rejected[CATEGORY_PASS],
            stats.rejected[NAME_PASS],
            stats.rejected[ADDRESS_PASS],
        )
        return admitted, stats


def compile_patterns(patterns: Sequence[str], option: str) -> Tuple[re.Pattern, ...]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            raise ConfigurationError(f"{option}: invalid pattern {pattern!r}: {exc}") from exc
    return tuple(compiled)


def apply_policy(
    entries: Iterable[ChannelEntry], options: ReductionOptions
) -> Tuple[List[ChannelEntry], PolicyStats]:
    return PolicyFilter.from_options(options).apply(entries)
