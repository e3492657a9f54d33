from __future__ import annotations

import pytest

from m3uslim.classify import QUALITY_RULES, canonical_identity, classify_entries, classify_name
from m3uslim.models import ChannelEntry, QualityTier


@pytest.mark.parametrize(
    "name, tier, rule",
    [
        ("News 1920x1080", QualityTier.FHD, "dimensions"),
        ("News 3840 x 2160", QualityTier.UHD, "dimensions"),
        ("News 720p", QualityTier.HD, "line_count"),
        ("News 1080i", QualityTier.FHD, "line_count"),
        ("News 4K", QualityTier.UHD, "uhd"),
        ("News UHD", QualityTier.UHD, "uhd"),
        ("News FHD", QualityTier.FHD, "fhd"),
        ("News Full HD", QualityTier.FHD, "fhd"),
        ("News HD", QualityTier.HD, "hd"),
        ("News SD", QualityTier.SD, "sd"),
        ("News", QualityTier.UNKNOWN, None),
    ],
)
def test_detects_tier(name: str, tier: QualityTier, rule: str) -> None:
    result = classify_name(name)

    assert result.tier is tier
    assert result.matched_rule == rule


def test_rule_precedence_is_fixed() -> None:
    assert [rule.name for rule in QUALITY_RULES] == ["dimensions", "line_count", "uhd", "fhd", "hd", "sd"]
    # dimensions win over a symbolic token in the same name
    result = classify_name("News HD 1280x720")
    assert result.matched_rule == "dimensions"
    assert result.pixels == 1280 * 720


def test_line_count_assumes_wide_aspect() -> None:
    assert classify_name("News 720p").pixels == 1280 * 720
    assert classify_name("News 1080p").pixels == 1920 * 1080


def test_numeric_tokens_rank_within_tier() -> None:
    higher = classify_name("News 1440p")
    lower = classify_name("News 1080p")

    assert higher.tier is lower.tier is QualityTier.FHD
    assert higher.pixels > lower.pixels


def test_hd_does_not_match_inside_words() -> None:
    assert classify_name("HDMI Channel").tier is QualityTier.UNKNOWN
    assert classify_name("Sports FHD").tier is QualityTier.FHD


@pytest.mark.parametrize(
    "name",
    ["Globo News 720p", "GLOBO NEWS 1080p", "Globo  News [BR] HD", "globo news (Backup) 4K", "Globo News"],
)
def test_canonical_identity_strips_annotations(name: str) -> None:
    assert canonical_identity(name) == "globo news"


def test_identity_of_quality_only_name() -> None:
    assert canonical_identity("HD") == "hd"


def _entry(name: str, position: int) -> ChannelEntry:
    return ChannelEntry(
        display_name=name,
        metadata_line=f"#EXTINF:-1,{name}",
        address=f"http://a/{position}",
        position=position,
    )


def test_classify_entries_drops_unclassified_unless_kept() -> None:
    entries = [_entry("News HD", 0), _entry("News", 1), _entry("Kids SD", 2)]

    kept, stats = classify_entries(entries)
    assert [channel.entry.display_name for channel in kept] == ["News HD", "Kids SD"]
    assert stats.dropped_unclassified == 1

    kept, stats = classify_entries(entries, keep_unclassified=True)
    assert len(kept) == 3
    assert kept[1].quality_rank == 0


def test_minimum_tier_drops_lower_classified_entries() -> None:
    entries = [_entry("News HD", 0), _entry("Kids SD", 1), _entry("Radio", 2)]

    kept, stats = classify_entries(entries, keep_unclassified=True, minimum_tier=QualityTier.HD)

    assert [channel.entry.display_name for channel in kept] == ["News HD", "Radio"]
    assert stats.dropped_below_tier == 1
