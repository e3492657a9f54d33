from __future__ import annotations

import pytest

from m3uslim.budget import order_by_quality, select_within_budget
from m3uslim.classify import classify_entry
from m3uslim.dedup import count_dropped, deduplicate_channels
from m3uslim.errors import ConfigurationError
from m3uslim.models import ChannelEntry, ClassifiedChannel


def _channel(name: str, position: int) -> ClassifiedChannel:
    entry = ChannelEntry(
        display_name=name,
        metadata_line=f"#EXTINF:-1,{name}",
        address=f"http://a/{position}",
        position=position,
    )
    return classify_entry(entry)


def test_keeps_best_per_identity() -> None:
    channels = [
        _channel("News 720p", 0),
        _channel("News 1080p", 1),
        _channel("Sport HD", 2),
        _channel("News SD", 3),
    ]

    kept, decisions = deduplicate_channels(channels, keep_count=1)

    assert [channel.entry.display_name for channel in kept] == ["News 1080p", "Sport HD"]
    assert count_dropped(decisions) == 2
    assert decisions[0].identity == "news"


def test_top_n_mode_and_tie_breaks() -> None:
    channels = [
        _channel("News HD", 0),
        _channel("News 1080p", 1),
        _channel("News FHD", 2),
        _channel("News 1440p", 3),
        _channel("News HD", 4),
    ]

    kept, _ = deduplicate_channels(channels, keep_count=3)

    # same tier: pixel count first, then input order
    assert [channel.position for channel in kept] == [3, 1, 2]


def test_equal_candidates_keep_input_order() -> None:
    channels = [_channel("News HD", 0), _channel("NEWS HD", 1)]

    kept, _ = deduplicate_channels(channels, keep_count=1)

    assert kept[0].position == 0


def test_keep_count_must_be_positive() -> None:
    with pytest.raises(ValueError):
        deduplicate_channels([], keep_count=0)


def test_order_by_quality_is_stable() -> None:
    channels = [_channel("A HD", 0), _channel("B 4K", 1), _channel("C HD", 2), _channel("D", 3)]

    ordered = order_by_quality(channels)

    assert [channel.position for channel in ordered] == [1, 0, 2, 3]


def test_budget_is_a_tight_prefix_cutoff() -> None:
    channels = [_channel("Big 4K channel name", 0), _channel("B HD channel", 1), _channel("C SD", 2)]
    header = len("#EXTM3U\n")
    sizes = [channel.entry.byte_size() for channel in channels]
    # room for the first and third entry but not the second: greedy stops at the second
    budget = header + sizes[0] + sizes[2]
    assert sizes[1] > sizes[2]

    result = select_within_budget(channels, header, budget)

    assert [channel.position for channel in result.admitted] == [0]
    assert [channel.position for channel in result.rejected] == [1, 2]
    assert result.total_bytes == header + sizes[0]
    assert result.total_bytes <= budget < result.total_bytes + sizes[1]
    assert result.truncated


def test_budget_admits_everything_that_fits() -> None:
    channels = [_channel("A HD", 0), _channel("B HD", 1)]
    header = len("#EXTM3U\n")
    total = header + sum(channel.entry.byte_size() for channel in channels)

    result = select_within_budget(channels, header, total)

    assert len(result.admitted) == 2
    assert result.total_bytes == total
    assert not result.truncated


def test_budget_counts_utf8_bytes() -> None:
    channel = _channel("Canal Ação HD", 0)

    assert channel.entry.byte_size() == len(channel.entry.serialized().encode("utf-8"))
    assert channel.entry.byte_size() > len(channel.entry.serialized())


def test_header_larger_than_budget() -> None:
    with pytest.raises(ConfigurationError):
        select_within_budget([], header_size=8, max_bytes=4)
