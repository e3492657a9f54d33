from __future__ import annotations

from m3uslim.parser import parse_metadata_line, parse_playlist


def test_parse_pairs_and_header() -> None:
    text = (
        '#EXTM3U url-tvg="http://epg.example/guide.xml"\n'
        '#EXTINF:-1 tvg-id="a" group-title="News, World",World News HD\n'
        "http://a/1\n"
        "#EXTINF:0,Local\n"
        "http://a/2\n"
    )
    document, stats = parse_playlist(text)

    assert document.header == '#EXTM3U url-tvg="http://epg.example/guide.xml"'
    assert stats.header_present
    assert [entry.display_name for entry in document] == ["World News HD", "Local"]
    first = document.entries[0]
    assert first.category == "News, World"
    assert first.attributes["tvg-id"] == "a"
    assert first.metadata_line == '#EXTINF:-1 tvg-id="a" group-title="News, World",World News HD'
    assert document.entries[1].category is None
    assert [entry.position for entry in document] == [0, 1]


def test_orphans_and_comments_are_skipped() -> None:
    text = (
        "#EXTM3U\r\n"
        "http://orphan/address\r\n"
        "#EXTINF:-1,Dropped\r\n"
        "#EXTINF:-1,Kept\r\n"
        "#EXTVLCOPT:http-user-agent=VLC\r\n"
        "\r\n"
        "http://a/kept\r\n"
        "#EXTINF:-1,Trailing\r\n"
    )
    document, stats = parse_playlist(text)

    assert [entry.display_name for entry in document] == ["Kept"]
    assert document.entries[0].address == "http://a/kept"
    assert stats.orphan_metadata == 2
    assert stats.orphan_addresses == 1
    assert stats.entries == 1


def test_malformed_metadata_falls_back_to_raw_line() -> None:
    document, stats = parse_playlist("#EXTM3U\n#EXTINF:-1 tvg-id=\"x\"\nhttp://a/1\n")

    assert stats.malformed_metadata == 1
    assert document.entries[0].display_name == '#EXTINF:-1 tvg-id="x"'


def test_category_attribute_fallback() -> None:
    name, attributes = parse_metadata_line('#EXTINF:-1 category="SERIES",Some Show')

    assert name == "Some Show"
    assert attributes == {"category": "SERIES"}
    document, _ = parse_playlist('#EXTINF:-1 category="SERIES",Some Show\nhttp://a/1\n')
    assert document.entries[0].category == "SERIES"


def test_missing_header_uses_default() -> None:
    document, stats = parse_playlist("\ufeff#EXTINF:-1,News HD\nhttp://a/1\n")

    assert document.header == "#EXTM3U"
    assert not stats.header_present
    assert len(document) == 1


def test_empty_text() -> None:
    document, stats = parse_playlist("")

    assert len(document) == 0
    assert stats.entries == 0


def test_unicode_breaks_stay_inside_the_label() -> None:
    text = (
        "#EXTM3U\r\n"
        "#EXTINF:-1,News\x0cHD\r\n"
        "http://a/1\r\n"
        "#EXTINF:-1,Canal\x85Um\n"
        "http://a/2\n"
        "#EXTINF:-1,Sport Mix  4K\n"
        "http://a/3\n"
    )
    document, stats = parse_playlist(text)

    assert stats.entries == 3
    assert stats.orphan_addresses == 0
    assert [entry.address for entry in document] == ["http://a/1", "http://a/2", "http://a/3"]
    assert document.entries[0].metadata_line == "#EXTINF:-1,News\x0cHD"
    assert document.entries[1].display_name == "Canal\x85Um"
    assert document.entries[2].display_name == "Sport Mix  4K"
