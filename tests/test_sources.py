"""Tests for rakshai.sources -- citation normalization."""

from rakshai.models import GroundingCitation, Source
from rakshai.sources import extract_sources


class TestFlatUrls:
    def test_www_stripped(self):
        assert extract_sources(["https://www.example.com/a"]) == (
            Source("example.com", "https://www.example.com/a"),
        )

    def test_plain_host_kept(self):
        assert extract_sources(["https://news.bbc.co.uk/story"]) == (
            Source("news.bbc.co.uk", "https://news.bbc.co.uk/story"),
        )

    def test_only_leading_www_removed(self):
        (source,) = extract_sources(["https://shop.www.example.com/"])
        assert source.title == "shop.www.example.com"

    def test_order_preserved(self):
        urls = ["https://b.com/1", "https://a.com/2", "https://c.com/3"]
        assert [s.uri for s in extract_sources(urls)] == urls

    def test_url_without_host_dropped(self):
        assert extract_sources(["not a url", "https://ok.com"]) == (
            Source("ok.com", "https://ok.com"),
        )


class TestGroundingChunks:
    def test_complete_chunks_kept(self):
        chunks = [
            GroundingCitation("https://a.com/x", "A News"),
            GroundingCitation("https://b.com/y", "B Times"),
        ]
        assert extract_sources(chunks) == (
            Source("A News", "https://a.com/x"),
            Source("B Times", "https://b.com/y"),
        )

    def test_missing_title_dropped_not_defaulted(self):
        chunks = [
            GroundingCitation("https://a.com/x", None),
            GroundingCitation("https://b.com/y", "B Times"),
        ]
        assert extract_sources(chunks) == (Source("B Times", "https://b.com/y"),)

    def test_missing_uri_dropped(self):
        assert extract_sources([GroundingCitation(None, "Orphan")]) == ()

    def test_empty_strings_dropped(self):
        assert extract_sources([GroundingCitation("", "")]) == ()


class TestEdgeCases:
    def test_empty_input(self):
        assert extract_sources([]) == ()

    def test_unknown_entry_types_dropped(self):
        assert extract_sources([None, 42, {"url": "https://a.com"}]) == ()  # type: ignore[list-item]
