"""
Tests for Source Parser

Tests line splitting, source classification and URL validation.
"""

import pytest


class TestClassify:
    """Tests for classify()"""

    def test_url_prefix_wins(self):
        from signaldesk.engine.source_parser import classify
        from signaldesk.common.schemas import SourceType

        # "report" would make it a document if the URL rule did not come first
        assert classify("https://example.com/report.pdf") == SourceType.URL
        assert classify("http://example.com") == SourceType.URL

    def test_transcript_marker(self):
        from signaldesk.engine.source_parser import classify
        from signaldesk.common.schemas import SourceType

        assert classify("Speaker: we should ship on friday") == SourceType.TRANSCRIPT
        assert classify("Call transcript from the sales sync") == SourceType.TRANSCRIPT

    def test_long_line_is_transcript(self):
        from signaldesk.engine.source_parser import classify
        from signaldesk.common.schemas import SourceType

        assert classify(" ".join(["word"] * 23)) == SourceType.TRANSCRIPT
        assert classify(" ".join(["word"] * 22)) == SourceType.NOTE

    def test_document_markers(self):
        from signaldesk.engine.source_parser import classify
        from signaldesk.common.schemas import SourceType

        assert classify("Q4 report shows churn") == SourceType.DOCUMENT
        assert classify("pricing.pdf attached") == SourceType.DOCUMENT
        assert classify("Internal memo on hiring") == SourceType.DOCUMENT
        assert classify("See the design doc") == SourceType.DOCUMENT

    def test_plain_note(self):
        from signaldesk.engine.source_parser import classify
        from signaldesk.common.schemas import SourceType

        assert classify("Customers asked for SSO again") == SourceType.NOTE

    def test_ftp_is_not_url(self):
        from signaldesk.engine.source_parser import classify
        from signaldesk.common.schemas import SourceType

        assert classify("ftp://example.com/file") == SourceType.NOTE


class TestIsValidUrl:
    """Tests for is_valid_url()"""

    @pytest.mark.parametrize("raw", [
        "https://example.com",
        "https://example.com/launch growth data confirmed",
        "http://localhost:8080/path?q=1",
        "https://[::1]:8080/health",
    ])
    def test_valid(self, raw):
        from signaldesk.engine.source_parser import is_valid_url

        assert is_valid_url(raw) is True

    @pytest.mark.parametrize("raw", [
        "https://",
        "https://exa mple.com",
        "https://example.com:99999",
        "https://example.com:abc",
        "http://1.2.3.999/",
        "http://0x100000000/",
        "http://exa\xa0mple.com/",
    ])
    def test_invalid(self, raw):
        from signaldesk.engine.source_parser import is_valid_url

        assert is_valid_url(raw) is False


class TestParseSources:
    """Tests for parse_sources()"""

    def test_blank_lines_dropped_and_ids_positional(self):
        from signaldesk.engine.source_parser import parse_sources

        sources = parse_sources("  first line  \n\n   \r\nsecond line\n")

        assert [s.id for s in sources] == ["s-1", "s-2"]
        assert [s.raw for s in sources] == ["first line", "second line"]

    def test_empty_intake(self):
        from signaldesk.engine.source_parser import parse_sources

        assert parse_sources("") == []
        assert parse_sources("\n  \n") == []

    def test_only_urls_validated(self):
        from signaldesk.engine.source_parser import invalid_urls, parse_sources

        sources = parse_sources("https://exa mple.com\nplain note?\nhttps://example.com")

        assert sources[0].valid is False
        assert sources[1].valid is True
        assert sources[2].valid is True
        assert [s.id for s in invalid_urls(sources)] == ["s-1"]

    def test_deterministic(self):
        from signaldesk.engine.source_parser import parse_sources

        text = "https://example.com\nQ4 report\nSpeaker: hello"
        assert parse_sources(text) == parse_sources(text)
