"""
Unit tests for request reconstruction.

Tests cover:
- Path extraction between "GET " and " HTTP/"
- Skipped lines (missing or misordered request or timestamp markers)
- Timestamp parsing to UTC epoch milliseconds
- Timestamp suffix on reconstructed URLs
"""

import pytest

from logreplay.errors import TimestampParseError
from logreplay.reconstruct import (
    ReconstructedRequest,
    build_request,
    extract_path,
    extract_timestamp,
)


# =============================================================================
# Path Extraction Tests
# =============================================================================


class TestExtractPath:
    """Tests for extract_path()."""

    def test_track_request(self, track_line: str) -> None:
        """The target between GET and HTTP/ is extracted."""
        assert extract_path(track_line) == "/track?x=1"

    def test_track_subpath(self) -> None:
        """Anything starting with /track is trackable."""
        line = '"GET /tracking/pixel.gif?u=7 HTTP/2.0"'
        assert extract_path(line) == "/tracking/pixel.gif?u=7"

    def test_non_track_request_skipped(self, health_line: str) -> None:
        """Requests outside /track are skipped."""
        assert extract_path(health_line) is None

    def test_post_request_skipped(self) -> None:
        """Only GET requests are trackable."""
        assert extract_path('"POST /track?x=1 HTTP/1.1"') is None

    def test_missing_protocol_skipped(self) -> None:
        """Without the HTTP/ marker the line is skipped."""
        assert extract_path('"GET /track?x=1"') is None

    def test_protocol_before_request_skipped(self) -> None:
        """An HTTP/ marker that precedes the request target is skipped."""
        line = 'proxy HTTP/1.0 upstream "GET /track?x=1"'
        assert extract_path(line) is None

    def test_empty_line_skipped(self) -> None:
        """Empty lines are skipped."""
        assert extract_path("") is None

    def test_uses_first_protocol_marker(self) -> None:
        """The path ends at the first HTTP/ marker."""
        line = '"GET /track?ref=a HTTP/1.1" "Mozilla HTTP/2"'
        assert extract_path(line) == "/track?ref=a"


# =============================================================================
# Timestamp Tests
# =============================================================================


class TestExtractTimestamp:
    """Tests for extract_timestamp()."""

    def test_negative_offset(self, track_line: str) -> None:
        """10/Oct/2023:13:55:36 -0700 is 2023-10-10T20:55:36Z."""
        assert extract_timestamp(track_line) == 1696971336000

    def test_utc_offset(self, other_track_line: str) -> None:
        """+0000 is taken as UTC."""
        assert extract_timestamp(other_track_line) == 1697011200000

    def test_positive_offset(self) -> None:
        """+0530 is subtracted to get UTC."""
        line = "[01/Jan/2024:05:30:00 +0530] GET /track?x HTTP/1.1"
        assert extract_timestamp(line) == 1704067200000

    def test_epoch(self) -> None:
        """The Unix epoch maps to zero."""
        assert extract_timestamp("[01/Jan/1970:00:00:00 +0000]") == 0

    def test_millisecond_resolution(self, track_line: str) -> None:
        """Results are whole seconds expressed in milliseconds."""
        assert extract_timestamp(track_line) % 1000 == 0

    def test_missing_brackets(self) -> None:
        """A line without brackets has no timestamp field."""
        assert extract_timestamp('"GET /track?x=1 HTTP/1.1"') is None

    def test_missing_closing_bracket(self) -> None:
        """An unterminated field is not a timestamp field."""
        assert extract_timestamp('[10/Oct/2023:13:55:36 -0700 "GET /track HTTP/1.1"') is None

    def test_inverted_brackets(self) -> None:
        """A closing bracket before the opening one is not a timestamp field."""
        assert extract_timestamp("] [10/Oct/2023:13:55:36 -0700") is None

    @pytest.mark.parametrize(
        "field",
        [
            "2023-10-10T13:55:36Z",
            "10/Oct/2023:13:55:36",
            "10/Foo/2023:13:55:36 -0700",
            "10/Oct/2023:25:55:36 -0700",
            "",
        ],
    )
    def test_unparsable_field(self, field: str) -> None:
        """Fields that do not follow the access-log layout raise."""
        with pytest.raises(TimestampParseError) as exc_info:
            extract_timestamp(f"1.2.3.4 [{field}] GET /track HTTP/1.1")
        assert exc_info.value.timestamp == field


# =============================================================================
# Build Request Tests
# =============================================================================


class TestBuildRequest:
    """Tests for build_request()."""

    def test_without_timestamp(self, track_line: str) -> None:
        """The URL is base URL + path."""
        request = build_request(track_line, "https://example.com")
        assert request == ReconstructedRequest(url="https://example.com/track?x=1", path="/track?x=1")

    def test_with_timestamp(self, track_line: str) -> None:
        """The timestamp is appended as &timestamp=<ms>."""
        request = build_request(track_line, "https://example.com", include_timestamp=True)
        assert request.url == "https://example.com/track?x=1&timestamp=1696971336000"
        assert request.timestamp_ms == 1696971336000

    def test_base_url_with_prefix(self, track_line: str) -> None:
        """The base URL is prefixed verbatim."""
        request = build_request(track_line, "http://10.0.0.5:8080/mirror")
        assert request.url == "http://10.0.0.5:8080/mirror/track?x=1"

    def test_skipped_line(self, health_line: str) -> None:
        """Non-trackable lines yield None."""
        assert build_request(health_line, "https://example.com", include_timestamp=True) is None

    def test_skipped_line_timestamp_not_parsed(self) -> None:
        """A skipped line never reaches timestamp parsing."""
        assert build_request("[garbage] hello", "https://example.com", include_timestamp=True) is None

    def test_missing_timestamp_skips(self) -> None:
        """A trackable line without a bracketed timestamp is skipped, not fatal."""
        line = '1.2.3.4 - - "GET /track?x=1 HTTP/1.1" 200'
        assert build_request(line, "https://example.com", include_timestamp=True) is None

    def test_inverted_timestamp_brackets_skip(self) -> None:
        """Out-of-order brackets skip the line."""
        line = '1.2.3.4 ] "GET /track?x=1 HTTP/1.1" ['
        assert build_request(line, "https://example.com", include_timestamp=True) is None

    def test_missing_timestamp_ignored_without_flag(self) -> None:
        """Lines without brackets replay normally when timestamps are off."""
        line = '1.2.3.4 - - "GET /track?x=1 HTTP/1.1" 200'
        request = build_request(line, "https://example.com")
        assert request.url == "https://example.com/track?x=1"

    def test_bad_timestamp_is_fatal(self) -> None:
        """A trackable line with a bad timestamp raises."""
        line = '[yesterday] "GET /track?x=1 HTTP/1.1"'
        with pytest.raises(TimestampParseError):
            build_request(line, "https://example.com", include_timestamp=True)

    def test_bad_timestamp_ignored_without_flag(self) -> None:
        """Timestamps are not parsed unless requested."""
        line = '[yesterday] "GET /track?x=1 HTTP/1.1"'
        request = build_request(line, "https://example.com")
        assert request.url == "https://example.com/track?x=1"
        assert request.timestamp_ms is None
