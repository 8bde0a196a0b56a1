"""
Unit tests for input and output file handling.

Tests cover:
- Opening and reading the input log
- Opening the three output logs in append mode
- Open failures and failures while flushing or closing
"""

import io
import os
import stat
from pathlib import Path

import pytest

from logreplay.errors import InputFileError, SinkOpenError, SinkWriteError
from logreplay.schema import SinkPaths
from logreplay.sinks import close_sink, open_input, open_sink, open_sinks, read_lines


class UncloseableSink(io.StringIO):
    """A sink whose final flush fails; the stream is closed regardless."""

    def close(self) -> None:
        super().close()
        raise OSError("No space left on device")


class TestReadLines:
    """Tests for read_lines()."""

    def test_strips_line_terminators(self) -> None:
        """LF and CRLF terminators are removed."""
        stream = io.StringIO("a\nb\r\nc")
        assert list(read_lines(stream)) == ["a", "b", "c"]

    def test_bare_carriage_return_kept(self) -> None:
        """Only LF ends a line; a lone CR stays inside it."""
        stream = io.StringIO("a\rb\nc\r\r\n")
        assert list(read_lines(stream)) == ["a\rb", "c\r"]

    def test_keeps_blank_lines(self) -> None:
        """Blank lines are still yielded, in order."""
        stream = io.StringIO("a\n\nb\n")
        assert list(read_lines(stream)) == ["a", "", "b"]

    def test_empty_stream(self) -> None:
        """An empty stream yields nothing."""
        assert list(read_lines(io.StringIO(""))) == []


class TestOpenInput:
    """Tests for open_input()."""

    def test_reads_file(self, sample_access_log: Path, track_line: str) -> None:
        """Lines are read from the log."""
        with open_input(sample_access_log) as stream:
            lines = list(read_lines(stream))
        assert lines[0] == track_line
        assert len(lines) == 3

    def test_crlf_file(self, temp_dir: Path) -> None:
        """Windows line endings are removed."""
        path = temp_dir / "crlf.log"
        path.write_bytes(b"one\r\ntwo\r\n")
        with open_input(path) as stream:
            assert list(read_lines(stream)) == ["one", "two"]

    def test_bare_carriage_return_file(self, temp_dir: Path) -> None:
        """A lone CR inside a line does not split it."""
        path = temp_dir / "cr.log"
        path.write_bytes(b"GET /track?a=1\rb HTTP/1.1\nnext\n")
        with open_input(path) as stream:
            assert list(read_lines(stream)) == ["GET /track?a=1\rb HTTP/1.1", "next"]

    def test_undecodable_bytes_replaced(self, temp_dir: Path) -> None:
        """Invalid UTF-8 does not abort reading."""
        path = temp_dir / "binary.log"
        path.write_bytes(b"GET /track?q=\xff HTTP/1.1\n")
        with open_input(path) as stream:
            (line,) = list(read_lines(stream))
        assert line.startswith("GET /track?q=")

    def test_missing_file(self, temp_dir: Path) -> None:
        """A missing file raises InputFileError."""
        with pytest.raises(InputFileError) as exc_info:
            open_input(temp_dir / "missing.log")
        assert exc_info.value.path.endswith("missing.log")


class TestOpenSinks:
    """Tests for the output logs."""

    def test_creates_files(self, temp_dir: Path) -> None:
        """All three files are created."""
        paths = SinkPaths(
            succeeded=temp_dir / "ok.log",
            failed=temp_dir / "bad.log",
            failed_requests=temp_dir / "bad-reqs.log",
        )
        with open_sinks(paths) as sinks:
            sinks.succeeded.write("s\n")
            sinks.failed.write("f\n")
            sinks.failed_requests.write("r\n")

        assert (temp_dir / "ok.log").read_text() == "s\n"
        assert (temp_dir / "bad.log").read_text() == "f\n"
        assert (temp_dir / "bad-reqs.log").read_text() == "r\n"

    def test_appends_to_existing(self, temp_dir: Path) -> None:
        """Existing content is kept."""
        path = temp_dir / "ok.log"
        path.write_text("old\n")
        with open_sink(path, "succeeded") as sink:
            sink.write("new\n")
        assert path.read_text() == "old\nnew\n"

    def test_owner_only_permissions(self, temp_dir: Path) -> None:
        """New files are not readable by group or others."""
        path = temp_dir / "ok.log"
        with open_sink(path, "succeeded"):
            pass
        mode = stat.S_IMODE(os.stat(path).st_mode)
        assert mode & 0o077 == 0

    def test_closed_on_exit(self, temp_dir: Path) -> None:
        """Sinks are closed when the context exits."""
        paths = SinkPaths(
            succeeded=temp_dir / "a.log",
            failed=temp_dir / "b.log",
            failed_requests=temp_dir / "c.log",
        )
        with open_sinks(paths) as sinks:
            pass
        assert sinks.succeeded.closed
        assert sinks.failed.closed
        assert sinks.failed_requests.closed

    def test_unopenable_sink(self, temp_dir: Path) -> None:
        """A sink in a missing directory raises SinkOpenError."""
        paths = SinkPaths(
            succeeded=temp_dir / "ok.log",
            failed=temp_dir / "missing-dir" / "bad.log",
            failed_requests=temp_dir / "c.log",
        )
        with pytest.raises(SinkOpenError) as exc_info:
            with open_sinks(paths):
                pass
        assert exc_info.value.sink == "failed"


class TestSinkFailures:
    """Tests for output logs that fail after opening."""

    @pytest.mark.skipif(not os.path.exists("/dev/full"), reason="requires /dev/full")
    def test_write_fails_on_the_line(self) -> None:
        """Sinks are line-buffered, so a full device fails the write itself."""
        sink = open_sink("/dev/full", "succeeded")
        with pytest.raises(OSError):
            sink.write("line\n")
        close_sink(sink, "succeeded")

    def test_close_error_returned(self) -> None:
        """A flush failure on close is returned, not raised."""
        error = close_sink(UncloseableSink(), "failed")
        assert isinstance(error, SinkWriteError)
        assert error.sink == "failed"
        assert "No space left on device" in error.message

    def test_clean_close(self) -> None:
        """A healthy sink closes without error."""
        sink = io.StringIO()
        assert close_sink(sink, "failed") is None
        assert sink.closed

    def test_close_errors_collected(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """open_sinks() records close failures and still closes every sink."""
        opened: list[io.StringIO] = []

        def fake_open_sink(path: Path | str, sink_name: str) -> io.StringIO:
            sink = UncloseableSink() if sink_name == "succeeded" else io.StringIO()
            opened.append(sink)
            return sink

        monkeypatch.setattr("logreplay.sinks.open_sink", fake_open_sink)
        paths = SinkPaths(
            succeeded=temp_dir / "a.log",
            failed=temp_dir / "b.log",
            failed_requests=temp_dir / "c.log",
        )

        with open_sinks(paths) as sinks:
            assert sinks.close_errors == []

        assert [e.sink for e in sinks.close_errors] == ["succeeded"]
        assert all(sink.closed for sink in opened)
