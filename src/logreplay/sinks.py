"""
Input and output file handling.

The input log is read one newline-terminated line at a time; the three output
logs are opened line-buffered in append mode so repeated runs accumulate
records and a failed write surfaces on the line that caused it. Output files
are created readable and writable by the owner only.
"""

import os
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from logreplay.errors import InputFileError, SinkOpenError, SinkWriteError
from logreplay.schema import SinkPaths


SINK_FILE_MODE = 0o600
SINK_NAMES = ("succeeded", "failed", "failed_requests")


@dataclass
class ReplaySinks:
    """
    The three open output logs.

    close_errors is filled in when the sinks are closed, i.e. after the
    open_sinks() block exits.
    """

    succeeded: TextIO
    failed: TextIO
    failed_requests: TextIO
    close_errors: list[SinkWriteError] = field(default_factory=list)


def _owner_only_opener(path: str, flags: int) -> int:
    return os.open(path, flags, SINK_FILE_MODE)


def open_sink(path: Path | str, sink_name: str) -> TextIO:
    """
    Open one output log for appending, creating it if needed.

    Raises:
        SinkOpenError: If the file cannot be opened
    """
    try:
        return open(path, "a", encoding="utf-8", buffering=1, opener=_owner_only_opener)
    except OSError as e:
        raise SinkOpenError(sink=sink_name, path=str(path), underlying_error=str(e)) from e


def close_sink(sink: TextIO, sink_name: str) -> SinkWriteError | None:
    """Close an output log, returning the flush error instead of raising it."""
    try:
        sink.close()
    except (OSError, ValueError) as e:
        return SinkWriteError(sink=sink_name, underlying_error=str(e))
    return None


@contextmanager
def open_sinks(paths: SinkPaths) -> Iterator[ReplaySinks]:
    """
    Open all three output logs, closing them on exit.

    Errors raised while closing are collected in close_errors, not raised.

    Raises:
        SinkOpenError: If any file cannot be opened (already opened ones are closed)
    """
    close_errors: list[SinkWriteError] = []

    def _close(sink: TextIO, sink_name: str) -> None:
        error = close_sink(sink, sink_name)
        if error is not None:
            close_errors.append(error)

    with ExitStack() as stack:
        opened: dict[str, TextIO] = {}
        for sink_name in SINK_NAMES:
            sink = open_sink(getattr(paths, sink_name), sink_name)
            stack.callback(_close, sink, sink_name)
            opened[sink_name] = sink
        yield ReplaySinks(**opened, close_errors=close_errors)


def open_input(path: Path | str) -> TextIO:
    """
    Open the access log for reading.

    Undecodable bytes are replaced rather than aborting the run.

    Raises:
        InputFileError: If the file cannot be opened
    """
    try:
        return open(path, encoding="utf-8", errors="replace", newline="\n")
    except OSError as e:
        raise InputFileError(path=str(path), underlying_error=str(e)) from e


def read_lines(stream: TextIO) -> Iterator[str]:
    """
    Yield each line of the stream without its line terminator.

    Lines end at "\\n" only; a "\\r" directly before it is dropped, any other
    carriage return stays part of the line.
    """
    for raw in stream:
        yield raw.removesuffix("\n").removesuffix("\r")
