"""
Request reconstruction from access-log lines.

Given a line such as:

    1.2.3.4 - - [10/Oct/2023:13:55:36 -0700] "GET /track?x=1 HTTP/1.1" 200

build_request() extracts the request target (`/track?x=1`), prefixes it with
the base URL and, if asked, appends the original request time as
`&timestamp=<epoch-ms>`.

Lines that are not trackable GET requests, or that lack the bracketed
timestamp when one is requested, yield None and are skipped by the engine.
A bracketed timestamp that cannot be parsed raises TimestampParseError,
which ends the run.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from logreplay.errors import TimestampParseError


REQUEST_MARKER = "GET /track"
PROTOCOL_MARKER = " HTTP/"
METHOD_PREFIX_LENGTH = len("GET ")

# e.g. 10/Oct/2023:13:55:36 -0700
ACCESS_LOG_TIME_FORMAT = "%d/%b/%Y:%H:%M:%S %z"


@dataclass(frozen=True)
class ReconstructedRequest:
    """
    A replay URL rebuilt from one log line.

    Attributes:
        url: Absolute URL to request
        path: Request target taken from the line
        timestamp_ms: Original request time in UTC epoch milliseconds, if appended
    """

    url: str
    path: str
    timestamp_ms: int | None = None


def extract_path(line: str) -> str | None:
    """
    Return the request target of a `GET /track... HTTP/` line.

    The target starts right after `GET ` and ends at the first ` HTTP/` in the
    line. Returns None if either marker is missing or the end marker does not
    come after the start.
    """
    marker = line.find(REQUEST_MARKER)
    if marker == -1:
        return None

    start = marker + METHOD_PREFIX_LENGTH
    end = line.find(PROTOCOL_MARKER)
    if end == -1 or end <= start:
        return None

    return line[start:end]


def extract_timestamp(line: str) -> int | None:
    """
    Parse the bracketed access-log timestamp into UTC epoch milliseconds.

    The field is the text between the first `[` and the first `]`. The source
    format has one-second resolution, so the result is always a multiple of 1000.

    Returns:
        Epoch milliseconds, or None if the line has no `[...]` field (a
        missing or inverted bracket pair)

    Raises:
        TimestampParseError: If the field does not follow the access-log layout
    """
    open_bracket = line.find("[")
    close_bracket = line.find("]")
    if open_bracket == -1 or close_bracket == -1 or close_bracket <= open_bracket:
        return None

    field = line[open_bracket + 1 : close_bracket]
    try:
        parsed = datetime.strptime(field, ACCESS_LOG_TIME_FORMAT)
    except ValueError as e:
        raise TimestampParseError(
            line=line,
            timestamp=field,
            underlying_error=str(e),
        ) from e

    return int(parsed.astimezone(UTC).timestamp()) * 1000


def build_request(
    line: str,
    base_url: str,
    include_timestamp: bool = False,
) -> ReconstructedRequest | None:
    """
    Rebuild the replay URL for a log line.

    Args:
        line: The raw log line
        base_url: Target prefix, e.g. https://example.com
        include_timestamp: Append `&timestamp=<epoch-ms>` from the line

    Returns:
        The reconstructed request, or None if the line is not a trackable
        request (or, with include_timestamp, has no bracketed timestamp)

    Raises:
        TimestampParseError: If include_timestamp is set and the timestamp is unparsable
    """
    path = extract_path(line)
    if path is None:
        return None

    url = base_url + path
    if not include_timestamp:
        return ReconstructedRequest(url=url, path=path)

    timestamp_ms = extract_timestamp(line)
    if timestamp_ms is None:
        return None

    return ReconstructedRequest(
        url=f"{url}&timestamp={timestamp_ms}",
        path=path,
        timestamp_ms=timestamp_ms,
    )
