"""
Request replay and outcome classification.

The Replayer issues one HTTP GET per reconstructed URL and classifies what
happened:
- status 200: success
- any other status: failure with reason "Unknown"
- transport failure (connect, DNS, timeout, TLS, redirects): failure with
  status 0 and the error text as reason

In dry-run mode the URL is printed and counted as a success without any
network I/O. The response body is never read.
"""

from dataclasses import dataclass
from typing import Any

import httpx
from rich.console import Console


UNKNOWN_FAILURE_REASON = "Unknown"
TRANSPORT_FAILURE_STATUS = 0


@dataclass(frozen=True)
class ReplayOutcome:
    """
    Result of replaying (or simulating) one request.

    Attributes:
        succeeded: Whether the request counts as succeeded
        status_code: HTTP status, or 0 when no response was received
        failure_reason: Why the request failed; None on success
    """

    succeeded: bool
    status_code: int
    failure_reason: str | None = None

    @classmethod
    def ok(cls) -> "ReplayOutcome":
        """Create a successful outcome."""
        return cls(succeeded=True, status_code=200)

    @classmethod
    def fail(cls, status_code: int, reason: str) -> "ReplayOutcome":
        """Create a failed outcome."""
        return cls(succeeded=False, status_code=status_code, failure_reason=reason)


class Replayer:
    """
    Replays URLs as HTTP GET requests.

    Usage:
        with Replayer(timeout_seconds=10) as replayer:
            outcome = replayer.replay("https://example.com/track?x=1")

    Attributes:
        timeout_seconds: Timeout for each live request
        console: Where dry-run URLs are printed
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout_seconds: float = 30.0,
        console: Console | None = None,
    ) -> None:
        """
        Initialize the replayer.

        Args:
            client: HTTP client to use; one is created on first live request if omitted
            timeout_seconds: Timeout for the client created here
            console: Console for dry-run output
        """
        self._client = client
        self._owns_client = client is None
        self.timeout_seconds = timeout_seconds
        self.console = console or Console()

    @property
    def client(self) -> httpx.Client:
        """The HTTP client, created lazily so dry runs never build one."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout_seconds, follow_redirects=True)
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this replayer created it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "Replayer":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager."""
        self.close()

    def replay(self, url: str, dry_run: bool = False) -> ReplayOutcome:
        """
        Replay a URL, or print it when dry_run is set.

        Args:
            url: Absolute URL to request
            dry_run: Print instead of requesting

        Returns:
            The classified outcome; transport errors are returned, never raised
        """
        if dry_run:
            self.console.print(url, markup=False, highlight=False, soft_wrap=True)
            return ReplayOutcome.ok()

        try:
            with self.client.stream("GET", url) as response:
                status_code = response.status_code
        except (httpx.RequestError, httpx.InvalidURL) as e:
            return ReplayOutcome.fail(TRANSPORT_FAILURE_STATUS, str(e) or type(e).__name__)

        if status_code == 200:
            return ReplayOutcome.ok()
        return ReplayOutcome.fail(status_code, UNKNOWN_FAILURE_REASON)
