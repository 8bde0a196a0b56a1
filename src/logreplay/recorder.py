"""
Durable recording of replay outcomes.

Each replayed line lands in exactly one of two append-only logs:
- succeeded: the original line
- failed: the original line, plus a `status,"reason",url` record in the
  failed-requests log

A sink that cannot be written is reported on the console and skipped; the
run carries on with the next sink and the next line.
"""

from typing import TextIO

from rich.console import Console
from rich.markup import escape

from logreplay.errors import SinkWriteError
from logreplay.replayer import ReplayOutcome


def format_failure_record(outcome: ReplayOutcome, url: str) -> str:
    """Format the failed-requests record for an outcome, without newline."""
    return f'{outcome.status_code},"{outcome.failure_reason}",{url}'


class OutcomeRecorder:
    """
    Appends replayed lines to the success or failure logs.

    Attributes:
        succeeded: Sink for lines that replayed successfully
        failed: Sink for lines that failed
        failed_requests: Sink for structured failure records
        write_errors: Write failures reported so far
    """

    def __init__(
        self,
        succeeded: TextIO,
        failed: TextIO,
        failed_requests: TextIO,
        console: Console | None = None,
    ) -> None:
        self.succeeded = succeeded
        self.failed = failed
        self.failed_requests = failed_requests
        self.console = console or Console()
        self.write_errors: list[SinkWriteError] = []

    def record(self, line: str, outcome: ReplayOutcome, url: str) -> None:
        """
        Record one replay outcome.

        Args:
            line: The original log line
            outcome: What happened when the line was replayed
            url: The URL that was replayed
        """
        if outcome.succeeded:
            self._write("succeeded", self.succeeded, line)
            return

        self._write("failed", self.failed, line)
        self._write("failed_requests", self.failed_requests, format_failure_record(outcome, url))

    def _write(self, sink_name: str, sink: TextIO, text: str) -> None:
        try:
            sink.write(text + "\n")
            sink.flush()
        except (OSError, ValueError) as e:
            error = SinkWriteError(sink=sink_name, underlying_error=str(e))
            self.write_errors.append(error)
            self.console.print(text, markup=False, highlight=False, soft_wrap=True)
            self.console.print(f"[red]{escape(error.message)}[/red]")
