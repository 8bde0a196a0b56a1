"""
Replay Engine for logreplay.

The ReplayEngine drives each input line through the pipeline:
- Filter: Decide whether the line is admitted
- Reconstruct: Rebuild the replay URL (with optional timestamp)
- Replay: Request the URL, or print it in dry-run mode
- Record: Append the line to the success or failure logs
- Count: Update the run statistics

Execution Flow (per line):
    1. Rejected by the filter: dropped silently, not counted
    2. Not a trackable request (or no timestamp when one is wanted): echoed, not counted
    3. Replayed, recorded, counted as succeeded or failed
    4. Fixed 2 ms pause before the next line

Lines are processed strictly in input order, one at a time. An unparsable
timestamp raises TimestampParseError out of run() and ends the replay.
"""

import time
from collections.abc import Callable, Iterable
from typing import Any

from rich.console import Console

from logreplay.filter import admit
from logreplay.reconstruct import build_request
from logreplay.recorder import OutcomeRecorder
from logreplay.replayer import Replayer
from logreplay.schema import LineStatus, ReplayConfig
from logreplay.stats import RunStatistics, StatsAggregator


# Constant-rate throttle between replayed lines; never adapts to failures.
THROTTLE_SECONDS = 0.002


class ReplayEngine:
    """
    Orchestrates the replay of an access log.

    Usage:
        with open_sinks(config.sinks) as sinks:
            recorder = OutcomeRecorder(sinks.succeeded, sinks.failed, sinks.failed_requests)
            with ReplayEngine(config, recorder) as engine:
                stats = engine.run(read_lines(stream))

    Attributes:
        config: The validated run configuration
        recorder: Writes outcomes to the output logs
        replayer: Issues (or prints) requests
        aggregator: Running statistics
    """

    def __init__(
        self,
        config: ReplayConfig,
        recorder: OutcomeRecorder,
        replayer: Replayer | None = None,
        aggregator: StatsAggregator | None = None,
        console: Console | None = None,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: The validated run configuration
            recorder: Outcome recorder bound to the output logs
            replayer: Replayer to use (one is built from config if omitted)
            aggregator: Statistics aggregator (a fresh one if omitted)
            console: Console for echoed lines and dry-run URLs
            sleep: Called with THROTTLE_SECONDS after every replay
        """
        self.config = config
        self.console = console or Console()
        self.recorder = recorder
        self._owns_replayer = replayer is None
        self.replayer = replayer or Replayer(
            timeout_seconds=config.timeout_seconds,
            console=self.console,
        )
        self.aggregator = aggregator or StatsAggregator(console=self.console)
        self._sleep = sleep

    @property
    def stats(self) -> RunStatistics:
        """Statistics accumulated so far."""
        return self.aggregator.stats

    def close(self) -> None:
        """Close the replayer if the engine created it."""
        if self._owns_replayer:
            self.replayer.close()

    def __enter__(self) -> "ReplayEngine":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager."""
        self.close()

    def process_line(self, line: str) -> LineStatus:
        """
        Run one line through filter, reconstruction, replay and recording.

        Args:
            line: A log line without its line terminator

        Returns:
            Where the line ended up

        Raises:
            TimestampParseError: If timestamps are enabled and the line's is unparsable
        """
        if not admit(line, self.config.filter):
            self.aggregator.note_rejected()
            return LineStatus.REJECTED

        request = build_request(line, self.config.base_url, self.config.include_timestamp)
        if request is None:
            self.console.print(line, markup=False, highlight=False, soft_wrap=True)
            self.aggregator.note_skipped()
            return LineStatus.SKIPPED

        outcome = self.replayer.replay(request.url, dry_run=self.config.dry_run)
        self.recorder.record(line, outcome, request.url)
        self._sleep(THROTTLE_SECONDS)
        self.aggregator.increment(outcome)

        return LineStatus.SUCCEEDED if outcome.succeeded else LineStatus.FAILED

    def run(self, lines: Iterable[str]) -> RunStatistics:
        """
        Replay every line in order.

        Args:
            lines: Log lines without line terminators

        Returns:
            The final run statistics
        """
        for line in lines:
            self.process_line(line)
        return self.stats
