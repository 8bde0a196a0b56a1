"""Running counters for a replay run."""

from dataclasses import dataclass

from rich.console import Console

from logreplay.replayer import ReplayOutcome


@dataclass
class RunStatistics:
    """
    Counters for one run.

    Attributes:
        total: Lines that were replayed (succeeded + failed)
        succeeded: Replays that succeeded
        failed: Replays that failed
        skipped: Admitted lines that were not trackable requests (not in total)
        rejected: Lines dropped by the filter (not in total)
    """

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    rejected: int = 0


class StatsAggregator:
    """Accumulates RunStatistics and prints the final summary."""

    def __init__(self, console: Console | None = None) -> None:
        self.stats = RunStatistics()
        self.console = console or Console()

    def increment(self, outcome: ReplayOutcome) -> None:
        """Count one replayed line."""
        self.stats.total += 1
        if outcome.succeeded:
            self.stats.succeeded += 1
        else:
            self.stats.failed += 1

    def note_skipped(self) -> None:
        self.stats.skipped += 1

    def note_rejected(self) -> None:
        self.stats.rejected += 1

    def report(self) -> None:
        """Print the succeeded, failed and total counts."""
        self.console.print(f"succeeded: {self.stats.succeeded}", highlight=False)
        self.console.print(f"failed: {self.stats.failed}", highlight=False)
        self.console.print(f"total: {self.stats.total}", highlight=False)
