"""
Console report for logreplay.

The three summary lines are printed by the StatsAggregator. This module adds
the settings table shown by `logreplay validate` and, in verbose mode, the
counters that are not part of the total.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from logreplay.errors import SinkWriteError
from logreplay.schema import FilterMode, ReplayConfig
from logreplay.stats import RunStatistics


def print_config(config: ReplayConfig, console: Console | None = None) -> None:
    """
    Print the resolved run settings.

    Args:
        config: The configuration to show
        console: Rich Console instance (creates one if not provided)
    """
    if console is None:
        console = Console()

    table = _key_value_table()
    mode = "[yellow]dry run[/yellow]" if config.dry_run else "[green]live[/green]"
    table.add_row("Mode", mode)
    table.add_row("Base URL", escape(config.base_url))
    table.add_row("Log file", escape(str(config.log_file_path)))
    table.add_row("Timestamps", "yes" if config.include_timestamp else "no")
    table.add_row("Filter", _describe_filter(config))
    table.add_row("Timeout", f"{config.timeout_seconds:g}s")
    table.add_row("Succeeded log", escape(str(config.sinks.succeeded)))
    table.add_row("Failed log", escape(str(config.sinks.failed)))
    table.add_row("Failed requests log", escape(str(config.sinks.failed_requests)))

    console.print(table)


def print_run_details(
    config: ReplayConfig,
    stats: RunStatistics,
    write_errors: list[SinkWriteError] | None = None,
    console: Console | None = None,
) -> None:
    """
    Print run settings and the counters outside the total.

    Args:
        config: The configuration the run used
        stats: Final statistics
        write_errors: Sink write failures reported during the run
        console: Rich Console instance (creates one if not provided)
    """
    if console is None:
        console = Console()

    console.print()
    console.print("[bold]Run Details[/bold]")
    print_config(config, console)
    console.print()

    table = _key_value_table()
    table.add_row("Skipped (not trackable)", str(stats.skipped))
    table.add_row("Rejected by filter", str(stats.rejected))
    errors = write_errors or []
    table.add_row(
        "Sink write errors",
        f"[red]{len(errors)}[/red]" if errors else "0",
    )
    console.print(table)


def _key_value_table() -> Table:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="dim")
    table.add_column("Value")
    return table


def _describe_filter(config: ReplayConfig) -> str:
    """Format the filter setting."""
    replay_filter = config.filter
    if replay_filter.mode == FilterMode.NONE:
        return "[dim]none[/dim]"
    return f"{replay_filter.mode.value} {escape(replay_filter.pattern.pattern)}"
