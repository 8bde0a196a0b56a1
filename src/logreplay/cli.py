"""
CLI entry point for logreplay.

This module provides the Typer-based command-line interface for logreplay.

Commands:
    run         Replay an access log against a base URL
    validate    Check the configuration and show the resolved settings

Every option can also come from a YAML file passed with --config; options
given on the command line take precedence over the file.

Architecture Note:
    The CLI only resolves configuration and opens files. Replaying happens in
    ReplayEngine, which can be used programmatically without the CLI.
"""

import json
import traceback
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.markup import escape

from logreplay import __version__
from logreplay.engine import ReplayEngine
from logreplay.errors import LogReplayError, TimestampParseError
from logreplay.recorder import OutcomeRecorder
from logreplay.report import config_to_dict, generate_json_summary, print_config, print_run_details
from logreplay.schema import ReplayConfig, build_config, load_config, merge_options
from logreplay.sinks import open_input, open_sinks, read_lines

# Initialize Typer app with metadata
app = typer.Typer(
    name="logreplay",
    help="Replay HTTP access-log traffic against a target host.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()


# =============================================================================
# Shared Options
# =============================================================================

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="YAML file with replay settings. Command-line options override it.",
        exists=True,
        readable=True,
        resolve_path=True,
    ),
]
BaseURLOption = Annotated[
    Optional[str],
    typer.Option(
        "--base-url",
        help="Host to which requests will be replayed. Eg: https://website.com",
    ),
]
LogFileOption = Annotated[
    Optional[Path],
    typer.Option(
        "--log-file-path",
        help="Path of the access log. Eg: /var/log/nginx/access.log",
    ),
]
DryRunOption = Annotated[
    Optional[bool],
    typer.Option(
        "--dry-run/--no-dry-run",
        help="Only print the URLs instead of requesting them.",
    ),
]
TimestampOption = Annotated[
    Optional[bool],
    typer.Option(
        "--include-timestamp/--no-include-timestamp",
        help="Append the request's UNIX timestamp (ms) to the URL.",
    ),
]
RegexFilterOption = Annotated[
    Optional[str],
    typer.Option(
        "--regex-filter",
        help="Only replay lines matching this regular expression.",
    ),
]
RegexExcludeOption = Annotated[
    Optional[str],
    typer.Option(
        "--regex-exclude",
        help="Skip lines matching this regular expression.",
    ),
]
TimeoutOption = Annotated[
    Optional[float],
    typer.Option(
        "--timeout",
        help="Per-request timeout in seconds.",
    ),
]
SucceededLogOption = Annotated[
    Optional[Path],
    typer.Option("--succeeded-log", help="Log of lines that replayed successfully."),
]
FailedLogOption = Annotated[
    Optional[Path],
    typer.Option("--failed-log", help="Log of lines that failed to replay."),
]
FailedRequestsLogOption = Annotated[
    Optional[Path],
    typer.Option("--failed-requests-log", help='Log of status,"reason",url failure records.'),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        help="Enable verbose output.",
    ),
]
DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Enable debug mode with full error tracebacks.",
    ),
]
JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Output results in JSON format.",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]logreplay[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    logreplay - Replay access-log traffic against a target host.

    Reads an access log line by line, rebuilds each /track request against
    the base URL and records which replays succeeded and which failed.
    """
    pass


def _resolve_config(config_path: Path | None, options: dict[str, Any]) -> ReplayConfig:
    """Merge the optional YAML file with command-line options and validate."""
    if config_path is not None:
        return load_config(config_path, overrides=options)
    return build_config(merge_options({}, options))


def _collect_options(
    base_url: str | None,
    log_file_path: Path | None,
    dry_run: bool | None,
    include_timestamp: bool | None,
    regex_filter: str | None,
    regex_exclude: str | None,
    timeout: float | None,
    succeeded_log: Path | None,
    failed_log: Path | None,
    failed_requests_log: Path | None,
) -> dict[str, Any]:
    """Gather command-line options in configuration-file form."""
    return {
        "base_url": base_url,
        "log_file_path": log_file_path,
        "dry_run": dry_run,
        "include_timestamp": include_timestamp,
        "regex_filter": regex_filter,
        "regex_exclude": regex_exclude,
        "timeout_seconds": timeout,
        "sinks": {
            "succeeded": succeeded_log,
            "failed": failed_log,
            "failed_requests": failed_requests_log,
        },
    }


@app.command()
def run(
    config_path: ConfigOption = None,
    base_url: BaseURLOption = None,
    log_file_path: LogFileOption = None,
    dry_run: DryRunOption = None,
    include_timestamp: TimestampOption = None,
    regex_filter: RegexFilterOption = None,
    regex_exclude: RegexExcludeOption = None,
    timeout: TimeoutOption = None,
    succeeded_log: SucceededLogOption = None,
    failed_log: FailedLogOption = None,
    failed_requests_log: FailedRequestsLogOption = None,
    verbose: VerboseOption = False,
    debug: DebugOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Replay an access log against a base URL.

    Every line containing "GET /track... HTTP/" is requested as base URL +
    path. Successful lines are appended to the succeeded log, failed lines to
    the failed log with a status,"reason",url record in the failed requests log.

    Example:
        $ logreplay run --base-url https://website.com --log-file-path access.log --dry-run
    """
    options = _collect_options(
        base_url, log_file_path, dry_run, include_timestamp, regex_filter,
        regex_exclude, timeout, succeeded_log, failed_log, failed_requests_log,
    )

    try:
        config = _resolve_config(config_path, options)
    except LogReplayError as e:
        _report_error("config_error", e, json_output, debug)
        raise typer.Exit(code=1)

    # Per-line output goes to stderr so stdout stays valid JSON
    out = Console(stderr=True) if json_output else console

    if verbose and not json_output:
        if config_path is not None:
            console.print(f"[dim]Loaded config: {escape(str(config_path))}[/dim]")
        console.print(f"[dim]Replaying {escape(str(config.log_file_path))} against {escape(config.base_url)}[/dim]")

    try:
        stream = open_input(config.log_file_path)
        with stream, open_sinks(config.sinks) as sinks:
            recorder = OutcomeRecorder(
                sinks.succeeded,
                sinks.failed,
                sinks.failed_requests,
                console=out,
            )
            with ReplayEngine(config, recorder, console=out) as engine:
                stats = engine.run(read_lines(stream))
        for error in sinks.close_errors:
            out.print(f"[red]{escape(error.message)}[/red]")
        write_errors = recorder.write_errors + sinks.close_errors
    except TimestampParseError as e:
        _report_error("timestamp_error", e, json_output, debug)
        raise typer.Exit(code=1)
    except LogReplayError as e:
        _report_error("replay_error", e, json_output, debug)
        raise typer.Exit(code=1)
    except Exception as e:
        _report_error("unexpected_error", e, json_output, debug)
        raise typer.Exit(code=1)

    if json_output:
        print(generate_json_summary(config, stats, write_errors))
        return

    engine.aggregator.report()
    if verbose:
        print_run_details(config, stats, write_errors, console=console)


@app.command()
def validate(
    config_path: ConfigOption = None,
    base_url: BaseURLOption = None,
    log_file_path: LogFileOption = None,
    dry_run: DryRunOption = None,
    include_timestamp: TimestampOption = None,
    regex_filter: RegexFilterOption = None,
    regex_exclude: RegexExcludeOption = None,
    timeout: TimeoutOption = None,
    succeeded_log: SucceededLogOption = None,
    failed_log: FailedLogOption = None,
    failed_requests_log: FailedRequestsLogOption = None,
    debug: DebugOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Check the replay configuration without replaying anything.

    Example:
        $ logreplay validate --config replay.yaml
    """
    options = _collect_options(
        base_url, log_file_path, dry_run, include_timestamp, regex_filter,
        regex_exclude, timeout, succeeded_log, failed_log, failed_requests_log,
    )

    try:
        config = _resolve_config(config_path, options)
    except LogReplayError as e:
        _report_error("config_error", e, json_output, debug)
        raise typer.Exit(code=1)

    if json_output:
        print(json.dumps({"valid": True, "config": config_to_dict(config)}, indent=2))
        return

    console.print("[green]✓[/green] Configuration is valid")
    print_config(config, console)


def _report_error(error_type: str, error: Exception, json_output: bool, debug: bool) -> None:
    """Print an error as text or JSON."""
    if json_output:
        output: dict[str, Any] = {
            "error": True,
            "error_type": error_type,
            "message": str(error),
        }
        if isinstance(error, LogReplayError):
            output["details"] = error.to_dict()
        if debug:
            output["traceback"] = traceback.format_exc()
        print(json.dumps(output, indent=2, default=str))
        return

    console.print(f"[red]{escape(str(error))}[/red]")
    if debug:
        console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")


if __name__ == "__main__":
    app()
